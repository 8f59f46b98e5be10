# reelcart/models/host.py
"""Host model - presenters appearing in a show's videos"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Host(Base):
    __tablename__ = "hosts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    bio = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    movie_hosts = relationship(
        "MovieHost",
        back_populates="host",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def movies(self) -> list:
        """Movies this host appears in, with the join rows resolved"""
        return [link.movie for link in self.movie_hosts]

    def __repr__(self):
        return f"<Host(id={self.id}, name={self.name})>"
