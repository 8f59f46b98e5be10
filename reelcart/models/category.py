# reelcart/models/category.py
"""Category model - groups movies by type (Tech Reviews, Unboxings, etc)"""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Movies keep existing when their category goes away (ON DELETE SET NULL)
    movies = relationship("Movie", back_populates="category", passive_deletes=True)

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"
