# reelcart/models/movie.py
"""
Movie model for the storefront catalog

- Scalar category (nullable, cleared when the category is deleted)
- Many-to-many hosts through the movie_hosts join table
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class MovieHost(Base):
    """Join row between a movie and one of its hosts"""
    __tablename__ = "movie_hosts"

    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True)
    host_id = Column(Integer, ForeignKey("hosts.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    movie = relationship("Movie", back_populates="movie_hosts")
    host = relationship("Host", back_populates="movie_hosts")

    def __repr__(self):
        return f"<MovieHost(movie_id={self.movie_id}, host_id={self.host_id})>"


class Movie(Base):
    __tablename__ = "movies"

    # ==================== PRIMARY KEY ====================
    id = Column(Integer, primary_key=True, index=True)

    # ==================== BASIC INFO ====================
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)

    # ==================== MEDIA URLS ====================
    video_url = Column(String(500), nullable=False)  # HLS manifest or direct file URL
    thumbnail_url = Column(String(500), nullable=False)

    # ==================== MOVIE DETAILS ====================
    duration = Column(String(50), nullable=True)  # Display string, e.g. "1h 32m"
    release_year = Column(Integer, nullable=True)
    rating = Column(String(20), nullable=True)
    cast = Column(Text, nullable=True)
    director = Column(String(255), nullable=True)

    # ==================== SHOW METADATA ====================
    show = Column(String(255), nullable=True)
    products_reviewed = Column(Text, nullable=True)
    key_highlights = Column(Text, nullable=True)
    additional_context = Column(Text, nullable=True)

    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ==================== TIMESTAMPS ====================
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # ==================== RELATIONSHIPS ====================
    category = relationship("Category", back_populates="movies", foreign_keys=[category_id])

    movie_hosts = relationship(
        "MovieHost",
        back_populates="movie",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MovieHost.host_id",
    )

    @property
    def hosts(self) -> list:
        """Flattened hosts; the join wrapper never leaves the model"""
        return [link.host for link in self.movie_hosts]

    @property
    def host_ids(self) -> list:
        return [link.host_id for link in self.movie_hosts]

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}')>"
