"""Cached popular movie model"""

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class CachedMovie(Base):
    """Popular movie copied from TMDB for offline browsing"""

    __tablename__ = "movies"

    id = Column(Integer, primary_key=True)  # TMDB id
    title = Column(String(255), nullable=False, index=True)
    overview = Column(Text)
    poster_path = Column(Text)
    backdrop_path = Column(Text)
    release_date = Column(String(10))
    vote_average = Column(Float)
    genre_ids = Column(Text)  # JSON array
    popularity = Column(Float, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return f"<CachedMovie {self.id} {self.title}>"
