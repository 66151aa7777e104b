"""Watch history / favorites entry model"""

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from ..database import Base


class WatchEntry(Base):
    """Entry in a bounded, most-recent-first list (history or favorites)"""

    __tablename__ = "watch_entries"
    __table_args__ = (
        UniqueConstraint("list_name", "content_id", "mode", name="uq_watch_entry"),
    )

    id = Column(Integer, primary_key=True, index=True)
    list_name = Column(String(20), nullable=False, index=True)  # 'history' or 'favorites'
    content_id = Column(String(50), nullable=False)
    mode = Column(String(10), nullable=False)  # 'movie' or 'tv'
    title = Column(String(255))
    poster = Column(Text)
    season = Column(Integer)
    episode = Column(Integer)
    seq = Column(Integer, nullable=False, index=True)  # higher = more recent
    touched_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<WatchEntry {self.list_name} {self.mode}:{self.content_id}>"
