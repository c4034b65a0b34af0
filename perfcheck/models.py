from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from .database import Base


class Report(Base):
    """One persisted audit run. Rows are only ever inserted."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    url = Column(String(2048), nullable=False, index=True)
    performance = Column(Float, default=0.0, nullable=False)
    accessibility = Column(Float, default=0.0, nullable=False)
    best_practices = Column(Float, default=0.0, nullable=False)
    seo = Column(Float, default=0.0, nullable=False)
    load_time = Column(Float, default=0.0, nullable=False)        # ms
    resource_size = Column(Float, default=0.0, nullable=False)    # bytes
    request_count = Column(Integer, default=0, nullable=False)
    timestamp = Column(DateTime, nullable=False)                  # UTC, naive

    __table_args__ = (
        Index("ix_reports_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<Report(id={self.id}, url='{self.url}', performance={self.performance}, timestamp={self.timestamp})>"
