"""
Job status history and location SQLAlchemy models.
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base, utc_now


class JobStatusHistoryModel(Base):
    """One row per status a job has been in."""

    __tablename__ = "job_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    status = Column(String(40), nullable=False)
    notes = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    recorded_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    job = relationship("JobModel", back_populates="status_history")

    __table_args__ = (Index("idx_status_history_job_time", "job_id", "recorded_at"),)

    def __repr__(self) -> str:
        return f"<JobStatusHistory(job_id={self.job_id}, status={self.status})>"


class JobLocationModel(Base):
    """Append-only engineer position samples."""

    __tablename__ = "job_locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy_m = Column(Float)
    tracking_type = Column(String(20), nullable=False, default="milestone")
    recorded_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    job = relationship("JobModel", back_populates="locations")

    __table_args__ = (Index("idx_job_locations_job_time", "job_id", "recorded_at"),)

    def __repr__(self) -> str:
        return f"<JobLocation(job_id={self.job_id}, at={self.recorded_at})>"
