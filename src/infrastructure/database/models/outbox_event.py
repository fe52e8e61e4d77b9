"""
Outbox event SQLAlchemy model.
"""

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text

from .base import Base, utc_now


class OutboxEventModel(Base):
    """Events written alongside job changes, published asynchronously."""

    __tablename__ = "outbox_events"

    id = Column(String(36), primary_key=True)
    event_type = Column(String(50), nullable=False, index=True)
    aggregate_id = Column(String(64), nullable=False, index=True)
    event_data = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    retry_count = Column(Integer, nullable=False, default=0)
    max_retries = Column(Integer, nullable=False, default=3)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    processed_at = Column(DateTime(timezone=True))
    error_message = Column(Text)

    __table_args__ = (Index("idx_outbox_status_created", "status", "created_at"),)

    def __repr__(self) -> str:
        return f"<OutboxEvent(id={self.id}, type={self.event_type}, status={self.status})>"
