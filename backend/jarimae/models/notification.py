from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from jarimae.core.database import Base


class NotificationType(str, enum.Enum):
    RESERVATION_CREATED = "reservation_created"
    RESERVATION_UPDATED = "reservation_updated"
    RESERVATION_STATUS_CHANGED = "reservation_status_changed"
    GENERAL = "general"


class Notification(Base):
    """An in-app message about a reservation, addressed to one user (store owner or customer)."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Kept when the reservation row goes away
    reservation_id = Column(Integer, ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True)
    type = Column(SQLEnum(NotificationType, values_callable=lambda obj: [e.value for e in obj]), default=NotificationType.GENERAL, nullable=False)
    message = Column(String(500), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="notifications")
    reservation = relationship("Reservation", back_populates="notifications")

    def mark(self, is_read: bool) -> None:
        self.is_read = is_read
        self.read_at = datetime.now(timezone.utc) if is_read else None

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, reservation_id={self.reservation_id}, type={self.type}, read={self.is_read})>"
