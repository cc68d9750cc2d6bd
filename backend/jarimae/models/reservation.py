from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Date, Time, DateTime, Index, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from jarimae.core.database import Base


class ReservationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


# Statuses that occupy capacity
ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

# Allowed status changes; terminal statuses map to nothing
STATUS_TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {
        ReservationStatus.COMPLETED,
        ReservationStatus.CANCELLED,
        ReservationStatus.NO_SHOW,
    },
    ReservationStatus.CANCELLED: set(),
    ReservationStatus.COMPLETED: set(),
    ReservationStatus.NO_SHOW: set(),
}


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index("ix_reservations_store_date_status", "store_id", "reservation_date", "status"),
        CheckConstraint("party_size > 0", name="ck_reservations_party_size"),
    )

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)  # store-local wall clock
    party_size = Column(Integer, nullable=False)
    estimated_duration = Column(Integer, nullable=False)  # minutes
    status = Column(SQLEnum(ReservationStatus, values_callable=lambda obj: [e.value for e in obj]), default=ReservationStatus.PENDING, nullable=False)
    special_requests = Column(String(500))
    contact_name = Column(String(20), nullable=False)
    contact_phone = Column(String(20), nullable=False)
    cancellation_reason = Column(String(200))
    total_amount = Column(Numeric(10, 2))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    store = relationship("Store", back_populates="reservations")
    customer = relationship("User", back_populates="reservations")
    notifications = relationship("Notification", back_populates="reservation", passive_deletes=True)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def can_transition_to(self, new_status: ReservationStatus) -> bool:
        return new_status in STATUS_TRANSITIONS.get(self.status, set())

    def __repr__(self):
        return f"<Reservation(id={self.id}, store_id={self.store_id}, {self.reservation_date} {self.reservation_time}, party={self.party_size}, status={self.status})>"
