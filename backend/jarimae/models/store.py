from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from jarimae.core.database import Base


class StoreStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"
    SUSPENDED = "SUSPENDED"
    DELETED = "DELETED"


class CuisineType(str, enum.Enum):
    KOREAN = "KOREAN"
    JAPANESE = "JAPANESE"
    CHINESE = "CHINESE"
    WESTERN = "WESTERN"
    ITALIAN = "ITALIAN"
    CAFE = "CAFE"
    BAR = "BAR"
    BBQ = "BBQ"
    SEAFOOD = "SEAFOOD"
    VEGETARIAN = "VEGETARIAN"
    OTHER = "OTHER"


class PriceRange(str, enum.Enum):
    BUDGET = "BUDGET"
    MID_RANGE = "MID_RANGE"
    FINE_DINING = "FINE_DINING"


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(100), nullable=False)
    description = Column(String(1000))
    phone = Column(String(20), nullable=False)
    address = Column(String(200), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    cuisine_type = Column(SQLEnum(CuisineType, values_callable=lambda obj: [e.value for e in obj]), default=CuisineType.OTHER, nullable=False)
    price_range = Column(SQLEnum(PriceRange, values_callable=lambda obj: [e.value for e in obj]), default=PriceRange.MID_RANGE, nullable=False)

    # Seating
    capacity = Column(Integer, nullable=False)  # max simultaneous guests
    average_meal_duration = Column(Integer, nullable=False, default=90)  # minutes
    accepts_reservations = Column(Boolean, default=True, nullable=False)
    accepts_walk_ins = Column(Boolean, default=True, nullable=False)

    has_parking = Column(Boolean, default=False)
    has_wifi = Column(Boolean, default=False)
    has_private_room = Column(Boolean, default=False)

    status = Column(SQLEnum(StoreStatus, values_callable=lambda obj: [e.value for e in obj]), default=StoreStatus.PENDING, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="stores")
    business_hours = relationship(
        "BusinessHour",
        back_populates="store",
        cascade="all, delete-orphan",
        order_by="BusinessHour.day_of_week",
    )
    reservations = relationship("Reservation", back_populates="store", passive_deletes=True)

    def __repr__(self):
        return f"<Store(id={self.id}, name={self.name}, status={self.status})>"
