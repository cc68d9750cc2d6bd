from sqlalchemy import Column, Integer, ForeignKey, Boolean, Time, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from jarimae.core.database import Base


class BusinessHour(Base):
    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("store_id", "day_of_week", name="uq_business_hours_store_day"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_business_hours_day_of_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)

    # Relationships
    store = relationship("Store", back_populates="business_hours")

    def __repr__(self):
        return f"<BusinessHour(store_id={self.store_id}, day={self.day_of_week}, {self.open_time}-{self.close_time}, closed={self.is_closed})>"
