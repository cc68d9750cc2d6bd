"""
Sample Data Seeder

Generates demo data for the Jarimae reservation service:
- An admin, three store owners and a handful of customers
- Stores with a full week of business hours
- Upcoming reservations booked through the admission controller

Run with: python -m jarimae.scripts.seed_data
"""

import random
from datetime import date, time, timedelta
from typing import List

from sqlalchemy.orm import Session
from jarimae.core.database import SessionLocal, Base
import jarimae.models  # noqa: F401
from jarimae.core.errors import ReservationError
from jarimae.core.security import get_password_hash
from jarimae.models.business_hour import BusinessHour
from jarimae.models.store import Store, StoreStatus, CuisineType, PriceRange
from jarimae.models.user import User, UserRole
from jarimae.services.admission import BookingAdmissionController, BookingRequest
from jarimae.services.schedule import day_of_week


STORE_DATA = [
    {"name": "Hanok Table", "cuisine_type": CuisineType.KOREAN, "price_range": PriceRange.MID_RANGE,
     "address": "12 Bukchon-ro, Jongno-gu, Seoul", "phone": "02-123-4567", "capacity": 40, "average_meal_duration": 90},
    {"name": "Sushi Umi", "cuisine_type": CuisineType.JAPANESE, "price_range": PriceRange.FINE_DINING,
     "address": "45 Apgujeong-ro, Gangnam-gu, Seoul", "phone": "02-234-5678", "capacity": 12, "average_meal_duration": 120},
    {"name": "Trattoria Sole", "cuisine_type": CuisineType.ITALIAN, "price_range": PriceRange.MID_RANGE,
     "address": "8 Itaewon-ro, Yongsan-gu, Seoul", "phone": "02-345-6789", "capacity": 30, "average_meal_duration": 90},
    {"name": "Bean Corner", "cuisine_type": CuisineType.CAFE, "price_range": PriceRange.BUDGET,
     "address": "101 Yeonnam-ro, Mapo-gu, Seoul", "phone": "02-456-7890", "capacity": 16, "average_meal_duration": 60},
]

CUSTOMER_NAMES = ["Kim Minji", "Lee Junho", "Park Seoyeon", "Choi Jiwoo", "Jung Haneul"]


def weekly_hours(open_at: time, close_at: time, closed_days=(1,)) -> List[BusinessHour]:
    """Seven rows, closed on the given Sunday-based days."""
    return [
        BusinessHour(day_of_week=d, open_time=open_at, close_time=close_at, is_closed=d in closed_days)
        for d in range(7)
    ]


def create_users(db: Session) -> dict:
    print("Creating users...")
    admin = User(email="admin@jarimae.kr", name="Jarimae Admin", role=UserRole.ADMIN,
                 password_hash=get_password_hash("admin1234"))
    owners = [
        User(email=f"owner{i}@jarimae.kr", name=f"Owner {i}", role=UserRole.OWNER,
             password_hash=get_password_hash("owner1234"))
        for i in range(1, 4)
    ]
    customers = [
        User(email=f"customer{i}@jarimae.kr", name=name, role=UserRole.CUSTOMER,
             phone=f"010-{1000 + i:04d}-{5000 + i:04d}",
             password_hash=get_password_hash("customer1234"))
        for i, name in enumerate(CUSTOMER_NAMES, start=1)
    ]
    db.add_all([admin, *owners, *customers])
    db.commit()
    print(f"Created 1 admin, {len(owners)} owners, {len(customers)} customers")
    return {"admin": admin, "owners": owners, "customers": customers}


def create_stores(db: Session, owners: List[User]) -> List[Store]:
    print("Creating stores...")
    stores = []
    for i, data in enumerate(STORE_DATA):
        store = Store(
            **data,
            owner_id=owners[i % len(owners)].id,
            status=StoreStatus.ACTIVE,
            accepts_reservations=True,
        )
        if data["cuisine_type"] == CuisineType.CAFE:
            store.business_hours = weekly_hours(time(9, 0), time(21, 0), closed_days=())
        else:
            store.business_hours = weekly_hours(time(11, 30), time(22, 0))
        stores.append(store)
    db.add_all(stores)
    db.commit()
    print(f"Created {len(stores)} stores")
    return stores


def create_reservations(db: Session, stores: List[Store], customers: List[User], days: int = 7) -> int:
    print(f"Booking reservations for the next {days} days...")
    controller = BookingAdmissionController(db)
    rng = random.Random(42)
    booked = 0
    for offset in range(1, days + 1):
        target = date.today() + timedelta(days=offset)
        for store in stores:
            hours = next(h for h in store.business_hours if h.day_of_week == day_of_week(target))
            if hours.is_closed:
                continue
            for _ in range(3):
                customer = rng.choice(customers)
                slot = time(rng.choice([12, 13, 18, 19]), rng.choice([0, 30]))
                try:
                    controller.admit(BookingRequest(
                        store_id=store.id,
                        reservation_date=target,
                        reservation_time=slot,
                        party_size=rng.randint(2, 4),
                        contact_name=customer.name[:20],
                        contact_phone=customer.phone,
                    ), customer_id=customer.id)
                    booked += 1
                except ReservationError:
                    # Random picks collide; skip them
                    continue
    print(f"Created {booked} reservations")
    return booked


def seed_all(db: Session):
    """Seed all data."""
    print("\n" + "="*50)
    print("SEEDING JARIMAE DATABASE")
    print("="*50 + "\n")

    # Create tables if they don't exist
    Base.metadata.create_all(bind=db.get_bind())

    users = create_users(db)
    stores = create_stores(db, users["owners"])
    create_reservations(db, stores, users["customers"])

    print("\n" + "="*50)
    print("SEEDING COMPLETE")
    print("="*50)
    print("\nTest accounts:")
    print("  Admin: admin@jarimae.kr / admin1234")
    print("  Owner: owner1@jarimae.kr / owner1234")
    print("  Customer: customer1@jarimae.kr / customer1234")
    print("\n")


def main():
    """Main entry point."""
    db = SessionLocal()
    try:
        seed_all(db)
    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
