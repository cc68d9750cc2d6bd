import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session, selectinload

from jarimae.core.database import get_db
from jarimae.core.errors import ErrorCode, ReservationError, reservation_error_to_http
from jarimae.models.business_hour import BusinessHour
from jarimae.models.store import Store, StoreStatus, CuisineType, PriceRange
from jarimae.models.user import User, UserRole
from jarimae.schemas.store import (
    StoreCreate, StoreUpdate, StoreStatusUpdate, StoreResponse, BusinessHourResponse
)
from jarimae.api.deps import require_admin, require_owner_or_admin
from jarimae.services.ledger import count_upcoming_active

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_store_or_404(db: Session, store_id: int) -> Store:
    store = db.query(Store).options(
        selectinload(Store.business_hours)
    ).filter(Store.id == store_id, Store.status != StoreStatus.DELETED).first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")
    return store


def _ensure_can_manage(store: Store, user: User) -> None:
    if user.role != UserRole.ADMIN and store.owner_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only manage your own stores"
        )


def replace_business_hours(db: Session, store: Store, hours) -> None:
    """Delete all of a store's hours and insert the new week in their place."""
    db.query(BusinessHour).filter(BusinessHour.store_id == store.id).delete(synchronize_session="fetch")
    db.flush()
    for h in hours:
        db.add(BusinessHour(store_id=store.id, **h.model_dump()))
    db.expire(store, ["business_hours"])


@router.get("/", response_model=List[StoreResponse])
async def list_stores(
    q: Optional[str] = Query(None, description="Search by store name"),
    cuisine_type: Optional[CuisineType] = None,
    price_range: Optional[PriceRange] = None,
    accepts_reservations: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """List active stores. Supports simple filters and pagination."""
    query = db.query(Store).options(selectinload(Store.business_hours)).filter(
        Store.status == StoreStatus.ACTIVE
    )
    if q:
        query = query.filter(Store.name.ilike(f"%{q}%"))
    if cuisine_type:
        query = query.filter(Store.cuisine_type == cuisine_type)
    if price_range:
        query = query.filter(Store.price_range == price_range)
    if accepts_reservations is not None:
        query = query.filter(Store.accepts_reservations == accepts_reservations)

    return query.order_by(Store.name).offset(skip).limit(limit).all()


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(store_id: int, db: Session = Depends(get_db)):
    """Get a specific store by ID."""
    return _get_store_or_404(db, store_id)


@router.get("/{store_id}/business-hours", response_model=List[BusinessHourResponse])
async def get_business_hours(store_id: int, db: Session = Depends(get_db)):
    return _get_store_or_404(db, store_id).business_hours


@router.post("/", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    store_data: StoreCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner_or_admin)
):
    """Create a store with its full week of business hours. New stores await admin approval."""
    data = store_data.model_dump(exclude={"business_hours"})
    store = Store(**data, owner_id=current_user.id, status=StoreStatus.PENDING)
    store.business_hours = [BusinessHour(**h.model_dump()) for h in store_data.business_hours]

    db.add(store)
    db.commit()
    db.refresh(store)
    logger.info(f"Store {store.id} created by user {current_user.id}")
    return store


@router.patch("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: int,
    store_data: StoreUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner_or_admin)
):
    """Update a store. Business hours, when given, replace the whole week."""
    store = _get_store_or_404(db, store_id)
    _ensure_can_manage(store, current_user)

    update_data = store_data.model_dump(exclude_unset=True, exclude={"business_hours"})
    for field, value in update_data.items():
        if value is not None:
            setattr(store, field, value)

    if store_data.business_hours is not None:
        replace_business_hours(db, store, store_data.business_hours)
        logger.info(f"Business hours replaced for store {store.id}")

    db.commit()
    db.refresh(store)
    return store


@router.patch("/{store_id}/status", response_model=StoreResponse)
async def update_store_status(
    store_id: int,
    status_data: StoreStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Approve, deactivate or suspend a store (admin only)."""
    store = _get_store_or_404(db, store_id)
    store.status = status_data.status
    db.commit()
    db.refresh(store)
    logger.info(f"Store {store.id} status set to {store.status.value} by admin {current_user.id}")
    return store


@router.delete("/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_owner_or_admin)
):
    """
    Delete a store (its owner or an admin).

    Refused while any PENDING or CONFIRMED reservation is dated today or later.
    The row is kept with status DELETED so past reservations still resolve.
    """
    store = _get_store_or_404(db, store_id)
    _ensure_can_manage(store, current_user)

    if count_upcoming_active(db, store.id, date.today()) > 0:
        raise reservation_error_to_http(ReservationError(ErrorCode.HAS_ACTIVE_RESERVATIONS))

    store.status = StoreStatus.DELETED
    db.commit()
    logger.info(f"Store {store.id} deleted by user {current_user.id}")
