import math
from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import asc, desc, select
from sqlalchemy.orm import Session, joinedload

from jarimae.core.database import get_db
from jarimae.core.errors import ErrorCode, ReservationError, reservation_error_to_http
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.store import Store
from jarimae.models.user import User, UserRole
from jarimae.schemas.reservation import (
    ReservationCreate, ReservationUpdate, ReservationStatusUpdate, ReservationResponse,
    ReservationListResponse, AvailabilityQuery, AvailabilityResponse, SortField, SortOrder,
)
from jarimae.api.deps import get_current_user, require_customer
from jarimae.services.admission import BookingAdmissionController, BookingRequest
from jarimae.services.availability import AvailabilityCalculator
from jarimae.services import reservations as reservation_service

router = APIRouter()


def _ordering(sort_by: SortField, sort_order: SortOrder):
    """ORDER BY clauses for the list endpoint; date and time always break ties."""
    column = getattr(Reservation, sort_by.value)
    order = asc if sort_order == SortOrder.ASC else desc
    columns = [column] + [
        c for c in (Reservation.reservation_date, Reservation.reservation_time, Reservation.id)
        if c is not column
    ]
    return [order(c) for c in columns]


def _check_availability(db: Session, query: AvailabilityQuery) -> dict:
    calculator = AvailabilityCalculator(db)
    try:
        result = calculator.check(
            query.store_id,
            query.reservation_date,
            query.party_size,
            preferred_time=query.preferred_time,
        )
    except ReservationError as e:
        raise reservation_error_to_http(e)
    return result.to_dict()


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    store_id: int,
    reservation_date: date,
    party_size: int = Query(..., ge=1),
    preferred_time: Optional[str] = Query(None, description="HH:MM"),
    db: Session = Depends(get_db)
):
    """
    Bookable times for a store on a date.

    A closed day is a normal response with no slots. A party larger than the
    store is reported with available=false and reason PARTY_SIZE_EXCEEDS_CAPACITY.
    """
    try:
        query = AvailabilityQuery(
            store_id=store_id,
            reservation_date=reservation_date,
            party_size=party_size,
            preferred_time=preferred_time,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))
    return _check_availability(db, query)


@router.post("/availability", response_model=AvailabilityResponse)
async def post_availability(query: AvailabilityQuery, db: Session = Depends(get_db)):
    """Same as GET /availability with a JSON body."""
    return _check_availability(db, query)


@router.post("/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer)
):
    """
    Book a table (customers only).

    The reservation is created PENDING. A timed-out request has an unknown
    outcome; check the reservation list before submitting again.
    """
    controller = BookingAdmissionController(db)
    try:
        reservation = controller.admit(
            BookingRequest(**reservation_data.model_dump()),
            customer_id=current_user.id,
        )
    except ReservationError as e:
        raise reservation_error_to_http(e)
    return reservation


@router.get("/", response_model=ReservationListResponse)
async def list_reservations(
    store_id: Optional[int] = None,
    customer_id: Optional[int] = Query(None, description="Owners and admins only"),
    status_filter: Optional[ReservationStatus] = Query(None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    contact_phone: Optional[str] = Query(None, max_length=20),
    contact_name: Optional[str] = Query(None, max_length=20),
    sort_by: SortField = SortField.RESERVATION_DATE,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    List reservations visible to the caller.

    Customers see their own, owners see their stores', admins see all.
    """
    query = db.query(Reservation).options(joinedload(Reservation.store))

    if current_user.role == UserRole.CUSTOMER:
        query = query.filter(Reservation.customer_id == current_user.id)
    elif current_user.role == UserRole.OWNER:
        owned = select(Store.id).where(Store.owner_id == current_user.id)
        query = query.filter(Reservation.store_id.in_(owned))

    if store_id:
        query = query.filter(Reservation.store_id == store_id)
    # Customers are already limited to their own reservations
    if customer_id and current_user.role != UserRole.CUSTOMER:
        query = query.filter(Reservation.customer_id == customer_id)
    if status_filter:
        query = query.filter(Reservation.status == status_filter)
    if date_from:
        query = query.filter(Reservation.reservation_date >= date_from)
    if date_to:
        query = query.filter(Reservation.reservation_date <= date_to)
    if contact_phone:
        query = query.filter(Reservation.contact_phone.contains(contact_phone, autoescape=True))
    if contact_name:
        query = query.filter(Reservation.contact_name.ilike(f"%{contact_name}%"))

    total = query.count()
    reservations = query.order_by(
        *_ordering(sort_by, sort_order)
    ).offset((page - 1) * limit).limit(limit).all()

    return ReservationListResponse(
        reservations=reservations,
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        reservation = reservation_service.get_reservation(db, reservation_id)
    except ReservationError as e:
        raise reservation_error_to_http(e)
    if not reservation_service.can_access(current_user, reservation):
        raise HTTPException(status_code=403, detail="You do not have permission for this reservation")
    return reservation


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: int,
    reservation_data: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Modify an upcoming PENDING or CONFIRMED reservation.

    Date, time, party size or duration changes go through the same admission
    checks as a new booking.
    """
    try:
        reservation = reservation_service.get_reservation(db, reservation_id)
        if not reservation_service.can_access(current_user, reservation):
            raise ReservationError(ErrorCode.FORBIDDEN)
        reservation_service.ensure_modifiable(reservation)

        controller = BookingAdmissionController(db)
        return controller.admit_update(reservation, reservation_data.model_dump(exclude_unset=True))
    except ReservationError as e:
        raise reservation_error_to_http(e)


@router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: int,
    status_data: ReservationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Change a reservation's status.

    PENDING -> CONFIRMED | CANCELLED, CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW.
    Customers may only cancel their own reservations.
    """
    try:
        reservation = reservation_service.get_reservation(db, reservation_id)
        return reservation_service.change_status(
            db,
            reservation,
            status_data.status,
            current_user,
            cancellation_reason=status_data.cancellation_reason,
            total_amount=status_data.total_amount,
        )
    except ReservationError as e:
        raise reservation_error_to_http(e)
