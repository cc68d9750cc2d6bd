import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jarimae.core.database import get_db
from jarimae.models.notification import Notification
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.user import User
from jarimae.schemas.user import UserProfileResponse, UserProfileUpdate, UserResponse, UserStats
from jarimae.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _profile(db: Session, user: User) -> UserProfileResponse:
    reservations = db.query(Reservation).filter(Reservation.customer_id == user.id)
    stats = UserStats(
        total_reservations=reservations.count(),
        completed_reservations=reservations.filter(
            Reservation.status == ReservationStatus.COMPLETED
        ).count(),
        unread_notifications=db.query(Notification).filter(
            Notification.user_id == user.id,
            Notification.is_read == False  # noqa: E712
        ).count(),
    )
    return UserProfileResponse(**UserResponse.model_validate(user).model_dump(), stats=stats)


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's account with reservation and notification counts."""
    return _profile(db, current_user)


@router.put("/profile", response_model=UserProfileResponse)
async def update_profile(
    profile_data: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the caller's name and phone. Email and role cannot be changed here."""
    for field, value in profile_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    logger.info(f"Profile updated for user {current_user.id}")
    return _profile(db, current_user)
