"""
Store-owner notifications.

Written after the reservation commit as a separate transaction; a failure here
is logged and never undoes the reservation.
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jarimae.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


def notify_store_owner(db: Session, store, reservation, type: NotificationType, message: str) -> bool:
    """Record a notification for the store's owner. Returns False if it could not be written."""
    try:
        db.add(Notification(
            user_id=store.owner_id,
            reservation_id=reservation.id,
            type=type,
            message=message[:500],
        ))
        db.commit()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to notify owner of store {store.id} about reservation {reservation.id}")
        return False


def notify_customer(db: Session, reservation, type: NotificationType, message: str) -> bool:
    try:
        db.add(Notification(
            user_id=reservation.customer_id,
            reservation_id=reservation.id,
            type=type,
            message=message[:500],
        ))
        db.commit()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Failed to notify customer {reservation.customer_id} about reservation {reservation.id}")
        return False
