from fastapi import Depends, HTTPException, status
from sqlmodel import Session

from whatnow.core.config import settings
from whatnow.db.session import get_session
from whatnow.dependencies.auth import get_current_user
from whatnow.models.user import User


def has_paid(db: Session, user_id: str) -> bool:
    user = db.get(User, user_id)
    return bool(user and user.has_paid)


def require_paid_access(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> str:
    """Owner id of a caller allowed past the paywall (everyone when it is off)."""
    if settings.paywall_enabled and not has_paid(db, user_id):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Payment required to access this feature",
        )
    return user_id
