from fastapi import APIRouter, Depends
from sqlmodel import Session

from whatnow.core.config import settings
from whatnow.db.session import get_session
from whatnow.dependencies.auth import get_current_user
from whatnow.dependencies.billing import has_paid
from whatnow.schemas.billing import BillingStatus

router = APIRouter(prefix="/api/billing", tags=["Billing"])


@router.get("/status", response_model=BillingStatus)
def billing_status(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_session),
):
    # Checkout and payment confirmation are handled by the billing service;
    # this only reports the flag it maintains on the user row.
    return BillingStatus(
        has_paid=has_paid(db, user_id),
        paywall_enabled=settings.paywall_enabled,
    )
