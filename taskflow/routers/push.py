import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..config import VAPID_PUBLIC_KEY
from ..database import get_db
from ..models import User
from ..schemas.push import SubscriptionCreate
from ..services.push import PushSender, get_push_sender, subscribe
from .auth import get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/vapidPublicKey", response_class=PlainTextResponse)
def vapid_public_key():
    """Public VAPID key the browser needs to subscribe."""
    return VAPID_PUBLIC_KEY


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def create_subscription(
    payload: SubscriptionCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    sender: PushSender = Depends(get_push_sender),
    db: Session = Depends(get_db),
):
    """Register a push subscription and greet it with a first notification."""
    subscription = subscribe(
        db,
        endpoint=payload.endpoint,
        p256dh=payload.keys.p256dh,
        auth=payload.keys.auth,
        user_id=current_user.id if current_user is not None else None,
    )
    logger.info("Subscription received: %s", subscription.endpoint)
    sender(subscription, {"title": "Welcome!", "body": "You are now subscribed to notifications."})
    return {"message": "Subscription successful"}
