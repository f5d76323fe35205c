from pydantic import BaseModel


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class SubscriptionCreate(BaseModel):
    """Browser PushSubscription JSON."""
    endpoint: str
    keys: SubscriptionKeys
