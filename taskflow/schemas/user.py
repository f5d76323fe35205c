from pydantic import BaseModel, Field
from datetime import datetime


class Credentials(BaseModel):
    """Sign-up and sign-in body."""
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)


class User(BaseModel):
    id: str
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
