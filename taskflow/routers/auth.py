from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES
from ..database import get_db
from ..errors import Unauthenticated
from ..models import User
from ..schemas.user import AuthResponse, Credentials, User as UserSchema
from ..services.accounts import authenticate, issue_token, register, user_for_token

router = APIRouter()

TOKEN_COOKIE = "token"


def _token_from_request(request: Request) -> Optional[str]:
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(TOKEN_COOKIE)


def _signed_in(response: Response, user: User) -> AuthResponse:
    token = issue_token(user)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return AuthResponse(access_token=token, user=UserSchema.model_validate(user))


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """The caller, or None for anonymous requests and unusable tokens."""
    token = _token_from_request(request)
    if not token:
        return None
    return user_for_token(db, token)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = _token_from_request(request)
    if not token:
        raise Unauthenticated("Not authenticated")
    user = user_for_token(db, token)
    if user is None:
        raise Unauthenticated("Could not validate credentials")
    return user


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(credentials: Credentials, response: Response, db: Session = Depends(get_db)):
    """Create an account and sign it in."""
    return _signed_in(response, register(db, credentials.email, credentials.password))


@router.post("/signin", response_model=AuthResponse)
def signin(credentials: Credentials, response: Response, db: Session = Depends(get_db)):
    return _signed_in(response, authenticate(db, credentials.email, credentials.password))


@router.post("/signout")
def signout(response: Response):
    response.delete_cookie(key=TOKEN_COOKIE)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
