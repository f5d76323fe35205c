"""User accounts: password hashing and JWT access tokens.

Tokens carry the user id as ``sub``. The same token is accepted as a
bearer header or as the ``token`` cookie set at sign-in.
"""
import logging
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY
from ..errors import InvalidArgument, Unauthenticated
from ..models import User
from ..timeutils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
# bcrypt ignores everything past 72 bytes and newer releases reject it outright
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], bcrypt.gensalt())
    return hashed.decode("utf-8")


def check_password(password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], hashed_password.encode("utf-8"))


def issue_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode({"sub": user.id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def user_for_token(db: Session, token: str) -> Optional[User]:
    """The user a token was issued to; None for a bad, expired or orphaned token."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected access token: %s", exc)
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    return db.get(User, user_id)


def register(db: Session, email: str, password: str) -> User:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first() is not None:
        raise InvalidArgument("Email already registered")

    user = User(email=email, hashed_password=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not check_password(password, user.hashed_password):
        raise Unauthenticated("Incorrect email or password")
    return user
