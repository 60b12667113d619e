from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY
from ..database import get_db
from ..identity import IdentityClaims, get_identity_verifier
from ..models import TaskList, User
from ..schemas.user import AuthResponse, GoogleLogin, TokenData, User as UserSchema, UserProgressUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

ALGORITHM = "HS256"

DEFAULT_LIST_NAME = "My Tasks"
DEFAULT_LIST_ICON = "Clock"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def _decode_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if not user_id:
            return None
        return TokenData(user_id=user_id)
    except JWTError:
        return None


async def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer credential to a user.

    A missing credential is 401; a credential that is malformed, expired or
    names an unknown user is 403.
    """
    token = _get_token_from_request(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = _decode_token(token)
    if not token_data or not token_data.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Could not validate credentials",
        )
    return user


def _get_or_create_user(db: Session, claims: IdentityClaims) -> User:
    user = db.query(User).filter(User.google_id == claims.subject).first()
    if user:
        return user

    user = User(
        google_id=claims.subject,
        email=claims.email,
        name=claims.name,
        picture=claims.picture,
    )
    db.add(user)
    db.flush()

    # Every user starts with one concrete list
    db.add(TaskList(owner_id=user.id, name=DEFAULT_LIST_NAME, icon=DEFAULT_LIST_ICON))
    db.commit()
    db.refresh(user)
    logger.info("Created user %s with default list", user.id)
    return user


@router.post("/google", response_model=AuthResponse)
def login_with_google(
    payload: GoogleLogin,
    db: Session = Depends(get_db),
    verify: Callable[[str], IdentityClaims] = Depends(get_identity_verifier),
):
    """Exchange an identity-provider credential for a session token."""
    try:
        claims = verify(payload.credential)
    except ValueError:
        logger.warning("Rejected identity credential")
        raise HTTPException(status_code=400, detail="Invalid token")

    user = _get_or_create_user(db, claims)
    access_token = create_access_token(data={"sub": user.id, "email": user.email})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
    }


@router.get("/me", response_model=UserSchema)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.patch("/me", response_model=UserSchema)
def update_users_me(
    update: UserProgressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Store the progression computed by the client."""
    for field, value in update.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if field == "badges":
            value = list(dict.fromkeys(value))
        setattr(current_user, field, value)

    db.commit()
    db.refresh(current_user)
    return current_user
