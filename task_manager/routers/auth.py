import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import InvalidInput, Unauthorized
from ..models import User
from ..schemas.task import MessageResponse
from ..schemas.user import AuthResponse, UserCreate, UserLogin
from ..services.auth_service import AuthService, get_auth_service

router = APIRouter()
logger = logging.getLogger(__name__)


def authenticate_user(db: Session, auth_service: AuthService, email: str, password: str):
    """Return the user whose email and password match, else ``None``."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        return None
    if not auth_service.verify_password(password, user.hashed_password):
        return None
    return user


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create a new user account."""
    email = user.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidInput("Email already registered")

    db_user = User(
        name=user.name.strip(),
        email=email,
        hashed_password=auth_service.hash_password(user.password),
    )
    db.add(db_user)
    db.commit()
    logger.info("User registered", extra={"user_id": db_user.id})
    return {"message": "User registered successfully"}


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in and get a bearer token."""
    db_user = authenticate_user(db, auth_service, credentials.email, credentials.password)
    if not db_user:
        raise Unauthorized("Invalid email or password")

    return {
        "token": auth_service.issue_token(db_user.id),
        "user": db_user,
    }
