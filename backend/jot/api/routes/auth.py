import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from jot.api.deps import get_current_user, get_db, get_email_sender
from jot.core.config import get_settings
from jot.core.exceptions import AuthenticationError
from jot.core.security import create_access_token, verify_password
from jot.models.user import User
from jot.schemas.auth import LoginRequest, MessageOut, OtpRequest, OtpVerify, SessionOut, SignupRequest
from jot.schemas.user import ProfileOut
from jot.services.email import EmailSender
from jot.services.rate_limit import auth_rules, enforce_rate_limit
from jot.services.signup import create_account, issue_signup_code, verify_signup_code

settings = get_settings()
RATE_LIMITS = auth_rules(settings)
router = APIRouter()
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, user: User) -> None:
    token = create_access_token(user.id, email=user.email)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post("/send-otp", response_model=MessageOut)
def send_otp(
    payload: OtpRequest,
    request: Request,
    db: Session = Depends(get_db),
    sender: EmailSender = Depends(get_email_sender),
) -> MessageOut:
    enforce_rate_limit(request, RATE_LIMITS["send_otp"], identity=payload.email)
    issue_signup_code(db, payload.email, sender=sender)
    return MessageOut(message="OTP sent successfully")


@router.post("/verify-otp", response_model=MessageOut)
def verify_otp(payload: OtpVerify, request: Request, db: Session = Depends(get_db)) -> MessageOut:
    enforce_rate_limit(request, RATE_LIMITS["verify_otp"], identity=payload.email)
    verify_signup_code(db, payload.email, payload.otp)
    return MessageOut(message="OTP verified. Continue to create your password.")


@router.post("/signup", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
) -> SessionOut:
    enforce_rate_limit(request, RATE_LIMITS["signup"], identity=payload.email)
    user = create_account(
        db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        mobile_number=payload.mobile_number,
    )
    set_session_cookie(response, user)
    return SessionOut(message="User created successfully", email=user.email)


@router.post("/login", response_model=SessionOut)
def login(payload: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)) -> SessionOut:
    enforce_rate_limit(request, RATE_LIMITS["login"], identity=payload.email)
    user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("Rejected login for %s", payload.email)
        raise AuthenticationError("Invalid email or password")

    set_session_cookie(response, user)
    return SessionOut(message="Login successful", email=user.email)


@router.post("/logout", response_model=MessageOut)
def logout(response: Response) -> MessageOut:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return MessageOut(message="Logged out successfully")


@router.get("/me", response_model=ProfileOut)
def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
