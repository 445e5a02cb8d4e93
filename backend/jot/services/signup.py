"""Email signup: one-time code issuance, verification and account creation.

Each step is a separate request; the only state carried between them is the
``EmailOtp`` row for the address. A row moves through
``issued -> verified -> consumed`` and is deleted when its attempts run out,
when it is found stale, or when an account is created from it.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
import hashlib
import logging
import secrets

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jot.core.config import get_settings
from jot.core.exceptions import ConflictError, EmailTransportError, OtpStateError, ValidationError
from jot.core.security import get_password_hash
from jot.models.email_otp import EmailOtp
from jot.models.user import User
from jot.services.email import EmailDeliveryError, EmailSender

logger = logging.getLogger(__name__)

OTP_NOT_FOUND = "OTP not found or expired"
OTP_EXPIRED = "OTP expired"
OTP_MAX_ATTEMPTS = "Maximum attempts reached. Please request a new code."
OTP_NOT_VERIFIED = "Email not verified. Please verify OTP first."
OTP_STALE_AT_SIGNUP = "OTP expired. Please request a new code."
USER_EXISTS = "User already exists with this email"

OTP_EMAIL_SUBJECT = "Your Signup OTP Code"

# Re-reads allowed when a concurrent request changes the row between read and write.
_CAS_RETRIES = 3


def normalize_email(value: str) -> str:
    return value.strip().lower()


def generate_otp_code() -> str:
    return str(100_000 + secrets.randbelow(900_000))


def hash_otp_code(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def normalize_dt(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _otp_ttl() -> timedelta:
    return timedelta(seconds=get_settings().otp_expire_seconds)


def is_code_expired(record: EmailOtp, now: datetime | None = None) -> bool:
    now = now or datetime.now(timezone.utc)
    created_at = normalize_dt(record.created_at)
    return created_at is None or created_at < now - _otp_ttl()


def find_code(db: Session, email: str) -> EmailOtp | None:
    return db.execute(select(EmailOtp).where(EmailOtp.email == email)).scalar_one_or_none()


def _delete_code(db: Session, record_id: str) -> None:
    db.execute(delete(EmailOtp).where(EmailOtp.id == record_id).execution_options(synchronize_session=False))
    db.commit()


def purge_expired_codes(db: Session) -> int:
    """Drop every code older than the TTL; stands in for a storage-level expiry."""
    cutoff = datetime.now(timezone.utc) - _otp_ttl()
    result = db.execute(
        delete(EmailOtp).where(EmailOtp.created_at < cutoff).execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def _replace_code(db: Session, email: str, code: str) -> None:
    for attempt in range(2):
        db.execute(delete(EmailOtp).where(EmailOtp.email == email).execution_options(synchronize_session=False))
        db.add(EmailOtp(email=email, code_hash=hash_otp_code(code), attempts=0, verified=False))
        try:
            db.commit()
            return
        except IntegrityError:
            # A concurrent issuance for the same email won the unique index.
            db.rollback()
            if attempt:
                raise


def issue_signup_code(db: Session, email: str, *, sender: EmailSender) -> None:
    settings = get_settings()
    if not sender.is_configured:
        raise EmailTransportError("Email transport not configured")

    email = normalize_email(email)
    purge_expired_codes(db)
    code = generate_otp_code()
    _replace_code(db, email, code)

    if settings.otp_log_to_terminal:
        logger.warning("SIGNUP OTP | email=%s | otp=%s", email, code)

    minutes = max(1, settings.otp_expire_seconds // 60)
    try:
        sender.send(
            to_email=email,
            subject=OTP_EMAIL_SUBJECT,
            text_content=f"Your OTP is: {code}. Valid for {minutes} minutes.",
        )
    except EmailDeliveryError as exc:
        # The code row stays committed; the user can still request a fresh one.
        logger.exception("Failed to send signup OTP email for %s", email)
        if settings.is_production:
            raise EmailTransportError("Failed to send OTP") from exc
        raise EmailTransportError(f"Failed to send OTP: {exc}", details={"reason": str(exc)}) from exc


def verify_signup_code(db: Session, email: str, otp: str) -> None:
    settings = get_settings()
    max_attempts = settings.otp_max_attempts
    email = normalize_email(email)

    for _ in range(_CAS_RETRIES):
        record = find_code(db, email)
        if record is None:
            raise OtpStateError(OTP_NOT_FOUND)

        record_id = record.id
        seen_attempts = record.attempts
        if is_code_expired(record):
            _delete_code(db, record_id)
            raise OtpStateError(OTP_EXPIRED)
        if seen_attempts >= max_attempts:
            _delete_code(db, record_id)
            raise OtpStateError(OTP_MAX_ATTEMPTS)

        guard = (EmailOtp.id == record_id, EmailOtp.attempts == seen_attempts)
        if secrets.compare_digest(hash_otp_code(otp), record.code_hash):
            statement = update(EmailOtp).where(*guard).values(verified=True)
            attempts = seen_attempts
        else:
            attempts = seen_attempts + 1
            if attempts >= max_attempts:
                statement = delete(EmailOtp).where(*guard)
            else:
                statement = update(EmailOtp).where(*guard).values(attempts=attempts)

        result = db.execute(statement.execution_options(synchronize_session=False))
        db.commit()
        if result.rowcount == 0:
            continue

        if attempts == seen_attempts:
            return
        if attempts >= max_attempts:
            raise OtpStateError(OTP_MAX_ATTEMPTS)
        raise OtpStateError(f"Invalid code. {max_attempts - attempts} attempt(s) left.")

    raise OtpStateError(OTP_NOT_FOUND)


def create_account(
    db: Session,
    *,
    email: str,
    password: str,
    full_name: str = "",
    mobile_number: str = "",
) -> User:
    settings = get_settings()
    email = normalize_email(email)
    if len(password) < settings.password_min_length:
        raise ValidationError(f"Password must be at least {settings.password_min_length} characters")

    if db.execute(select(User).where(User.email == email)).scalar_one_or_none() is not None:
        raise ConflictError(USER_EXISTS)

    record = find_code(db, email)
    if record is None or not record.verified:
        raise OtpStateError(OTP_NOT_VERIFIED)
    # Verification already checked the age; a verified row can still go stale before signup.
    if is_code_expired(record):
        _delete_code(db, record.id)
        raise OtpStateError(OTP_STALE_AT_SIGNUP)

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=(full_name or "").strip(),
        mobile_number=(mobile_number or "").strip(),
    )
    db.add(user)
    db.delete(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(USER_EXISTS) from exc

    db.refresh(user)
    logger.info("Created account %s for %s", user.id, email)
    return user
