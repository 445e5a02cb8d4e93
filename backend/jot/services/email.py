from __future__ import annotations

from dataclasses import dataclass
from email.message import EmailMessage
import logging
import smtplib
import ssl

from jot.core.config import Settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    username: str
    password: str
    from_email: str
    from_name: str | None = None
    use_tls: bool = True
    use_ssl: bool = False
    timeout_seconds: int = 15

    @classmethod
    def from_settings(cls, settings: Settings) -> SmtpConfig | None:
        """Build the transport config, or ``None`` when credentials are missing."""
        if not settings.smtp_host or not settings.smtp_username or not settings.smtp_password:
            return None
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=_resolve_smtp_password(settings.smtp_host, settings.smtp_password),
            from_email=settings.smtp_from_email or settings.smtp_username,
            from_name=settings.smtp_from_name,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
            timeout_seconds=settings.smtp_timeout_seconds,
        )


def _classify_smtp_data_error(exc: smtplib.SMTPDataError) -> str:
    smtp_error = exc.smtp_error
    if isinstance(smtp_error, bytes):
        message = smtp_error.decode("utf-8", errors="ignore").lower()
    else:
        message = str(smtp_error).lower()

    if "sending limit" in message or "quota" in message or "rate limit" in message:
        return "SMTP sender rate limited"
    if "too many messages" in message:
        return "SMTP sender rate limited"
    if "recipient address rejected" in message or "recipient rejected" in message:
        return "SMTP recipient rejected"
    return "SMTP data rejected"


def _resolve_smtp_password(host: str | None, raw_password: str | None) -> str:
    password = raw_password or ""
    if host and host.lower() == "smtp.gmail.com":
        # Gmail app-passwords are often copied with spaces.
        return "".join(password.split())
    return password


def _build_message(config: SmtpConfig, *, to_email: str, subject: str, text_content: str) -> EmailMessage:
    message = EmailMessage()
    if config.from_name:
        message["From"] = f"{config.from_name} <{config.from_email}>"
    else:
        message["From"] = config.from_email
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(text_content)
    return message


def _is_connection_issue(exc: Exception) -> bool:
    return isinstance(
        exc,
        (
            smtplib.SMTPConnectError,
            smtplib.SMTPServerDisconnected,
            smtplib.SMTPHeloError,
            OSError,
            TimeoutError,
        ),
    )


class EmailSender:
    """SMTP transport bound to an explicit :class:`SmtpConfig`."""

    def __init__(self, config: SmtpConfig | None) -> None:
        self.config = config

    @property
    def is_configured(self) -> bool:
        return self.config is not None

    def _deliver(self, message: EmailMessage) -> None:
        config = self.config
        timeout = max(1, config.timeout_seconds)
        if config.use_ssl:
            with smtplib.SMTP_SSL(config.host, config.port, timeout=timeout) as smtp:
                smtp.login(config.username, config.password)
                smtp.send_message(message)
            return

        with smtplib.SMTP(config.host, config.port, timeout=timeout) as smtp:
            if config.use_tls:
                smtp.starttls(context=ssl.create_default_context())
            smtp.login(config.username, config.password)
            smtp.send_message(message)

    def send(self, *, to_email: str, subject: str, text_content: str) -> None:
        """Deliver one message in a single attempt; every failure surfaces as ``EmailDeliveryError``."""
        if self.config is None:
            raise EmailDeliveryError("SMTP is not configured")

        message = _build_message(self.config, to_email=to_email, subject=subject, text_content=text_content)
        try:
            self._deliver(message)
        except smtplib.SMTPAuthenticationError as exc:
            raise EmailDeliveryError("SMTP authentication failed") from exc
        except smtplib.SMTPDataError as exc:
            raise EmailDeliveryError(_classify_smtp_data_error(exc)) from exc
        except smtplib.SMTPRecipientsRefused as exc:
            raise EmailDeliveryError("SMTP recipient rejected") from exc
        except smtplib.SMTPSenderRefused as exc:
            raise EmailDeliveryError("SMTP sender rejected") from exc
        except Exception as exc:
            if not _is_connection_issue(exc):
                raise EmailDeliveryError("Unable to deliver email") from exc
            logger.warning("SMTP connection to %s:%s failed: %s", self.config.host, self.config.port, exc)
            raise EmailDeliveryError("SMTP connection failed") from exc
