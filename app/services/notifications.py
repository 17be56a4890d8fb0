"""
Email and SMS notification senders.

Senders make exactly one delivery attempt and report ``(sent, error)``.
A sender whose credentials are missing never touches its transport and
reports ``(False, "not configured")``.
"""

import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable, Optional, Tuple

import httpx
from fastapi.concurrency import run_in_threadpool

from ..core.config import Settings
from ..models.appointment import Appointment
from ..models.consultation import Consultation
from . import templates

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not configured"

SendResult = Tuple[bool, Optional[str]]


@dataclass(frozen=True)
class NotificationConfig:
    """Which notification channels have credentials, resolved once at startup."""
    email_enabled: bool
    sms_enabled: bool

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationConfig":
        return cls(
            email_enabled=settings.email_configured,
            sms_enabled=settings.sms_configured,
        )


@dataclass(frozen=True)
class NotificationOutcome:
    email_sent: bool = False
    sms_sent: bool = False

    def as_dict(self) -> dict:
        return {"emailSent": self.email_sent, "smsSent": self.sms_sent}


class EmailSender:
    """Send HTML email over SMTP with STARTTLS."""

    def __init__(
        self,
        host: Optional[str],
        port: int,
        username: Optional[str],
        password: Optional[str],
        from_address: str,
        enabled: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.enabled = enabled and bool(host and username and password)
        self.timeout = timeout

    async def send(self, to: str, subject: str, html_content: str) -> SendResult:
        if not self.enabled:
            logger.warning(f"Email channel not configured; skipping message to {to}")
            return False, NOT_CONFIGURED

        try:
            await run_in_threadpool(self._deliver, to, subject, html_content)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {str(e)}")
            return False, str(e)

        logger.info(f"Email sent to {to}: {subject}")
        return True, None

    def _deliver(self, to: str, subject: str, html_content: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to
        msg.attach(MIMEText(html_content, "html"))

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls(context=ssl.create_default_context())
            server.login(self.username, self.password)
            server.sendmail(self.from_address, [to], msg.as_string())


class SmsSender:
    """Send SMS through the Twilio Messages REST endpoint."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        api_base: str = "https://api.twilio.com/2010-04-01",
        enabled: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.api_base = api_base.rstrip("/")
        self.enabled = enabled and bool(account_sid and auth_token and from_number)
        self.transport = transport
        self.timeout = timeout

    async def send(self, to: str, body: str) -> SendResult:
        if not self.enabled:
            logger.warning(f"SMS channel not configured; skipping message to {to}")
            return False, NOT_CONFIGURED

        data = {"To": to, "From": self.from_number, "Body": body}
        url = f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    auth=(self.account_sid, self.auth_token),
                    data=data,
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach SMS provider for {to}: {str(e)}")
            return False, str(e)

        if response.status_code not in (200, 201):
            error = f"SMS provider returned {response.status_code}"
            logger.error(f"{error} for {to}: {response.text}")
            return False, error

        try:
            sid = response.json().get("sid")
        except ValueError:
            # Delivered; only the receipt is unreadable
            sid = None
        logger.info(f"SMS sent to {to} (SID: {sid})")
        return True, None


class NotificationService:
    """
    Best-effort confirmation dispatch for persisted bookings.

    Email and SMS are attempted independently; any failure, including an
    unexpected exception while rendering or sending, becomes ``False`` in the
    returned outcome.
    """

    def __init__(self, email_sender: EmailSender, sms_sender: SmsSender):
        self.email_sender = email_sender
        self.sms_sender = sms_sender

    @property
    def config(self) -> NotificationConfig:
        return NotificationConfig(
            email_enabled=self.email_sender.enabled,
            sms_enabled=self.sms_sender.enabled,
        )

    async def notify_appointment(self, appointment: Appointment) -> NotificationOutcome:
        return await self._dispatch(
            appointment.email,
            appointment.phone,
            lambda: templates.appointment_email(appointment),
            lambda: templates.appointment_sms(appointment),
        )

    async def notify_consultation(self, consultation: Consultation) -> NotificationOutcome:
        return await self._dispatch(
            consultation.patient_email,
            consultation.patient_phone,
            lambda: templates.consultation_email(consultation),
            lambda: templates.consultation_sms(consultation),
        )

    async def _dispatch(
        self,
        email: str,
        phone: str,
        render_email: Callable[[], Tuple[str, str]],
        render_sms: Callable[[], str],
    ) -> NotificationOutcome:
        email_sent = await self._attempt("email", self._send_email, email, render_email)
        sms_sent = await self._attempt("sms", self._send_sms, phone, render_sms)
        return NotificationOutcome(email_sent=email_sent, sms_sent=sms_sent)

    async def _send_email(self, to: str, render: Callable[[], Tuple[str, str]]) -> SendResult:
        subject, html_content = render()
        return await self.email_sender.send(to, subject, html_content)

    async def _send_sms(self, to: str, render: Callable[[], str]) -> SendResult:
        return await self.sms_sender.send(to, render())

    async def _attempt(self, channel: str, send, to: str, render) -> bool:
        try:
            sent, _ = await send(to, render)
        except Exception as e:
            logger.exception(f"Unexpected {channel} notification failure for {to}: {str(e)}")
            return False
        return sent


def build_notification_service(settings: Settings) -> NotificationService:
    """Construct the live senders from configuration."""
    config = NotificationConfig.from_settings(settings)

    email_sender = EmailSender(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        from_address=settings.EMAIL_FROM,
        enabled=config.email_enabled,
    )
    sms_sender = SmsSender(
        account_sid=settings.TWILIO_ACCOUNT_SID,
        auth_token=settings.TWILIO_AUTH_TOKEN,
        from_number=settings.TWILIO_PHONE_NUMBER,
        api_base=settings.TWILIO_API_BASE,
        enabled=config.sms_enabled,
    )

    logger.info(
        f"Notification channels - email: {'enabled' if config.email_enabled else 'disabled'}, "
        f"sms: {'enabled' if config.sms_enabled else 'disabled'}"
    )
    return NotificationService(email_sender, sms_sender)
