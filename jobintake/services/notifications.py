"""
Outbound email notifications for quick-post posters.

Sending is best-effort: callers hand a Notification to
``dispatch_notification`` as a detached task, and any failure is logged
without affecting the moderation decision that produced it.
"""
import html
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

from jobintake.core import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    to: str
    subject: str
    html: str
    kind: str = "generic"


class EmailSender:
    """SMTP transport: ``send(to, subject, html) -> bool``."""

    def __init__(self, host: str = None, port: int = None, user: str = None,
                 password: str = None, sender: str = None, timeout: float = 10.0):
        self.host = host or config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.user = user if user is not None else config.SMTP_USER
        self.password = password if password is not None else config.SMTP_PASS
        self.sender = sender or config.EMAIL_FROM
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.user and self.password)

    def send(self, to: str, subject: str, html_body: str) -> bool:
        if not self.configured:
            logger.warning("Email service not configured (set SMTP_USER and SMTP_PASS). Skipping email send.")
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("Vui lòng xem email này ở định dạng HTML.")
        message.add_alternative(html_body, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.user, self.password)
            smtp.send_message(message)
        logger.info(f"Email sent: subject='{subject}'")
        return True


_default_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    global _default_sender
    if _default_sender is None:
        _default_sender = EmailSender()
    return _default_sender


def dispatch_notification(notification: Optional[Notification], sender: EmailSender = None) -> bool:
    """
    Send ``notification``; never raises.

    Returns True only when the transport accepted the message.
    """
    if notification is None:
        return False
    sender = sender or get_email_sender()
    try:
        return bool(sender.send(notification.to, notification.subject, notification.html))
    except Exception as e:
        logger.error(f"Failed to send '{notification.kind}' notification: {type(e).__name__}: {e}", exc_info=True)
        return False


def received_notification(to: Optional[str], title: str) -> Optional[Notification]:
    if not to:
        return None
    return Notification(
        to=to,
        subject=f"Đã nhận tin tuyển dụng: {title}",
        html=(
            f"<p>Tin tuyển dụng <strong>{html.escape(title)}</strong> đã được gửi thành công.</p>"
            "<p>Tin sẽ được hiển thị sau khi quản trị viên duyệt.</p>"
        ),
        kind="received",
    )


def approved_notification(to: Optional[str], title: str) -> Optional[Notification]:
    if not to:
        return None
    return Notification(
        to=to,
        subject=f"Tin tuyển dụng đã được duyệt: {title}",
        html=(
            f"<p>Tin tuyển dụng <strong>{html.escape(title)}</strong> đã được duyệt và đang hiển thị công khai.</p>"
        ),
        kind="approved",
    )


def rejected_notification(to: Optional[str], title: str, reason: Optional[str] = None) -> Optional[Notification]:
    if not to:
        return None
    reason_html = f"<p>Lý do: {html.escape(reason)}</p>" if reason else ""
    return Notification(
        to=to,
        subject=f"Tin tuyển dụng bị từ chối: {title}",
        html=(
            f"<p>Rất tiếc, tin tuyển dụng <strong>{html.escape(title)}</strong> không được duyệt.</p>"
            f"{reason_html}"
        ),
        kind="rejected",
    )
