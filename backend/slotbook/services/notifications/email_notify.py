"""
Send reservation emails via SMTP (Google Gmail or other).
Set SMTP_USER, SMTP_PASSWORD (and optionally NOTIFY_FROM) in .env. Use a Gmail App Password.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from slotbook.services.notifications.types import NotifyConfig

logger = logging.getLogger(__name__)


def _from_address(config: NotifyConfig) -> str:
    if config.notify_from:
        return config.notify_from
    if config.smtp_user:
        return f"Call Reservations <{config.smtp_user}>"
    return "Call Reservations <noreply@localhost>"


def send_email(
    config: NotifyConfig,
    to_email: str,
    subject: str,
    text: str | None = None,
    html: str | None = None,
) -> bool:
    """
    Send one email. Plain text and HTML parts are both attached when given;
    with only one, the other is derived from it.
    Returns True if sent, False if skipped or failed.
    """
    to_email = (to_email or "").strip()
    if not to_email:
        logger.warning("Email skipped: no recipient for %r", subject)
        return False
    if not config.smtp_user or not config.smtp_password:
        logger.warning("SMTP_USER or SMTP_PASSWORD not set; cannot send email to %s", to_email)
        return False
    body = text or ""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address(config)
    msg["To"] = to_email
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(html or f"<pre style='font-family:sans-serif'>{body}</pre>", "html"))
    try:
        with smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(config.smtp_user, config.smtp_password)
            server.sendmail(config.smtp_user, [to_email], msg.as_string())
        logger.info("Email sent to %s: %s", to_email, subject)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False
