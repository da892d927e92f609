"""
Send SMS through the Twilio REST API.
Requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER in .env.
"""
import logging

import httpx

from slotbook.services.notifications.types import NotifyConfig

logger = logging.getLogger(__name__)

TWILIO_API = "https://api.twilio.com/2010-04-01"


def send_sms(config: NotifyConfig, to_phone: str, body: str) -> bool:
    """Returns True if Twilio accepted the message."""
    to_phone = (to_phone or "").strip()
    if not to_phone:
        logger.warning("SMS skipped: no phone number")
        return False
    if not to_phone.startswith("+"):
        logger.warning("Phone number not in E.164 format: %s", to_phone)
        return False
    sid = config.twilio_account_sid
    if not sid or not config.twilio_auth_token or not config.twilio_from_number:
        logger.warning("Twilio not configured (sid/token/from); cannot send SMS to %s", to_phone)
        return False
    try:
        with httpx.Client(timeout=10.0) as client:
            resp = client.post(
                f"{TWILIO_API}/Accounts/{sid}/Messages.json",
                auth=(sid, config.twilio_auth_token),
                data={"To": to_phone, "From": config.twilio_from_number, "Body": body},
            )
        if resp.status_code in (200, 201):
            logger.info("SMS sent to %s (SID: %s)", to_phone, resp.json().get("sid"))
            return True
        logger.warning("Twilio returned %s for %s: %s", resp.status_code, to_phone, resp.text)
        return False
    except httpx.HTTPError as e:
        logger.warning("Twilio request failed: %s", e, exc_info=True)
        return False
