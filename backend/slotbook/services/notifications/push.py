"""
Send push notifications via Apple Push Notification service (APNs).
Requires APNS_KEY_ID, APNS_TEAM_ID, APNS_BUNDLE_ID, and APNS_KEY_P8_PATH or APNS_KEY_P8_BASE64.
If not configured, send_apns logs and returns False.
"""
import base64
import logging
import threading
import time
from pathlib import Path

import httpx
import jwt

from slotbook.services.notifications.types import NotifyConfig

logger = logging.getLogger(__name__)

# APNs host: sandbox for dev builds, production for release
APNS_SANDBOX = "https://api.sandbox.push.apple.com"
APNS_PRODUCTION = "https://api.push.apple.com"

# JWT cache per (key id, team id): (token_string, expiry_epoch). APNs accepts tokens with iat within last hour.
_jwt_cache: dict[tuple[str, str], tuple[str, float]] = {}
_jwt_lock = threading.Lock()
_JWT_EXPIRY_SECONDS = 55 * 60  # refresh a bit before 1 hour


def _load_p8_key(config: NotifyConfig) -> str | None:
    """Load .p8 key from the base64 value or the path. Return None if not set."""
    if config.apns_key_p8_base64:
        try:
            return base64.b64decode(config.apns_key_p8_base64).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("APNS_KEY_P8_BASE64 decode failed: %s", e)
            return None
    path = config.apns_key_p8_path
    if path and Path(path).exists():
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("APNS_KEY_P8_PATH read failed: %s", e)
            return None
    return None


def _get_apns_jwt(config: NotifyConfig) -> str | None:
    """Build and cache JWT for APNs. Returns None if config missing."""
    if not config.apns_key_id or not config.apns_team_id:
        return None
    cache_key = (config.apns_key_id, config.apns_team_id)
    now = time.time()
    with _jwt_lock:
        cached = _jwt_cache.get(cache_key)
        if cached and cached[1] > now:
            return cached[0]
        p8 = _load_p8_key(config)
        if not p8:
            return None
        try:
            token = jwt.encode(
                {"iss": config.apns_team_id, "iat": int(now)},
                p8,
                algorithm="ES256",
                headers={"alg": "ES256", "kid": config.apns_key_id},
            )
        except (jwt.PyJWTError, ValueError) as e:
            logger.warning("APNs JWT build failed: %s", e, exc_info=True)
            return None
        _jwt_cache[cache_key] = (token, now + _JWT_EXPIRY_SECONDS)
        return token


def send_apns(config: NotifyConfig, device_token: str, title: str, body: str) -> bool:
    """
    Send one push notification to an iOS device via APNs.
    Returns True if sent successfully, False otherwise (config missing or APNs error).
    """
    device_token = (device_token or "").strip()
    if not device_token:
        logger.warning("Push skipped: empty device token")
        return False
    if not config.apns_bundle_id:
        logger.warning("APNS_BUNDLE_ID not set; cannot send push")
        return False
    jwt_token = _get_apns_jwt(config)
    if not jwt_token:
        logger.warning("APNs not configured (key/team); cannot send push")
        return False
    base_url = APNS_SANDBOX if config.apns_use_sandbox else APNS_PRODUCTION
    url = f"{base_url}/3/device/{device_token}"
    headers = {
        "authorization": f"bearer {jwt_token}",
        "apns-topic": config.apns_bundle_id,
        "apns-push-type": "alert",
        "apns-priority": "10",
    }
    payload = {
        "aps": {
            "alert": {"title": title, "body": body},
            "sound": "default",
        }
    }
    try:
        with httpx.Client(http2=True, timeout=10.0) as client:
            resp = client.post(url, json=payload, headers=headers)
        if resp.status_code == 200:
            return True
        logger.warning("APNs returned %s for token %s...: %s", resp.status_code, device_token[:20], resp.text)
        return False
    except httpx.HTTPError as e:
        logger.warning("APNs request failed: %s", e, exc_info=True)
        return False
