"""Admin-group notifications through the Telegram Bot API.

Delivery is best effort: it runs as a FastAPI background task, and a
failure is logged without touching the request that triggered it.
"""
import html
import json
import logging
import urllib.request

from mhyasi.core import config

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org/bot{token}/sendMessage"
TIMEOUT_SECONDS = 5


def notifications_enabled() -> bool:
    return bool(config.TG_BOT_TOKEN and config.TG_GROUP_CHAT_ID)


def build_message_request(text: str) -> urllib.request.Request:
    body = {
        "chat_id": config.TG_GROUP_CHAT_ID,
        "text": text,
        "parse_mode": "HTML",
        "disable_web_page_preview": True,
    }
    return urllib.request.Request(
        API_URL.format(token=config.TG_BOT_TOKEN),
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )


def send_telegram_message(text: str) -> bool:
    """Post ``text`` to the admin group; True when Telegram accepted it."""
    if not notifications_enabled():
        return False
    try:
        with urllib.request.urlopen(
            build_message_request(text), timeout=TIMEOUT_SECONDS
        ) as response:
            reply = json.loads(response.read() or b"{}")
    except (OSError, ValueError) as exc:
        logger.warning("Telegram notification failed: %s", exc)
        return False
    if not reply.get("ok"):
        logger.warning("Telegram rejected notification: %s", reply)
        return False
    return True


def format_request_message(username: str, amount: int, details: str) -> str:
    return (
        "<b>New unlock request</b>\n"
        f"Shop: {html.escape(username)}\n"
        f"Amount: {amount}\n"
        f"Details: {html.escape(details or '')}"
    )


def format_approval_message(username: str, code: str, until: int) -> str:
    return (
        "<b>Unlock approved</b>\n"
        f"Shop: {html.escape(username)}\n"
        f"Code: {html.escape(code)}\n"
        f"Until: {until}"
    )
