"""
Telegram webhook.

Only the read-only commands are handled here; booking and posting rides go
through the web app.
"""
import hmac
import logging
from flask import Blueprint, abort, current_app, jsonify, request
from extensions.services import get_notifier, get_repository
from services.messages import (
    ABOUT_BODY,
    HELP_BODY,
    create_driver_rides_body,
    create_passenger_bookings_body,
    create_start_body,
)

logger = logging.getLogger(__name__)

bot_bp = Blueprint("bot", __name__)

HELP_BUTTON = "📖 Help"
ABOUT_BUTTON = "ℹ️ About"


def _command(text):
    """'/myrides@SomeBot extra' -> '/myrides'"""
    if not text or not text.startswith("/"):
        return None
    return text.split()[0].split("@")[0].lower()


def handle_message(message):
    chat_id = message.get("chat", {}).get("id")
    sender = message.get("from", {})
    text = (message.get("text") or "").strip()
    if chat_id is None:
        return False

    notifier = get_notifier()
    repository = get_repository()
    command = _command(text)

    if command == "/start":
        keyboard = None
        app_url = current_app.config.get("APP_URL")
        if app_url:
            keyboard = {
                "keyboard": [
                    [{"text": "🚀 Open the app", "web_app": {"url": app_url}}],
                    [{"text": HELP_BUTTON}, {"text": ABOUT_BUTTON}]
                ],
                "resize_keyboard": True,
            }
        return notifier.send_message(chat_id, create_start_body(sender.get("first_name")), keyboard, parse_mode="Markdown")
    if command == "/help" or text == HELP_BUTTON:
        return notifier.send_message(chat_id, HELP_BODY, parse_mode="Markdown")
    if command == "/about" or text == ABOUT_BUTTON:
        return notifier.send_message(chat_id, ABOUT_BODY, parse_mode="Markdown")
    if command == "/myrides":
        rides = repository.list_rides_by_driver(sender.get("id"))
        return notifier.send_message(chat_id, create_driver_rides_body(rides), notifier.app_keyboard(), parse_mode="Markdown")
    if command == "/mybookings":
        bookings = repository.list_bookings_by_user(sender.get("id"))
        return notifier.send_message(chat_id, create_passenger_bookings_body(bookings), notifier.app_keyboard(), parse_mode="Markdown")
    return False


@bot_bp.route('/bot/<token>', methods=['POST'])
def webhook(token):
    expected = current_app.config.get("BOT_TOKEN")
    if not expected or not hmac.compare_digest(token, expected):
        abort(404)

    update = request.get_json(silent=True) or {}
    message = update.get("message") or update.get("edited_message")
    if message:
        try:
            handle_message(message)
        except Exception:
            # the update is acknowledged either way
            logger.exception("Error handling bot update %s", update.get("update_id"))
    return jsonify({'ok': True}), 200
