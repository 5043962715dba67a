"""
Telegram delivery for booking and ride notifications.

Delivery is best effort: a failed send is logged and reported as False, it
never fails the booking or ride operation that triggered it.
"""
import logging

import requests

from services.messages import (
    create_booking_request_body,
    create_ride_closed_body,
    create_ride_expired_body,
)

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class NullNotifier:
    """Used when no bot token is configured; records what would have been sent."""

    def __init__(self):
        self.sent = []

    def send_message(self, chat_id, text, reply_markup=None, parse_mode=None):
        logger.info("Bot disabled, not sending message to %s", chat_id)
        self.sent.append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup, "parse_mode": parse_mode})
        return True

    def app_keyboard(self):
        return None

    def notify_driver_of_booking(self, ride, passenger_name, passenger_username=None):
        return self.send_message(ride["driver_telegram_id"], create_booking_request_body(ride, passenger_name, passenger_username))

    def notify_ride_closed(self, ride, passengers):
        return self._broadcast(passengers, create_ride_closed_body(ride))

    def notify_ride_expired(self, ride, passengers):
        return self._broadcast(passengers, create_ride_expired_body(ride))

    def _broadcast(self, passengers, text):
        sent = 0
        for passenger in passengers:
            if self.send_message(passenger["telegram_id"], text):
                sent += 1
        return sent


class TelegramNotifier(NullNotifier):
    def __init__(self, token, app_url=None, timeout=10):
        super().__init__()
        self.token = token
        self.app_url = app_url
        self.timeout = timeout

    def _call(self, method, payload):
        response = requests.post(f"{TELEGRAM_API_URL}/bot{self.token}/{method}", json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def app_keyboard(self):
        if not self.app_url:
            return None
        return {"inline_keyboard": [[{"text": "🚀 Open the app", "web_app": {"url": self.app_url}}]]}

    def send_message(self, chat_id, text, reply_markup=None, parse_mode=None):
        """Send a chat message, as plain text unless ``parse_mode`` is given."""
        payload = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_markup:
            payload["reply_markup"] = reply_markup
        try:
            self._call("sendMessage", payload)
            return True
        except requests.exceptions.RequestException as e:
            logger.error("Failed to send message to %s: %s", chat_id, e)
            return False

    def set_webhook(self, url):
        try:
            self._call("deleteWebhook", {})
            self._call("setWebhook", {"url": url})
            logger.info("Webhook registered")
            return True
        except requests.exceptions.RequestException as e:
            logger.error("Webhook setup failed: %s", e)
            return False


def build_notifier(config):
    token = config.get("BOT_TOKEN")
    if not token:
        return NullNotifier()
    return TelegramNotifier(token, app_url=config.get("APP_URL"))
