import logging
import os
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from dotenv import load_dotenv

from config import get_config
from extensions.cors import init_cors
from extensions.services import init_services
from routes.admin import admin_bp
from routes.bookings import bookings_bp
from routes.bot import bot_bp
from routes.misc import misc_bp
from routes.rides import rides_bp
from scheduler import SweepScheduler
from utils.errors import RideShareError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(RideShareError)
    def handle_rideshare_error(e):
        if e.status_code >= 500:
            logger.error("Request failed: %s", e.message)
        return jsonify(e.serialize()), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'error': e.description}), e.code
        logger.exception("Unhandled error")
        return jsonify({'success': False, 'error': str(e)}), 500


def create_app(config_object=None, store=None, notifier=None):
    app = Flask(__name__)
    app.config.from_object(config_object or get_config())

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    init_cors(app)
    init_services(app, store=store, notifier=notifier)
    register_error_handlers(app)

    app.register_blueprint(misc_bp)
    app.register_blueprint(rides_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(bot_bp)

    if app.config.get("SWEEP_ENABLED"):
        scheduler = SweepScheduler(app, interval_seconds=app.config.get("SWEEP_INTERVAL_SECONDS", 300))
        scheduler.start()
        app.extensions["sweep_scheduler"] = scheduler

    return app


if __name__ == "__main__":
    app = create_app()
    notifier = app.extensions["notifier"]
    app_url = app.config.get("APP_URL")
    if app.config.get("ENV_NAME") == "production" and app_url and hasattr(notifier, "set_webhook"):
        notifier.set_webhook(f"{app_url.rstrip('/')}/bot/{app.config['BOT_TOKEN']}")
    port = int(os.environ.get('PORT', 3000))
    app.run(host="0.0.0.0", port=port, debug=False)
