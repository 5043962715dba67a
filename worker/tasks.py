from .celery_app import celery
import logging
import os
import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


@celery.task(name="tasks.sweep_expired_rides")
def sweep_expired_rides():
    """
    Ask the web app to expire stale rides.

    Returns the number of rides closed, or None when the app couldn't be
    reached.
    """
    app_url = os.getenv("APP_URL")
    admin_token = os.getenv("ADMIN_TOKEN")
    if not app_url or not admin_token:
        logger.warning("APP_URL or ADMIN_TOKEN not set, skipping sweep")
        return None

    try:
        response = requests.post(
            f"{app_url.rstrip('/')}/api/admin/cleanup",
            headers={"x-admin-token": admin_token},
            timeout=10
        )
        response.raise_for_status()
        deleted = response.json().get("deletedCount", 0)
        logger.info("Sweep closed %s rides", deleted)
        return deleted
    except requests.exceptions.RequestException as e:
        logger.error("Failed to run sweep: %s", e)
        return None
