from celery import Celery
import os
from dotenv import load_dotenv

load_dotenv()

redis_url = os.getenv("REDIS_URL", "redis://localhost:6379")
redis_connection = redis_url + "/0"
if redis_url.startswith("rediss://"):
    redis_connection += "?ssl_cert_reqs=CERT_NONE"

celery = Celery(
    "tasks",
    broker=redis_connection,
    backend=redis_connection,
    include=["worker.tasks"]
)

# Optional: make sure Celery retries lost connections gracefully
celery.conf.broker_transport_options = {"visibility_timeout": 3600}

# the web process owns the dataset, beat only pokes its cleanup endpoint
celery.conf.beat_schedule = {
    "sweep-expired-rides": {
        "task": "tasks.sweep_expired_rides",
        "schedule": float(os.getenv("SWEEP_INTERVAL_SECONDS", 300)),
    },
}
