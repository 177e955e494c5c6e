import redis
from .config import settings

SESSION_KEY_PREFIX = "javaquiz:session:"

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis():
    return redis_client


def session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"
