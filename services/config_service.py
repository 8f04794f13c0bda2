"""
Configuration service for runtime yard settings.
"""
import os
from datetime import timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    env_value = os.getenv(name)
    if env_value:
        try:
            return int(env_value)
        except ValueError:
            return default
    return default


def _get_bool(name: str, default: bool) -> bool:
    env_value = os.getenv(name)
    if env_value is None or not env_value.strip():
        return default
    return env_value.strip().lower() in _TRUE_VALUES


def get_yard_timezone() -> tzinfo:
    """Reference zone used to bucket entries and exits by calendar day."""
    name = (os.getenv("YARD_TIMEZONE") or "UTC").strip()
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def get_default_page_limit() -> int:
    return max(1, _get_int("DEFAULT_PAGE_LIMIT", 10))


def get_max_page_limit() -> int:
    return max(get_default_page_limit(), _get_int("MAX_PAGE_LIMIT", 100))


def should_seed_mock_data() -> bool:
    return _get_bool("SEED_MOCK_DATA", True)


def get_mock_container_count() -> int:
    return max(0, _get_int("MOCK_CONTAINER_COUNT", 50))


def get_mock_data_seed() -> Optional[int]:
    env_value = os.getenv("MOCK_DATA_SEED")
    if not env_value:
        return None
    try:
        return int(env_value)
    except ValueError:
        return None


def get_secret_key() -> str:
    return os.getenv("SECRET_KEY", "CHANGE_ME_YARD_SECRET_KEY")


def get_access_token_expire_minutes() -> int:
    return _get_int("ACCESS_TOKEN_EXPIRE_MINUTES", 480)


def get_bcrypt_rounds() -> int:
    # bcrypt accepts 4..31
    return min(31, max(4, _get_int("BCRYPT_ROUNDS", 12)))
