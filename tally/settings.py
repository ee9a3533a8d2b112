import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load .env from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    api_url: str = "http://localhost:3000"
    api_token: Optional[str] = None
    currency: str = "USD"
    page_limit: int = 50
    timeout: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            api_url=env.get("TALLY_API_URL", cls.api_url).rstrip("/"),
            api_token=env.get("TALLY_API_TOKEN") or None,
            currency=env.get("TALLY_CURRENCY", cls.currency).upper(),
            page_limit=_int(env, "TALLY_PAGE_LIMIT", cls.page_limit),
            timeout=_int(env, "TALLY_TIMEOUT", cls.timeout),
            log_level=env.get("TALLY_LOG_LEVEL", cls.log_level).upper(),
        )
