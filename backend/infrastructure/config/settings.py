import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# 统一加载环境变量：项目根目录的 .env 优先于外部 shell 环境变量，
# 否则容易出现“明明改了 .env 但运行仍读到旧值”的情况。
load_dotenv(override=True)


def _get_env_int(key: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw}") from exc


def _get_env_float(key: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be a number, got {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


# ===== Re:Watch backend (client side) =====

REWATCH_API_BASE_URL = (os.getenv("REWATCH_API_BASE_URL") or "http://localhost:5000").strip().rstrip("/")
REWATCH_HTTP_TIMEOUT_S = _get_env_float("REWATCH_HTTP_TIMEOUT_S", 10.0) or 10.0

# Local session cache (current user + episode progress). Plays the role that
# browser localStorage plays for the web frontend.
REWATCH_SESSION_FILE = Path(
    os.getenv("REWATCH_SESSION_FILE", str(Path.home() / ".rewatch" / "session.json"))
).expanduser()


# ===== Jikan (MyAnimeList) metadata =====

JIKAN_BASE_URL = (os.getenv("JIKAN_BASE_URL") or "https://api.jikan.moe/v4").strip().rstrip("/")
JIKAN_TIMEOUT_S = _get_env_float("JIKAN_TIMEOUT_S", 10.0) or 10.0
# Jikan allows roughly 3 requests/second; requests are spaced sequentially.
JIKAN_MIN_INTERVAL_S = _get_env_float("JIKAN_MIN_INTERVAL_S", 1.0)
JIKAN_PLACEHOLDER_POSTER = os.getenv(
    "JIKAN_PLACEHOLDER_POSTER",
    "https://via.placeholder.com/220x300.png?text=Anime+Poster",
)
