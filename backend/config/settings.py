import os

from dotenv import load_dotenv

# Service-side settings: focus on HTTP/runtime switches.
# Client-side settings (API base URL, Jikan, session file) live under
# `backend/infrastructure/config/`.
load_dotenv(override=True)


def _get_env_int(key: str, default: int) -> int:
    """读取整型环境变量，未设置时返回默认值"""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"环境变量 {key} 需要整数值，但实际为 {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    """读取布尔型环境变量，支持 true/false/1/0 等表达"""
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "y", "yes", "on"}


def _get_env_list(key: str, default: list[str]) -> list[str]:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# ===== FastAPI / Uvicorn 运行参数 =====

SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")  # 服务监听地址
SERVER_PORT = _get_env_int("SERVER_PORT", 5000)  # 服务端口
SERVER_RELOAD = _get_env_bool("SERVER_RELOAD", False)  # 热重载开关
SERVER_LOG_LEVEL = os.getenv("SERVER_LOG_LEVEL", "info")  # 日志等级
SERVER_WORKERS = _get_env_int("SERVER_WORKERS", 1) or 1

# 统一封装 uvicorn.run 可用参数
UVICORN_CONFIG = {
    "host": SERVER_HOST,
    "port": SERVER_PORT,
    "reload": SERVER_RELOAD,
    "log_level": SERVER_LOG_LEVEL,
    "workers": SERVER_WORKERS,
}

# Browser frontends call the API cross-origin.
CORS_ALLOW_ORIGINS = _get_env_list("CORS_ALLOW_ORIGINS", ["*"])

# ===== Storage =====

# "postgres" (default) or "memory" (process-local, lost on restart; dev/tests).
STORE_BACKEND = (os.getenv("STORE_BACKEND") or "postgres").strip().lower()

# ===== Auth =====

AUTH_PASSWORD_MIN_LENGTH = _get_env_int("AUTH_PASSWORD_MIN_LENGTH", 6) or 6
AUTH_BCRYPT_ROUNDS = _get_env_int("AUTH_BCRYPT_ROUNDS", 10) or 10

# ===== Admin (dev only) =====

# Admin routes expose every user's email and watchlist without authentication.
ADMIN_ROUTES_ENABLE = _get_env_bool("ADMIN_ROUTES_ENABLE", False)
