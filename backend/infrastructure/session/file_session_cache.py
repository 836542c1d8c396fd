from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from application.ports.session_cache_port import SessionCachePort
from domain.users import UserRef
from infrastructure.config.settings import REWATCH_SESSION_FILE

logger = logging.getLogger(__name__)

_CURRENT_USER_KEY = "currentUser"
_WATCHED_KEY = "watchedEpisodes"
_TOTALS_KEY = "totalEpisodes"


def _progress_key(user_id: str, anime_id: str) -> str:
    return f"{user_id}:{anime_id}"


class FileSessionCache(SessionCachePort):
    """JSON file holding the cached user plus per-user episode progress.

    Layout::

        {
          "currentUser": {"id": "...", "email": "..."},
          "watchedEpisodes": {"<user>:<anime>": [1, 2, 5]},
          "totalEpisodes": {"<user>:<anime>": 12}
        }

    The file is re-read on every call so several CLI processes see each
    other's writes; writes go through a temp file and ``replace``.
    Passwords are never written here.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path).expanduser() if path else REWATCH_SESSION_FILE

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)

    def _section(self, data: dict[str, Any], key: str) -> dict[str, Any]:
        section = data.get(key)
        if not isinstance(section, dict):
            section = {}
            data[key] = section
        return section

    # ----- current user -----

    def load_user(self) -> Optional[UserRef]:
        # Entries missing id or email are treated as "no session".
        return UserRef.from_payload(self._read().get(_CURRENT_USER_KEY))

    def save_user(self, user: UserRef) -> None:
        data = self._read()
        data[_CURRENT_USER_KEY] = user.to_payload()
        self._write(data)

    def clear_user(self) -> None:
        data = self._read()
        if data.pop(_CURRENT_USER_KEY, None) is not None:
            self._write(data)

    # ----- episode progress -----

    def watched_episodes(self, *, user_id: str, anime_id: str) -> list[int]:
        raw = self._read().get(_WATCHED_KEY)
        values = raw.get(_progress_key(user_id, anime_id)) if isinstance(raw, dict) else None
        if not isinstance(values, list):
            return []
        return sorted({int(v) for v in values if isinstance(v, int) and not isinstance(v, bool)})

    def set_watched_episodes(self, *, user_id: str, anime_id: str, episodes: list[int]) -> None:
        data = self._read()
        section = self._section(data, _WATCHED_KEY)
        key = _progress_key(user_id, anime_id)
        if episodes:
            section[key] = sorted({int(e) for e in episodes})
        else:
            section.pop(key, None)
        self._write(data)

    def total_episodes(self, *, user_id: str, anime_id: str) -> Optional[int]:
        raw = self._read().get(_TOTALS_KEY)
        value = raw.get(_progress_key(user_id, anime_id)) if isinstance(raw, dict) else None
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return None
        return value

    def set_total_episodes(self, *, user_id: str, anime_id: str, total: int) -> None:
        data = self._read()
        self._section(data, _TOTALS_KEY)[_progress_key(user_id, anime_id)] = int(total)
        self._write(data)
