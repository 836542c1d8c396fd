from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

ItemId = Union[str, int, float]
Year = Union[str, int]


def normalize_id(value: Any) -> Optional[str]:
    """Return the comparison key for a provider id, or None when unusable.

    Ids arrive as strings or numbers depending on who produced them (Jikan
    returns ints, stored lists may hold strings), so equality is always
    checked on this normalized string form.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class WatchItem:
    """One tracked anime.

    ``id`` and ``year`` keep whatever wire type they were submitted with;
    only comparisons go through ``normalize_id``.
    """

    id: Optional[ItemId] = None
    title: Optional[str] = None
    year: Optional[Year] = None
    poster: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        return normalize_id(self.id)

    def same_id(self, other_id: Any) -> bool:
        key = self.key
        return key is not None and key == normalize_id(other_id)

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> "WatchItem":
        title = raw.get("title")
        poster = raw.get("poster")
        return cls(
            id=raw.get("id"),
            title=str(title) if title is not None else None,
            year=raw.get("year"),
            poster=str(poster) if poster is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "year": self.year,
            "poster": self.poster,
        }


def items_from_payload(raw: Any) -> list[WatchItem]:
    """Parse a wire list; non-list input or non-object entries raise ValueError."""
    if not isinstance(raw, (list, tuple)):
        raise ValueError("Watchlist must be an array")
    out: list[WatchItem] = []
    for entry in raw:
        if isinstance(entry, WatchItem):
            out.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise ValueError("Watchlist items must be objects")
        out.append(WatchItem.from_payload(entry))
    return out


def items_to_payload(items: Any) -> list[dict[str, Any]]:
    return [i.to_payload() for i in (items or [])]
