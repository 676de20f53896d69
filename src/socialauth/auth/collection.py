"""Read-only key-lookup wrapper over parsed JSON objects."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class Collection(Mapping[str, Any]):
    """Wraps a parsed JSON object so missing keys read as ``None``.

    Provider adapters check required keys with `exists()` and read optional
    ones with `get()`. Anything that is not a mapping wraps to an empty
    collection.

    Example:
        >>> page = Collection({"data": [], "paging": {"cursors": {"after": "QVFI"}}})
        >>> page.exists("data")
        True
        >>> page.filter("paging").filter("cursors").get("after")
        'QVFI'
        >>> page.get("missing") is None
        True
    """

    def __init__(self, data: Any = None):
        self._data: dict[str, Any] = dict(data) if isinstance(data, Mapping) else {}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Collection({self._data!r})"

    def exists(self, key: str) -> bool:
        """Whether `key` is present, even when its value is ``None``."""
        return key in self._data

    def filter(self, key: str) -> Collection:
        """Return the nested object under `key` as a Collection (empty if absent)."""
        return Collection(self._data.get(key))

    def is_empty(self) -> bool:
        return not self._data

    def properties(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the wrapped object."""
        return dict(self._data)
