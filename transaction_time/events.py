"""Record model used by the transaction time filter

The host pipeline owns its record type; the filter only relies on the
``Record`` capability set. ``Event`` is a dict-backed implementation used
for the records the filter creates itself and by hosts without a record type
of their own.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, Set, runtime_checkable

TIMESTAMP_FIELD = "@timestamp"
TAGS_FIELD = "tags"


@runtime_checkable
class Record(Protocol):
    """Capabilities the filter needs from a pipeline record"""

    def get(self, field: str, default: Any = None) -> Any:
        ...

    def set(self, field: str, value: Any) -> None:
        ...

    def tag(self, name: str) -> None:
        ...

    @property
    def tags(self) -> Set[str]:
        ...

    def clone(self) -> "Record":
        ...


class Event:
    """Dict-backed pipeline record

    An event created without a ``@timestamp`` is stamped with the current
    UTC time, which makes the field usable as the receipt time.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})
        if self._data.get(TIMESTAMP_FIELD) is None:
            self._data[TIMESTAMP_FIELD] = datetime.now(timezone.utc)

        tags = self._data.get(TAGS_FIELD)
        if tags is None:
            self._data.pop(TAGS_FIELD, None)
        elif isinstance(tags, str):
            self._data[TAGS_FIELD] = [tags]
        else:
            self._data[TAGS_FIELD] = list(dict.fromkeys(tags))

    def get(self, field: str, default: Any = None) -> Any:
        return self._data.get(field, default)

    def set(self, field: str, value: Any) -> None:
        self._data[field] = value

    def remove(self, field: str) -> Any:
        return self._data.pop(field, None)

    def tag(self, name: str) -> None:
        """Add a tag unless the event already carries it"""
        tags = self._data.setdefault(TAGS_FIELD, [])
        if name not in tags:
            tags.append(name)

    @property
    def tags(self) -> Set[str]:
        return set(self._data.get(TAGS_FIELD) or ())

    def clone(self) -> "Event":
        return Event(copy.deepcopy(self._data))

    def to_dict(self) -> Dict[str, Any]:
        """Shallow copy of the event fields"""
        return dict(self._data)

    def __contains__(self, field: str) -> bool:
        return field in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Event({self._data!r})"
