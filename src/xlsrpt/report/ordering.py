# Deterministic row order for keyed row collections.
#
# Iteration order of a mapping is never used as report order: callers pick
# the key type to encode the sort dimension (e.g. a timestamp key gives a
# chronological report), and the comparator for that key type is chosen once
# per collection from its type tag.

import struct
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from .errors import ReportKeyTypeError, ReportSourceError


class KeyKind(str, Enum):
    INTEGER = "integer"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    TIMESTAMP = "timestamp"


################################################################################
# #region KeyComparators
class KeyComparator(Protocol):
    kind: KeyKind

    def check_key(self, key: Any) -> bool: ...

    def sort_key(self, key: Any) -> Any: ...


class IntegerKeyComparator:
    kind = KeyKind.INTEGER

    def check_key(self, key: Any) -> bool:
        return isinstance(key, int) and not isinstance(key, bool)

    def sort_key(self, key: Any) -> Any:
        return key


class Float32KeyComparator:
    kind = KeyKind.FLOAT32

    def check_key(self, key: Any) -> bool:
        return isinstance(key, float)

    def sort_key(self, key: Any) -> Any:
        # compare at single precision
        return struct.unpack("<f", struct.pack("<f", key))[0]


class Float64KeyComparator:
    kind = KeyKind.FLOAT64

    def check_key(self, key: Any) -> bool:
        return isinstance(key, float)

    def sort_key(self, key: Any) -> Any:
        return key


class StringKeyComparator:
    kind = KeyKind.STRING

    def check_key(self, key: Any) -> bool:
        return isinstance(key, str)

    def sort_key(self, key: Any) -> Any:
        # code point order == UTF-8 byte order
        return key


class TimestampKeyComparator:
    kind = KeyKind.TIMESTAMP

    def check_key(self, key: Any) -> bool:
        return isinstance(key, datetime)

    def sort_key(self, key: Any) -> Any:
        return key


DICT_KEY_COMPARATORS: Mapping[KeyKind, KeyComparator] = {
    KeyKind.INTEGER: IntegerKeyComparator(),
    KeyKind.FLOAT32: Float32KeyComparator(),
    KeyKind.FLOAT64: Float64KeyComparator(),
    KeyKind.STRING: StringKeyComparator(),
    KeyKind.TIMESTAMP: TimestampKeyComparator(),
}


def detect_key_kind(key: Any) -> KeyKind:
    """
    Derive the key kind from one key.

    ``float`` maps to ``FLOAT64``; ``FLOAT32`` is only used when the caller
    tags the collection explicitly. ``bool`` is rejected even though it is an
    ``int`` subclass.
    """
    if isinstance(key, bool):
        raise ReportKeyTypeError("Row key type 'bool' is not supported.")
    if isinstance(key, int):
        return KeyKind.INTEGER
    if isinstance(key, float):
        return KeyKind.FLOAT64
    if isinstance(key, str):
        return KeyKind.STRING
    if isinstance(key, datetime):
        return KeyKind.TIMESTAMP
    c_kinds = ", ".join(_kind.value for _kind in KeyKind)
    raise ReportKeyTypeError(
        f"Row key type {type(key).__name__!r} is not supported (expected one of: {c_kinds})."
    )


# #endregion
################################################################################
# #region KeyedRows
@dataclass(frozen=True, slots=True)
class SpecKeyedRows:
    """
    A keyed row collection together with its key type tag.

    When ``key_kind`` is omitted it is detected from the first key. Every key
    is checked against the tag on construction, so a collection that exists
    is always orderable.
    """

    rows: Mapping[Any, Any]
    key_kind: KeyKind | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.rows, Mapping):
            raise ReportSourceError(
                f"Row source is not a keyed mapping (got {type(self.rows).__name__})."
            )
        if self.key_kind is not None:
            try:
                object.__setattr__(self, "key_kind", KeyKind(self.key_kind))
            except ValueError as exc:
                c_kinds = ", ".join(_kind.value for _kind in KeyKind)
                raise ReportKeyTypeError(
                    f"Key kind {self.key_kind!r} is not supported (expected one of: {c_kinds})."
                ) from exc
        if not self.rows:
            return

        cfg_kind = self.key_kind
        if cfg_kind is None:
            cfg_kind = detect_key_kind(next(iter(self.rows)))
            object.__setattr__(self, "key_kind", cfg_kind)

        cls_comparator = DICT_KEY_COMPARATORS[cfg_kind]
        for _key in self.rows:
            if not cls_comparator.check_key(_key):
                raise ReportKeyTypeError(
                    f"Row key {_key!r} ({type(_key).__name__}) does not match "
                    f"key kind {cfg_kind.value!r}; all keys must share one type."
                )

    def __len__(self) -> int:
        return len(self.rows)


def convert_to_keyed_rows(source: Any) -> SpecKeyedRows:
    return source if isinstance(source, SpecKeyedRows) else SpecKeyedRows(source)


def order_keys(source: SpecKeyedRows | Mapping[Any, Any]) -> list[Any]:
    """
    Return the keys of a keyed row collection in ascending order.

    The result is a permutation of the keys, non-decreasing under the
    comparator of the collection's key kind. Keys that cannot be compared
    with each other (e.g. naive and aware timestamps, floats outside the
    single precision range for ``FLOAT32``) raise ``ReportKeyTypeError``.
    """
    cls_rows = convert_to_keyed_rows(source)
    if cls_rows.key_kind is None:
        return []
    cls_comparator = DICT_KEY_COMPARATORS[cls_rows.key_kind]
    try:
        return sorted(cls_rows.rows, key=cls_comparator.sort_key)
    except (TypeError, OverflowError) as exc:
        raise ReportKeyTypeError(
            f"Row keys of kind {cls_rows.key_kind.value!r} cannot be ordered: {exc}"
        ) from exc


def generate_ordered_rows(
    source: SpecKeyedRows | Mapping[Any, Any],
) -> Iterator[tuple[Any, Any]]:
    cls_rows = convert_to_keyed_rows(source)
    for _key in order_keys(cls_rows):
        yield _key, cls_rows.rows[_key]


# #endregion
################################################################################
