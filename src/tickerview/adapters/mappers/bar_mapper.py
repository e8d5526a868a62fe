# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Bar mapper: short-field upstream records <-> domain :class:`Bar`.

Upstream providers (and the ``/stock-data`` proxy) exchange bars as objects
with short keys ``t, o, h, l, c, v``. This is the single place those records
are renamed and their timestamps normalized to epoch milliseconds.

Layer:
    adapters/mappers
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from tickerview.domain.entities.bar import Bar, to_epoch_millis
from tickerview.domain.exceptions.market_data import MalformedResponseError

_NUMERIC_TYPES = (int, float)


def _number(record: Mapping[str, Any], key: str) -> float:
    value = record[key]
    # bool is an int subclass; a boolean price is a shape error.
    if isinstance(value, bool) or not isinstance(value, _NUMERIC_TYPES):
        raise TypeError(f"field '{key}' is not numeric")
    number = float(value)
    # JSON decoders accept Infinity and NaN.
    if not math.isfinite(number):
        raise ValueError(f"field '{key}' is not finite")
    return number


def bar_from_record(record: Mapping[str, Any]) -> Bar:
    """Convert one ``{t,o,h,l,c,v}`` record into a :class:`Bar`.

    A missing ``v`` is read as zero volume.

    Raises:
        MalformedResponseError: On missing, non-numeric or non-finite fields.
    """
    try:
        volume = _number(record, "v") if "v" in record else 0.0
        return Bar(
            timestamp=to_epoch_millis(_number(record, "t")),
            open=_number(record, "o"),
            high=_number(record, "h"),
            low=_number(record, "l"),
            close=_number(record, "c"),
            volume=volume,
        )
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        raise MalformedResponseError(
            "Provider record has an unexpected shape", details={"error": str(exc)}
        ) from exc


def bars_from_records(records: Iterable[Mapping[str, Any]]) -> tuple[Bar, ...]:
    """Map a sequence of records, preserving order."""
    return tuple(bar_from_record(r) for r in records)


def bar_to_record(bar: Bar) -> dict[str, Any]:
    """Render a :class:`Bar` back into the short-field wire shape."""
    return {
        "t": bar.timestamp,
        "o": bar.open,
        "h": bar.high,
        "l": bar.low,
        "c": bar.close,
        "v": bar.volume,
    }
