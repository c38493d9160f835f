"""Duration values accepted by the wrappers and their millisecond conversion."""
from __future__ import annotations

from datetime import timedelta
from typing import Mapping, Union

Duration = Union[timedelta, Mapping[str, float], int, float]

_ONE_MS = timedelta(milliseconds=1)


def to_milliseconds(duration: Duration) -> Union[int, float]:
    """Convert *duration* to milliseconds.

    Accepts a ``timedelta``, a mapping of ``timedelta`` keyword units such as
    ``{"seconds": 1}``, or a bare number already in milliseconds.  Integral
    results come back as ``int`` so they render as ``1000`` rather than
    ``1000.0``.
    """
    if isinstance(duration, timedelta):
        ms = duration / _ONE_MS
    elif isinstance(duration, Mapping):
        try:
            ms = timedelta(**duration) / _ONE_MS
        except TypeError as exc:
            raise ValueError(f"invalid duration units: {sorted(duration)}") from exc
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        ms = float(duration)
    else:
        raise TypeError(f"unsupported duration type: {type(duration).__name__}")

    if ms < 0:
        raise ValueError(f"duration must be non-negative, got {ms} ms")
    return int(ms) if float(ms).is_integer() else ms
