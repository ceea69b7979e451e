"""
Snapshot extractor for Neurio ``/current-sample`` payloads.

Parses the received bytes as JSON and maps the sensor's channel array
onto the twelve ``/CONSUMPTION/...`` variables:

======== ============ ==================================
Index    Channel      Variables
======== ============ ==================================
0        ``L1``       ``P``, ``Q``, ``V``, ``ENERGY_IMP``
1        ``L2``       ``P``, ``Q``, ``V``, ``ENERGY_IMP``
2        ``TOTAL``    ``P``, ``Q``, ``V``, ``ENERGY_IMP``
======== ============ ==================================

Channels are matched by position only; the sensor's own channel ``id``
is not cross-checked, so the array order is a load-bearing contract.

Fault isolation:
- Malformed or empty payload, or a NaN/Infinity literal:
  :class:`ParseFailure`, nothing published.
- No ``channels`` array: :class:`SchemaFailure`, nothing published.
- Missing position or non-object channel: that channel is skipped.
- Missing or non-numeric field: only that one variable is skipped.
- Store error on one write: logged, remaining writes still attempted.

CHANGELOG:
- 2026-03-03: Initial creation (STORY-104)
- 2026-03-09: Reject NaN and Infinity literals as malformed JSON (STORY-111)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from neurio.src.errors import ParseFailure, SchemaFailure, StoreError

if TYPE_CHECKING:
    from neurio.src.varstore import VarStore

logger = logging.getLogger(__name__)

# Channel positions in the sensor's ``channels`` array.
CHANNELS: tuple[str, ...] = ("L1", "L2", "TOTAL")

# Payload field -> variable name suffix.
FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "p_W": "P",
        "q_VAR": "Q",
        "v_V": "V",
        "eImp_Ws": "ENERGY_IMP",
    }
)


def variable_name(channel: str, field_name: str) -> str:
    """Return the store path for *field_name* of *channel*.

    >>> variable_name("L2", "v_V")
    '/CONSUMPTION/L2/V'
    """
    return f"/CONSUMPTION/{channel}/{FIELDS[field_name]}"


VARIABLE_NAMES: tuple[str, ...] = tuple(
    variable_name(channel, field_name)
    for channel in CHANNELS
    for field_name in FIELDS
)


@dataclass
class ExtractResult:
    """Outcome of one successful extraction.

    Attributes:
        published: Number of values written to the store.
        skipped: Variable names that were not written this cycle.
        sensor_id: The payload's ``sensorId``, if present.
    """

    published: int = 0
    skipped: list[str] = field(default_factory=list)
    sensor_id: str | None = None


def resolve_bindings(store: VarStore) -> Mapping[str, int]:
    """Resolve every consumption variable name to a store handle.

    Names the store does not know are logged and left out, so the
    extractor silently skips them on every cycle.

    Returns:
        Read-only mapping of variable name to handle.
    """
    bindings: dict[str, int] = {}
    for name in VARIABLE_NAMES:
        handle = store.find_by_name(name)
        if handle is None:
            logger.warning("Variable %s not found in store", name)
            continue
        bindings[name] = handle
    return MappingProxyType(bindings)


def extract_snapshot(
    payload: bytes,
    bindings: Mapping[str, int],
    publish: Callable[[int, Any], None],
) -> ExtractResult:
    """Parse *payload* and publish every available channel value.

    Args:
        payload: Raw response body (without terminator).
        bindings: Variable name to handle, from :func:`resolve_bindings`.
        publish: Called as ``publish(handle, value)`` for each value,
            typically :meth:`VarStore.set`.

    Returns:
        An :class:`ExtractResult` describing what was written.

    Raises:
        ParseFailure: If *payload* is not well-formed JSON.
        SchemaFailure: If the document has no ``channels`` array.
    """
    document = _parse(payload)
    channels = _channels(document)

    result = ExtractResult(sensor_id=document.get("sensorId"))
    if result.sensor_id is not None:
        logger.debug("Snapshot from sensor %s", result.sensor_id)

    for index, channel in enumerate(CHANNELS):
        names = [variable_name(channel, f) for f in FIELDS]
        if index >= len(channels):
            logger.debug("Channel %s absent from payload", channel)
            result.skipped.extend(names)
            continue

        reading = channels[index]
        if not isinstance(reading, dict):
            logger.warning(
                "Channel %s is %s, not an object; skipping",
                channel,
                type(reading).__name__,
            )
            result.skipped.extend(names)
            continue

        for field_name, name in zip(FIELDS, names):
            if _publish_field(reading, field_name, name, bindings, publish):
                result.published += 1
            else:
                result.skipped.append(name)

    return result


def _parse(payload: bytes) -> dict:
    """Decode *payload* into a JSON object, or raise a categorised failure."""
    try:
        document = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as exc:
        # Covers JSONDecodeError, UnicodeDecodeError and non-finite numbers.
        raise ParseFailure(
            f"Payload of {len(payload)} bytes is not valid JSON: {exc}"
        ) from exc

    if not isinstance(document, dict):
        raise SchemaFailure(
            f"Top-level JSON is {type(document).__name__}, expected object"
        )
    return document


def _reject_constant(name: str) -> float:
    # NaN and Infinity are not JSON; json.loads accepts them by default.
    raise ValueError(f"non-finite number {name}")


def _channels(document: dict) -> list:
    channels = document.get("channels")
    if channels is None:
        raise SchemaFailure("Payload has no 'channels' field")
    if not isinstance(channels, list):
        raise SchemaFailure(
            f"'channels' is {type(channels).__name__}, expected array"
        )
    return channels


def _is_numeric(value: object) -> bool:
    # bool is an int subclass; JSON true/false is not a reading.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def _publish_field(
    reading: dict,
    field_name: str,
    name: str,
    bindings: Mapping[str, int],
    publish: Callable[[int, Any], None],
) -> bool:
    """Publish one field of one channel. Returns ``True`` if written."""
    value = reading.get(field_name)
    if not _is_numeric(value):
        logger.debug(
            "Field %s for %s missing or not numeric: %r", field_name, name, value
        )
        return False

    handle = bindings.get(name)
    if handle is None:
        return False

    try:
        publish(handle, value)
    except StoreError as exc:
        logger.warning("Failed to publish %s=%r: %s", name, value, exc)
        return False
    return True
