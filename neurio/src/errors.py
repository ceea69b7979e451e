"""
Failure categories for the acquisition pipeline.

Every per-cycle failure derives from :class:`AcquisitionError` so the
poll loop can tell an expected, logged-and-skipped failure apart from a
programming error. Parse and schema failures are also ``ValueError``
subclasses, matching how payload validation errors are raised elsewhere.

Field-level problems (a single missing or non-numeric value) are not
represented here: they never abort anything and are only logged.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-102)

TODO:
- None
"""


class AcquisitionError(Exception):
    """Base class for failures that abort the current poll cycle only."""


class AllocationFailure(AcquisitionError):
    """The receive buffer could not grow to hold an incoming chunk."""


class TransportFailure(AcquisitionError):
    """The HTTP transfer failed (connection, timeout, or non-2xx status)."""


class ParseFailure(AcquisitionError, ValueError):
    """The received payload is not well-formed JSON."""


class SchemaFailure(AcquisitionError, ValueError):
    """The payload parsed but lacks a ``channels`` array."""


class StoreError(Exception):
    """The variable store could not be opened, read or written."""
