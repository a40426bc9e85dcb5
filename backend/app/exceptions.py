"""
Error kinds surfaced by a recurring detection run.
"""


class RecurringDetectionError(Exception):
    """Base class for detection run failures."""

    kind = "error"


class FetchError(RecurringDetectionError):
    """A collaborator read failed; the run was aborted and nothing was written."""

    kind = "fetch"


class WriteError(RecurringDetectionError):
    """The final batch upsert failed; computed candidates were not persisted."""

    kind = "write"
