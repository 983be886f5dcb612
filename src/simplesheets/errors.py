"""
Exception taxonomy for simplesheets.

Remote failures are not wrapped: the google api client raises
googleapiclient.errors.HttpError and that is what callers see, possibly
annotated with retry metadata by the executor.  Everything here is for
failures that originate on our side of the wire.
"""
from googleapiclient.errors import HttpError

class SheetsError(Exception):
    """Base class for all library raised errors."""
    pass

class ConfigurationError(SheetsError):
    """Configuration is missing or unusable, never retried."""
    pass

class CredentialsError(ConfigurationError):
    """Credentials could not be located, read or parsed."""
    pass

class NotInitializedError(ConfigurationError):
    """A module level operation was called before init()."""

    def __init__(self, message: str = "simplesheets not initialized. Call init() first.") -> None:
        super().__init__(message)

class PreconditionError(SheetsError):
    """
    The remote state doesn't allow the requested change.  Retrying would
    not change the outcome.
    """
    def __init__(self, message: str, spreadsheet_id: str = "", tab: str = "") -> None:
        super().__init__(message)
        self.spreadsheet_id = spreadsheet_id
        self.tab = tab

class TabExistsError(PreconditionError):
    pass

class TabNotFoundError(PreconditionError):
    pass

class ConversionError(SheetsError):
    """Input data could not be converted, e.g. an unreadable xlsx file."""
    pass

class BulkDeleteError(SheetsError):
    """
    One or more deletions in a bulk delete failed.  The siblings were not
    cancelled, so deleted holds what did go through.
    """
    def __init__(self, deleted: list, failures: list[tuple]) -> None:
        super().__init__(f"{len(failures)} of {len(deleted) + len(failures)} spreadsheet deletions failed")
        self.deleted = deleted
        self.failures = failures

def status_of(error: BaseException) -> int:
    """
    HTTP status of a remote failure, 0 if there isn't one.
    HttpError keeps it on the httplib2 response, other transports
    tend to use a code or status_code attribute.
    """
    if isinstance(error, HttpError):
        try:
            return int(error.resp.status)
        except (AttributeError, TypeError, ValueError):
            return 0
    for attr in ("status_code", "code"):
        v = getattr(error, attr, None)
        if isinstance(v, int):
            return v
    return 0

def reasons_of(error: BaseException) -> list[str]:
    """Machine readable reasons from a Google error payload, if present."""
    details = getattr(error, "error_details", None)
    reasons = []
    if isinstance(details, list):
        for d in details:
            if isinstance(d, dict) and d.get("reason"):
                reasons.append(str(d["reason"]))
    return reasons

def is_not_found(error: BaseException) -> bool:
    return status_of(error) == 404
