import re


class StoreError(Exception):
    """Base exception for persistence store failures."""


class StoreNotFoundError(StoreError):
    """Raised when the addressed user document does not exist."""


class StoreWriteError(StoreError):
    """Raised when a write is rejected by store-side validation."""


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached."""


_PATH_PATTERN = re.compile(r"/[^\s]+")
_EMAIL_PATTERN = re.compile(r"\b\w+@\w+\.\w+\b")
_NUMBER_PATTERN = re.compile(r"\b\d{4,}\b")
_TOKEN_PATTERN = re.compile(r"[a-zA-Z0-9]{20,}")


def sanitize_error(error: BaseException) -> str:
    """Strip paths, addresses, long numbers, and tokens from error text."""
    message = str(error) or type(error).__name__
    message = _PATH_PATTERN.sub("[PATH_REMOVED]", message)
    message = _EMAIL_PATTERN.sub("[EMAIL_REMOVED]", message)
    message = _NUMBER_PATTERN.sub("[NUMBER_REMOVED]", message)
    return _TOKEN_PATTERN.sub("[TOKEN_REMOVED]", message)
