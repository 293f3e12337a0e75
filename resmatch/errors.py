from __future__ import annotations


class EngineError(Exception):
    """Base class for failures of a unit of work."""


class StoreError(EngineError):
    """The backing store rejected or could not serve a request."""


class InvalidKeyError(EngineError, ValueError):
    """A name cannot be used as a single path segment in the store."""


class PartialBatchError(EngineError):
    """Some concurrent sub-operations of a unit of work failed.

    Effects of the sub-operations that succeeded are already applied and are
    not rolled back.
    """

    def __init__(self, succeeded: int, failed: int, errors: list[BaseException]):
        self.succeeded = succeeded
        self.failed = failed
        self.errors = errors
        first = errors[0] if errors else None
        super().__init__(
            f"{failed} of {succeeded + failed} sub-operations failed"
            + (f": {first}" if first else "")
        )
