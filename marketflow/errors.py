# marketflow/errors.py


class StoreError(Exception):
    """Base class for failures surfaced by the mock services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StoreError):
    status_code = 404


class ValidationFailed(StoreError):
    status_code = 400


class ConflictFailed(StoreError):
    status_code = 409
