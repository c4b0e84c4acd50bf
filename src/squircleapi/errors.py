from __future__ import annotations


class StoreError(Exception):
    status_code = 500
    code = "STORE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class NotFoundError(StoreError):
    status_code = 404
    code = "THEME_NOT_FOUND"


class DeserializationError(StoreError):
    status_code = 400
    code = "THEME_MALFORMED"


class ConflictError(StoreError):
    status_code = 409
    code = "THEME_ALREADY_EXISTS"


class StorageIOError(StoreError):
    status_code = 500
    code = "STORAGE_IO_ERROR"


class MigrationAbortError(StoreError):
    status_code = 500
    code = "MIGRATION_ABORTED"

    def __init__(
        self,
        message: str,
        *,
        from_version: int,
        to_version: int,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.from_version = from_version
        self.to_version = to_version


class InvalidColorError(StoreError):
    status_code = 422
    code = "THEME_INVALID_COLOR"
