"""Closed set of error kinds surfaced by the service layer."""
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        return {"message": self.message, "kind": self.kind.value}

    def __repr__(self) -> str:
        return f"AppError({self.kind.value!r}, {self.message!r})"


def validation_error(message: str) -> AppError:
    return AppError(ErrorKind.VALIDATION, message)


def not_found(message: str) -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message)


def forbidden(message: str = "Access denied") -> AppError:
    return AppError(ErrorKind.FORBIDDEN, message)
