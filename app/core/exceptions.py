"""Errors raised by the summon engine.

They are ``HTTPException`` subclasses so the API exception handler and the bot
error handler render them without special casing. ``to_dict`` carries the
machine-readable part (the error kind and, for resource errors, the amounts).
"""

from typing import Any, ClassVar

from fastapi import HTTPException, status

from app.core.enums import Currency

CURRENCY_LABELS: dict[Currency, str] = {
    Currency.GEMS: "鑽石",
    Currency.TICKETS: "召喚券",
    Currency.MYTHIC_SCROLLS: "神話卷軸",
}


class SummonError(HTTPException):
    kind: ClassVar[str] = "SummonError"
    default_status: ClassVar[int] = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(status_code=status_code or self.default_status, detail=detail)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


class ConfigurationError(SummonError):
    """Broken banner configuration. Not retried."""

    kind = "ConfigurationError"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR


class InvalidRequestError(SummonError):
    kind = "InvalidRequestError"


class InsufficientResourcesError(SummonError):
    kind = "InsufficientResourcesError"

    def __init__(self, currency: Currency, *, required: int, available: int) -> None:
        self.currency = currency
        self.required = required
        self.available = available
        super().__init__(
            f"{CURRENCY_LABELS[currency]}不足。目前: {available}, 需要: {required}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "currency": self.currency.value,
            "required": self.required,
            "available": self.available,
        }


class PersistenceConflictError(SummonError):
    """Another request changed the same player's state first. Safe to retry."""

    kind = "PersistenceConflictError"
    default_status = status.HTTP_409_CONFLICT
