import datetime
from typing import Protocol

from app.models.banner import Banner


class ElementalRotation(Protocol):
    """Decides whether an elemental banner can be pulled at a given time.

    The rotation schedule itself is owned by another service; summons only ask.
    """

    def is_open(self, banner: Banner, now: datetime.datetime) -> bool: ...


class AlwaysOpenRotation:
    def is_open(self, banner: Banner, now: datetime.datetime) -> bool:  # noqa: ARG002, PLR6301
        return True


def get_elemental_rotation() -> ElementalRotation:
    """FastAPI dependency; override it to plug in the live rotation schedule."""
    return AlwaysOpenRotation()
