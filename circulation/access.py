# circulation/access.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from circulation.errors import Forbidden, InvalidRequest


class Role(str, Enum):
    MEMBER = "member"
    LIBRARIAN = "librarian"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        if value is None or value == "":
            return cls.MEMBER
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidRequest(f"Unknown role {value!r}")


@dataclass(frozen=True)
class Actor:
    """An already authenticated caller, as handed over by the auth collaborator"""
    user_id: str
    role: Role = Role.MEMBER

    @property
    def is_librarian(self) -> bool:
        return self.role == Role.LIBRARIAN


def require_librarian(actor: Actor, action: str) -> None:
    if not actor.is_librarian:
        raise Forbidden(f"Only librarians may {action}")


def require_self_or_librarian(actor: Actor, user_id: Optional[str], action: str) -> None:
    if actor.is_librarian:
        return
    if user_id is not None and str(user_id) != actor.user_id:
        raise Forbidden(f"Members may only {action} for themselves")
