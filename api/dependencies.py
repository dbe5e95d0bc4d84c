# api/dependencies.py
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, status

from circulation import Actor, LibrarySystem, Role


@lru_cache
def get_system() -> LibrarySystem:
    """One engine per process, built from the environment settings"""
    return LibrarySystem()


def get_actor(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id"),
    x_user_role: Optional[str] = Header(None, description="member or librarian")
) -> Actor:
    """
    Build the caller from the headers set by the authentication proxy.

    Raises:
        HTTPException: 401 when no user id was forwarded
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header required")
    return Actor(user_id=x_user_id, role=Role.parse(x_user_role))
