"""School-library circulation and inventory consistency engine."""
from .access import Actor, Role
from .system import LibrarySystem

__all__ = ['Actor', 'Role', 'LibrarySystem']
