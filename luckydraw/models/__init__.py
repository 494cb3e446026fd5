from .base import Base

# import models so create_all() and autoloaders can discover mappers
from .snapshot import SessionSnapshot  # noqa: F401

__all__ = [
    "Base",
    "SessionSnapshot",
]
