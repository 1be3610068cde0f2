"""Infrastructure layer implementations."""

from src.infrastructure import push, storage

__all__ = ["storage", "push"]
