from .container import StorageContainer
from .interfaces import ListRepository, TaskRepository, UserRepository

__all__ = ["ListRepository", "StorageContainer", "TaskRepository", "UserRepository"]
