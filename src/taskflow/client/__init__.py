from .api import StorageGateway, TaskflowClient
from .board import BoardController

__all__ = ["BoardController", "StorageGateway", "TaskflowClient"]
