from .models import Priority, Task, TaskList, User, now_iso

__all__ = ["Priority", "Task", "TaskList", "User", "now_iso"]
