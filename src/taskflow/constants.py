"""Shared constants for the Taskflow server, client and CLI."""

from __future__ import annotations

API_PREFIX = "/api"

DEFAULT_DATA_DIR_NAME = ".taskflow"
CONFIG_FILE = "config.yaml"

USERS_FILE = "users.yaml"
LISTS_FILE = "lists.yaml"
TASKS_FILE = "tasks.yaml"

DEFAULT_SECRET_KEY = "dev-secret-key-change-me-in-production"
DEFAULT_TOKEN_EXPIRE_MINUTES = 7 * 24 * 60  # 7 days
DEFAULT_API_URL = "http://127.0.0.1:8000"
JWT_ALGORITHM = "HS256"

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Notification messages surfaced to the user
MSG_FETCH_FAILED = "Failed to fetch lists"
MSG_LIST_CREATED = "List created successfully"
MSG_LIST_CREATE_FAILED = "Failed to create list"
MSG_LIST_DELETED = "List deleted successfully"
MSG_LIST_DELETE_FAILED = "Failed to delete list"
MSG_LIST_MOVE_FAILED = "Failed to reorder lists"
MSG_TASK_CREATED = "Task created successfully"
MSG_TASK_CREATE_FAILED = "Failed to create task"
MSG_TASK_UPDATE_FAILED = "Failed to update task"
MSG_TASK_DELETED = "Task deleted successfully"
MSG_TASK_DELETE_FAILED = "Failed to delete task"
MSG_TASK_MOVE_FAILED = "Failed to move task"
MSG_SESSION_EXPIRED = "Session expired, please log in again"
