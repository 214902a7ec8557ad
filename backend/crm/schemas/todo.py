"""
Todo schemas.
"""
from typing import Annotated, List, Optional

from pydantic import BaseModel

from crm.models.todo import Todo
from crm.schemas.common import FileRef, Name, OptionalDateTime, OptionalText, PatchModel, choice

TodoStatus = Annotated[str, choice(Todo.ALL_STATUSES)]
Priority = Annotated[str, choice(Todo.ALL_PRIORITIES)]


class TodoCreate(BaseModel):
    """Create a new task. ``linked_id`` and ``assigned_id`` default to the acting user."""
    task_name: Name
    status: TodoStatus = Todo.STATUS_TODO
    priority: Priority = 'High'
    linked_id: OptionalText = None
    assigned_id: OptionalText = None
    due_date: OptionalDateTime = None
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None


class TodoUpdate(PatchModel):
    """Update an existing task."""
    NON_NULLABLE = ('task_name', 'status', 'priority', 'linked_id')

    task_name: Optional[Name] = None
    status: Optional[TodoStatus] = None
    priority: Optional[Priority] = None
    linked_id: Optional[str] = None
    assigned_id: OptionalText = None
    due_date: OptionalDateTime = None
    notes: OptionalText = None
    files: Optional[List[FileRef]] = None
