from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime
from typing import Optional, List
import uuid


class SystemList(str, Enum):
    inbox = "Inbox"
    next = "Next"
    upcoming = "Upcoming"
    someday = "Someday"


class TaskStatus(str, Enum):
    open = "Open"
    done = "Done"


class TaskPriority(str, Enum):
    p1 = "P1"
    p2 = "P2"
    p3 = "P3"
    p4 = "P4"


class CamelModel(BaseModel):
    """Wire models use camelCase on the outside, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(CamelModel):
    name: str = Field(min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=4000)
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    system_list: SystemList = SystemList.inbox


class Task(TaskCreate):
    id: str
    user_id: str
    status: TaskStatus = TaskStatus.open
    sort_order: int = Field(default=0, ge=0)
    is_archived: bool = False
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskStatusFilter(str, Enum):
    open = "Open"
    done = "Done"
    all = "All"


class TaskUpdate(CamelModel):
    """Partial update. Only fields present in the request body are applied;
    an explicit null clears description, due date or priority."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=4000)
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    system_list: Optional[SystemList] = None


class TaskList(CamelModel):
    tasks: List[Task]


class ReorderTasksRequest(CamelModel):
    # Shape checks (empty, blank, duplicate ids) happen in the ordering engine
    # so direct service callers get the same errors as HTTP callers.
    task_ids: List[str]
    system_list: SystemList


class ReorderedTask(CamelModel):
    id: str
    sort_order: int


class ReorderTasksResponse(CamelModel):
    reordered_tasks: List[ReorderedTask]


def new_task_id() -> str:
    return str(uuid.uuid4())
