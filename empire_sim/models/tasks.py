"""Construction/research task schemas and governor decisions."""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
import uuid


class TaskStatus(str, Enum):
    """Lifecycle of a timed task."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ConstructionTask(BaseModel):
    """A building moving from one level to the next."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    province_id: str
    building_type: str
    target_level: int = Field(ge=1)
    started_at: datetime = Field(default_factory=datetime.now)
    finishes_at: datetime
    status: TaskStatus = TaskStatus.PENDING
    started_by: Optional[str] = None  # governor id when autonomous

    def is_complete(self, now: datetime) -> bool:
        return now >= self.finishes_at


class ResearchTask(BaseModel):
    """A technology being researched for a whole city."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    city_id: str
    tech_key: str
    started_at: datetime = Field(default_factory=datetime.now)
    finishes_at: datetime
    status: TaskStatus = TaskStatus.PENDING
    started_by: Optional[str] = None

    def is_complete(self, now: datetime) -> bool:
        return now >= self.finishes_at


class DecisionType(str, Enum):
    """What a governor chose to do this cycle."""
    BUILD = "BUILD"
    RESEARCH = "RESEARCH"
    WAIT = "WAIT"


class DecisionAction(BaseModel):
    """The concrete action behind a BUILD or RESEARCH decision."""
    building_type: Optional[str] = None
    tech_key: Optional[str] = None
    reason: str
    priority: int = Field(default=1, ge=1)


class GovernorDecision(BaseModel):
    """Result of the governor decision policy."""
    type: DecisionType = DecisionType.WAIT
    action: Optional[DecisionAction] = None

    @classmethod
    def wait(cls) -> "GovernorDecision":
        return cls(type=DecisionType.WAIT)

    def summary(self) -> str:
        if self.type == DecisionType.WAIT or self.action is None:
            return "WAIT"
        target = self.action.building_type or self.action.tech_key
        return f"{self.type.value} {target} (priority {self.action.priority})"
