from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .errors import ValidationError
from .validation import ValidationResult


class ActorType(str, Enum):
    COMPONENT = "component"
    STORE = "store"
    SERVICE = "service"
    EXTERNAL = "external"


class StateScope(str, Enum):
    LOCAL = "local"
    SUBTREE = "subtree"
    GLOBAL = "global"


class TriggerType(str, Enum):
    USER_ACTION = "userAction"
    LIFECYCLE = "lifecycle"
    SUBSCRIPTION = "subscription"
    TIMER = "timer"


class StepType(str, Enum):
    DISPATCH = "dispatch"
    STATE_CHANGE = "stateChange"
    SUBSCRIBE = "subscribe"
    EFFECT = "effect"
    RENDER = "render"


# -------------------------
# Timestamps
# -------------------------

def normalize_timestamp(value: datetime) -> datetime:
    """UTC, truncated to milliseconds (the precision of the persisted form)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utc_now() -> datetime:
    return normalize_timestamp(datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    value = normalize_timestamp(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


# -------------------------
# Entities
# -------------------------

class ModelEntity(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(populate_by_name=True)

    def merged(self, updates: Dict[str, Any]):
        """Return a re-validated copy with *updates* applied. Identity is kept."""
        data = self.model_dump(by_alias=True)
        fields = type(self).model_fields
        for key, value in updates.items():
            field = fields.get(key)
            name = field.alias if field is not None and field.alias else key
            if name == "id":
                continue
            data[name] = value
        return type(self).model_validate(data)


class Actor(ModelEntity):
    id: str
    name: str
    type: ActorType
    scope: Optional[StateScope] = None   # only meaningful for stores
    description: Optional[str] = None
    color: Optional[str] = None
    parent: Optional[str] = None


class State(ModelEntity):
    id: str
    name: str
    owner: str
    data_type: Optional[str] = Field(default=None, alias="dataType")
    description: Optional[str] = None


class Condition(ModelEntity):
    id: str
    expression: str
    description: Optional[str] = None


class FlowTrigger(ModelEntity):
    type: TriggerType
    actor: str
    action: str = ""
    target: Optional[str] = None


class FlowStep(ModelEntity):
    id: str
    type: StepType
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    action: Optional[str] = None
    state: Optional[str] = None
    payload: Optional[str] = None
    description: Optional[str] = None
    condition: Optional[str] = None
    is_async: bool = Field(default=False, alias="isAsync")


class Flow(ModelEntity):
    id: str
    name: str
    description: Optional[str] = None
    trigger: Optional[FlowTrigger] = None
    steps: List[FlowStep] = Field(default_factory=list)


class Diagram(ModelEntity):
    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")
    actors: List[Actor] = Field(default_factory=list)
    states: List[State] = Field(default_factory=list)
    flows: List[Flow] = Field(default_factory=list)
    conditions: List[Condition] = Field(default_factory=list)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _normalize_timestamps(cls, value: datetime) -> datetime:
        return normalize_timestamp(value)

    @field_serializer("created_at", "updated_at", when_used="json")
    def _serialize_timestamps(self, value: datetime) -> str:
        return format_timestamp(value)

    @property
    def total_steps(self) -> int:
        return sum(len(flow.steps) for flow in self.flows)

    def check_integrity(self) -> ValidationResult:
        """Duplicate ids and empty names. Dangling references are not errors here."""
        errors = []
        if not self.name:
            errors.append(
                ValidationError(
                    level="diagram",
                    message="name must not be empty",
                    object_id=self.id,
                    code="EMPTY_NAME",
                )
            )

        collections = {
            "actor": self.actors,
            "state": self.states,
            "flow": self.flows,
            "condition": self.conditions,
        }
        for level, entities in collections.items():
            seen = set()
            for entity in entities:
                if entity.id in seen:
                    errors.append(
                        ValidationError(
                            level=level,
                            message=f"duplicate {level} id",
                            object_id=entity.id,
                            code="DUPLICATE_ID",
                        )
                    )
                seen.add(entity.id)
                # conditions carry an expression instead of a name
                if hasattr(entity, "name") and not entity.name:
                    errors.append(
                        ValidationError(
                            level=level,
                            message="name must not be empty",
                            object_id=entity.id,
                            code="EMPTY_NAME",
                        )
                    )

        for flow in self.flows:
            seen_steps = set()
            for step in flow.steps:
                if step.id in seen_steps:
                    errors.append(
                        ValidationError(
                            level="step",
                            message=f"duplicate step id in flow '{flow.id}'",
                            object_id=step.id,
                            code="DUPLICATE_ID",
                        )
                    )
                seen_steps.add(step.id)

        if errors:
            return ValidationResult.failure(errors)

        return ValidationResult.success()
