# Behavioral model: actors, states, flows, steps, conditions

from stateflow.ir.diagram import (
    Actor,
    ActorType,
    Condition,
    Diagram,
    Flow,
    FlowStep,
    FlowTrigger,
    State,
    StateScope,
    StepType,
    TriggerType,
    format_timestamp,
    utc_now,
)
from stateflow.ir.errors import (
    DiagramImportError,
    DuplicateEntityError,
    EntityNotFoundError,
    PersistenceError,
    StateFlowError,
)
from stateflow.ir.lookup import DiagramIndex

__all__ = [
    "Actor",
    "ActorType",
    "Condition",
    "Diagram",
    "DiagramIndex",
    "DiagramImportError",
    "DuplicateEntityError",
    "EntityNotFoundError",
    "Flow",
    "FlowStep",
    "FlowTrigger",
    "PersistenceError",
    "State",
    "StateFlowError",
    "StateScope",
    "StepType",
    "TriggerType",
    "format_timestamp",
    "utc_now",
]
