from dataclasses import dataclass


@dataclass
class ValidationError:
    level: str
    message: str
    object_id: str
    code: str = "INVALID"  # EMPTY_NAME | DUPLICATE_ID


class StateFlowError(Exception):
    """Base class for editing and persistence failures."""


class DiagramImportError(StateFlowError):
    """A persisted or imported document could not be turned into a Diagram."""


class EntityNotFoundError(StateFlowError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id


class DuplicateEntityError(StateFlowError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} '{entity_id}' already exists")
        self.kind = kind
        self.entity_id = entity_id


class PersistenceError(StateFlowError):
    """The diagram store is unavailable; in-memory edits are kept."""
