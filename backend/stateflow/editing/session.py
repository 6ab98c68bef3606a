import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from stateflow.api.serializers import export_json, import_document, import_json
from stateflow.editing.focus import FocusCommand, FocusSlot
from stateflow.ir.diagram import Actor, Condition, Diagram, Flow, State, utc_now
from stateflow.ir.errors import DuplicateEntityError, EntityNotFoundError, PersistenceError
from stateflow.ir.lookup import DiagramIndex
from stateflow.visual.visual_mapper import map_diagram_to_visual_ir
from stateflow.visual.visual_schema import VisualDiagram

logger = logging.getLogger(__name__)

DEFAULT_DIAGRAM_NAME = "New diagram"

# collection name → (entity class, human-readable kind)
COLLECTIONS = {
    "actors": (Actor, "actor"),
    "states": (State, "state"),
    "flows": (Flow, "flow"),
    "conditions": (Condition, "condition"),
}


def new_diagram(name: str = DEFAULT_DIAGRAM_NAME, description: Optional[str] = None) -> Diagram:
    now = utc_now()
    return Diagram(
        id=str(uuid.uuid4()),
        name=name,
        description=description,
        created_at=now,
        updated_at=now,
    )


@dataclass
class EditingSession:
    """
    The diagram currently being edited, owned by the application controller.

    Mutations replace entities in place and mark the session dirty; the
    layout is recomputed from the whole Diagram on demand. Nothing is
    persisted until save().
    """

    diagram: Diagram
    repository: Optional[Any] = None          # DiagramRepository
    dirty: bool = False
    focus: FocusSlot = field(default_factory=FocusSlot)

    # ------------------------------------------------------------------ #
    # Generic entity operations
    # ------------------------------------------------------------------ #

    def _collection(self, collection: str) -> List:
        if collection not in COLLECTIONS:
            raise KeyError(f"unknown collection '{collection}'")
        return getattr(self.diagram, collection)

    def get(self, collection: str, entity_id: str):
        for entity in self._collection(collection):
            if entity.id == entity_id:
                return entity
        raise EntityNotFoundError(COLLECTIONS[collection][1], entity_id)

    def add(self, collection: str, entity):
        entity_cls, kind = COLLECTIONS[collection]
        if isinstance(entity, dict):
            entity = entity_cls.model_validate(entity)
        items = self._collection(collection)
        if any(existing.id == entity.id for existing in items):
            raise DuplicateEntityError(kind, entity.id)
        items.append(entity)
        self._touch(f"added {kind} {entity.id}")
        return entity

    def update(self, collection: str, entity_id: str, updates: Dict[str, Any]):
        items = self._collection(collection)
        for position, entity in enumerate(items):
            if entity.id == entity_id:
                items[position] = entity.merged(updates)
                self._touch(f"updated {COLLECTIONS[collection][1]} {entity_id}")
                return items[position]
        raise EntityNotFoundError(COLLECTIONS[collection][1], entity_id)

    def delete(self, collection: str, entity_id: str) -> None:
        """No cascade: references to the deleted entity are left dangling."""
        items = self._collection(collection)
        remaining = [entity for entity in items if entity.id != entity_id]
        if len(remaining) == len(items):
            raise EntityNotFoundError(COLLECTIONS[collection][1], entity_id)
        items[:] = remaining
        self._touch(f"deleted {COLLECTIONS[collection][1]} {entity_id}")

    # ------------------------------------------------------------------ #
    # Per-kind shortcuts
    # ------------------------------------------------------------------ #

    def add_actor(self, actor: Actor) -> Actor:
        return self.add("actors", actor)

    def update_actor(self, actor_id: str, updates: Dict[str, Any]) -> Actor:
        return self.update("actors", actor_id, updates)

    def delete_actor(self, actor_id: str) -> None:
        self.delete("actors", actor_id)

    def add_state(self, state: State) -> State:
        return self.add("states", state)

    def update_state(self, state_id: str, updates: Dict[str, Any]) -> State:
        return self.update("states", state_id, updates)

    def delete_state(self, state_id: str) -> None:
        self.delete("states", state_id)

    def add_flow(self, flow: Flow) -> Flow:
        return self.add("flows", flow)

    def update_flow(self, flow_id: str, updates: Dict[str, Any]) -> Flow:
        return self.update("flows", flow_id, updates)

    def delete_flow(self, flow_id: str) -> None:
        self.delete("flows", flow_id)

    def add_condition(self, condition: Condition) -> Condition:
        return self.add("conditions", condition)

    def update_condition(self, condition_id: str, updates: Dict[str, Any]) -> Condition:
        return self.update("conditions", condition_id, updates)

    def delete_condition(self, condition_id: str) -> None:
        self.delete("conditions", condition_id)

    # ------------------------------------------------------------------ #
    # Diagram-level operations
    # ------------------------------------------------------------------ #

    def rename(self, name: str, description: Optional[str] = None) -> None:
        self.diagram.name = name
        if description is not None:
            self.diagram.description = description
        self._touch("renamed diagram")

    def layout(self) -> VisualDiagram:
        return map_diagram_to_visual_ir(self.diagram)

    def export_json(self) -> str:
        return export_json(self.diagram)

    def import_json(self, text: str) -> Diagram:
        """Replace the content; the session's diagram id is kept. On failure nothing changes."""
        return self._replace(import_json(text))

    def import_document(self, document: Any) -> Diagram:
        return self._replace(import_document(document))

    def _replace(self, imported: Diagram) -> Diagram:
        imported.id = self.diagram.id
        imported.updated_at = utc_now()
        self.diagram = imported
        self._touch("imported document")
        return imported

    def save(self) -> Diagram:
        """
        Persist the current diagram. On failure the edits stay in memory,
        the session stays dirty and PersistenceError propagates.
        """
        if self.repository is None:
            raise PersistenceError("no diagram store configured")
        snapshot = self.diagram.model_copy(update={"updated_at": utc_now()}, deep=True)
        self.repository.save(snapshot)
        self.diagram = snapshot
        self.dirty = False
        logger.info("[SESSION] saved diagram %s", snapshot.id)
        return snapshot

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    def request_focus(self, flow_id: str) -> Optional[FocusCommand]:
        if DiagramIndex(self.diagram).flow(flow_id) is None:
            logger.debug("[SESSION] %s: focus on unknown flow %s", self.diagram.id, flow_id)
            self.focus.clear()
            return None
        return self.focus.request(flow_id, self.layout())

    def consume_focus(self) -> Optional[FocusCommand]:
        return self.focus.consume()

    def _touch(self, what: str) -> None:
        self.dirty = True
        logger.debug("[SESSION] %s: %s", self.diagram.id, what)
