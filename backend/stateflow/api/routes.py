import logging
from enum import Enum
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from stateflow.api.serializers import diagram_to_record, import_document, serialize_ir
from stateflow.db.repository import DiagramRepository
from stateflow.db.session import get_db
from stateflow.editing.session import EditingSession, new_diagram
from stateflow.ir.diagram import Diagram, format_timestamp
from stateflow.ir.errors import (
    DiagramImportError,
    DuplicateEntityError,
    EntityNotFoundError,
    PersistenceError,
)
from stateflow.renderer.svg_renderer import render_svg
from stateflow.schemas import (
    CreateDiagramRequest,
    DiagramSummary,
    EntityUpdateRequest,
    FocusResponse,
    LayoutResponse,
)
from stateflow.validation import validate_diagram
from stateflow.visual.visual_mapper import map_diagram_to_visual_ir

logger = logging.getLogger(__name__)

router = APIRouter()


class CollectionName(str, Enum):
    actors = "actors"
    states = "states"
    flows = "flows"
    conditions = "conditions"


def get_repository(db: Session = Depends(get_db)) -> DiagramRepository:
    return DiagramRepository(db)


def _load_session(diagram_id: str, repository: DiagramRepository) -> EditingSession:
    try:
        diagram = repository.get(diagram_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if diagram is None:
        raise HTTPException(status_code=404, detail=f"diagram '{diagram_id}' not found")
    return EditingSession(diagram=diagram, repository=repository)


def _save(session: EditingSession) -> Diagram:
    try:
        return session.save()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _summary(diagram: Diagram) -> DiagramSummary:
    return DiagramSummary(
        id=diagram.id,
        name=diagram.name,
        description=diagram.description,
        created_at=format_timestamp(diagram.created_at),
        updated_at=format_timestamp(diagram.updated_at),
        actor_count=len(diagram.actors),
        flow_count=len(diagram.flows),
    )


def _layout_response(diagram: Diagram) -> LayoutResponse:
    visual = serialize_ir(map_diagram_to_visual_ir(diagram))
    return LayoutResponse(
        **visual,
        validation=validate_diagram(diagram).to_dict(),
    )


# ============================
# Diagrams
# ============================

@router.get("/diagrams", response_model=list[DiagramSummary])
def list_diagrams(repository: DiagramRepository = Depends(get_repository)):
    try:
        diagrams = repository.list_all()
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [_summary(d) for d in diagrams]


@router.post("/diagrams", status_code=201)
def create_diagram(
    request: CreateDiagramRequest,
    repository: DiagramRepository = Depends(get_repository),
):
    session = EditingSession(
        diagram=new_diagram(request.name, request.description),
        repository=repository,
    )
    diagram = _save(session)
    return diagram_to_record(diagram)


@router.get("/diagrams/{diagram_id}")
def get_diagram(diagram_id: str, repository: DiagramRepository = Depends(get_repository)):
    return diagram_to_record(_load_session(diagram_id, repository).diagram)


@router.delete("/diagrams/{diagram_id}", status_code=204)
def delete_diagram(diagram_id: str, repository: DiagramRepository = Depends(get_repository)):
    try:
        deleted = repository.delete(diagram_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"diagram '{diagram_id}' not found")
    return Response(status_code=204)


@router.put("/diagrams/{diagram_id}/import")
def import_into_diagram(
    diagram_id: str,
    document: Any = Body(...),
    repository: DiagramRepository = Depends(get_repository),
):
    session = _load_session(diagram_id, repository)
    try:
        session.import_document(document)
    except DiagramImportError as e:
        logger.info("[API] import into %s rejected: %s", diagram_id, e)
        raise HTTPException(status_code=422, detail=str(e))
    return diagram_to_record(_save(session))


@router.get("/diagrams/{diagram_id}/export")
def export_diagram(diagram_id: str, repository: DiagramRepository = Depends(get_repository)):
    session = _load_session(diagram_id, repository)
    return Response(
        content=session.export_json(),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{session.diagram.id}.json"'
        },
    )


# ============================
# Projections
# ============================

@router.get("/diagrams/{diagram_id}/layout", response_model=LayoutResponse)
def diagram_layout(diagram_id: str, repository: DiagramRepository = Depends(get_repository)):
    return _layout_response(_load_session(diagram_id, repository).diagram)


@router.get("/diagrams/{diagram_id}/svg")
def diagram_svg(diagram_id: str, repository: DiagramRepository = Depends(get_repository)):
    session = _load_session(diagram_id, repository)
    return Response(content=render_svg(session.layout()), media_type="image/svg+xml")


@router.post("/diagrams/{diagram_id}/focus/{flow_id}", response_model=FocusResponse)
def focus_flow(
    diagram_id: str,
    flow_id: str,
    repository: DiagramRepository = Depends(get_repository),
):
    session = _load_session(diagram_id, repository)
    session.request_focus(flow_id)
    command = session.consume_focus()
    if command is None:
        return FocusResponse(flow_id=flow_id)
    return FocusResponse(
        flow_id=command.flow_id,
        node_id=command.node_id,
        x=command.x,
        y=command.y,
        zoom=command.zoom,
    )


@router.post("/layout", response_model=LayoutResponse)
def layout_document(document: Any = Body(...)):
    """Stateless layout of a posted diagram document."""
    try:
        diagram = import_document(document)
    except DiagramImportError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _layout_response(diagram)


# ============================
# Entities
# ============================

@router.post("/diagrams/{diagram_id}/{collection}", status_code=201)
def add_entity(
    diagram_id: str,
    collection: CollectionName,
    entity: Dict[str, Any] = Body(...),
    repository: DiagramRepository = Depends(get_repository),
):
    session = _load_session(diagram_id, repository)
    try:
        added = session.add(collection.value, entity)
    except DuplicateEntityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        # pydantic validation errors are ValueErrors
        raise HTTPException(status_code=422, detail=str(e))
    _save(session)
    return serialize_ir(added)


@router.patch("/diagrams/{diagram_id}/{collection}/{entity_id}")
def update_entity(
    diagram_id: str,
    collection: CollectionName,
    entity_id: str,
    request: EntityUpdateRequest,
    repository: DiagramRepository = Depends(get_repository),
):
    session = _load_session(diagram_id, repository)
    try:
        updated = session.update(collection.value, entity_id, request.updates)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    _save(session)
    return serialize_ir(updated)


@router.delete("/diagrams/{diagram_id}/{collection}/{entity_id}", status_code=204)
def delete_entity(
    diagram_id: str,
    collection: CollectionName,
    entity_id: str,
    repository: DiagramRepository = Depends(get_repository),
):
    session = _load_session(diagram_id, repository)
    try:
        session.delete(collection.value, entity_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    _save(session)
    return Response(status_code=204)
