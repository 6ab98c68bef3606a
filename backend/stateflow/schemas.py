from pydantic import BaseModel
from typing import Optional, Dict, Any, List


class CreateDiagramRequest(BaseModel):
    name: str = "New diagram"
    description: Optional[str] = None


class DiagramSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: str
    updated_at: str
    actor_count: int = 0
    flow_count: int = 0


class EntityUpdateRequest(BaseModel):
    """Partial update; keys may be snake_case or the camelCase wire names"""
    updates: Dict[str, Any]


class FocusResponse(BaseModel):
    flow_id: str
    node_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    zoom: float = 1.0


class LayoutResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    width: float
    height: float
    lifeline_height: float
    legend: Dict[str, str]
    layout: str
    validation: Optional[Dict[str, Any]] = None
