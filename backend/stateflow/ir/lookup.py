from typing import Dict, Optional

from .diagram import Actor, Condition, Diagram, Flow, State


class DiagramIndex:
    """
    Weak reference resolution for one Diagram snapshot.

    Every lookup returns None on a miss; callers decide the fallback.
    The first entity wins when ids are duplicated.
    """

    def __init__(self, diagram: Diagram, column_width: float = 0.0):
        self.diagram = diagram
        self._actors: Dict[str, Actor] = {}
        self._actor_columns: Dict[str, int] = {}
        self._states: Dict[str, State] = {}
        self._conditions: Dict[str, Condition] = {}
        self._flows: Dict[str, Flow] = {}

        for column, actor in enumerate(diagram.actors):
            if actor.id not in self._actors:
                self._actors[actor.id] = actor
                self._actor_columns[actor.id] = column
        for state in diagram.states:
            self._states.setdefault(state.id, state)
        for condition in diagram.conditions:
            self._conditions.setdefault(condition.id, condition)
        for flow in diagram.flows:
            self._flows.setdefault(flow.id, flow)

        self.column_width = column_width

    def actor(self, actor_id: Optional[str]) -> Optional[Actor]:
        if actor_id is None:
            return None
        return self._actors.get(actor_id)

    def column(self, actor_id: Optional[str]) -> Optional[int]:
        if actor_id is None:
            return None
        return self._actor_columns.get(actor_id)

    def actor_x(self, actor_id: Optional[str]) -> Optional[float]:
        column = self.column(actor_id)
        if column is None:
            return None
        return column * self.column_width

    def state(self, state_id: Optional[str]) -> Optional[State]:
        if state_id is None:
            return None
        return self._states.get(state_id)

    def condition(self, condition_id: Optional[str]) -> Optional[Condition]:
        if condition_id is None:
            return None
        return self._conditions.get(condition_id)

    def flow(self, flow_id: Optional[str]) -> Optional[Flow]:
        if flow_id is None:
            return None
        return self._flows.get(flow_id)

    def owner_of(self, state_id: Optional[str]) -> Optional[Actor]:
        state = self.state(state_id)
        if state is None:
            return None
        return self.actor(state.owner)
