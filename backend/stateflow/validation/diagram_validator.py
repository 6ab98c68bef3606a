"""
Diagram Validator - Reports referential problems in a behavioral Diagram.

Catches issues like:
- Duplicate ids within an entity kind
- Empty names
- States whose owner actor is gone
- Steps whose from/to actors are missing (they will not be drawn)
- Steps pointing at unknown states or conditions
- Triggers on unknown actors
- Flows with no steps
- Actor or step ids that collide with generated canvas ids

Nothing here blocks layout: the engine degrades on every miss. The report is
for the editing surface.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
from enum import Enum

from stateflow.ir.diagram import Diagram, FlowStep
from stateflow.ir.lookup import DiagramIndex
from stateflow.visual.edge_rules import is_self_edge
from stateflow.visual.visual_mapper import edge_id, flow_header_node_id, trigger_node_id


class ValidationSeverity(Enum):
    ERROR = "error"      # Model breaks an identity invariant
    WARNING = "warning"  # Something will be omitted from the diagram
    INFO = "info"        # Suggestions for improvement


@dataclass
class ValidationIssue:
    """A single validation issue found in the diagram"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    entity_id: Optional[str] = None
    flow_id: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "entity_id": self.entity_id,
            "flow_id": self.flow_id,
            "suggestion": self.suggestion,
        }


@dataclass
class DiagramValidationResult:
    """Result of diagram validation"""
    is_valid: bool
    is_complete: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.INFO)

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "is_complete": self.is_complete,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        """Get human-readable summary"""
        status = "Valid" if self.is_valid else "Invalid"
        completeness = "Complete" if self.is_complete else "Incomplete"
        return (
            f"{status} | {completeness} | "
            f"Errors: {self.error_count}, Warnings: {self.warning_count}, Info: {self.info_count}"
        )


class DiagramValidator:
    """
    Validates a Diagram's references and identities.

    Usage:
        validator = DiagramValidator()
        result = validator.validate(diagram)

        for issue in result.issues:
            logger.info("[%s] %s", issue.severity.value, issue.message)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode

    def validate(self, diagram: Diagram) -> DiagramValidationResult:
        """Validate the entire diagram."""
        index = DiagramIndex(diagram)
        issues: List[ValidationIssue] = []

        issues.extend(self._check_integrity(diagram))
        issues.extend(self._check_state_owners(diagram, index))
        issues.extend(self._check_triggers(diagram, index))
        issues.extend(self._check_steps(diagram, index))
        issues.extend(self._check_empty_flows(diagram))
        issues.extend(self._check_generated_ids(diagram))

        stats = self._calculate_stats(diagram, index)

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == ValidationSeverity.WARNING for i in issues)

        is_valid = not has_errors
        if self.strict_mode:
            is_valid = not has_errors and not has_warnings

        is_complete = not has_errors and stats.get("unrendered_steps", 0) == 0

        return DiagramValidationResult(
            is_valid=is_valid,
            is_complete=is_complete,
            issues=issues,
            stats=stats,
        )

    def _check_integrity(self, diagram: Diagram) -> List[ValidationIssue]:
        result = diagram.check_integrity()
        issues = []
        for error in result.errors:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code=error.code,
                message=f"{error.level} '{error.object_id}': {error.message}",
                entity_id=error.object_id,
                suggestion="Give every entity a unique id and a name",
            ))
        return issues

    def _check_state_owners(self, diagram: Diagram, index: DiagramIndex) -> List[ValidationIssue]:
        issues = []
        for state in diagram.states:
            if index.actor(state.owner) is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="ORPHANED_STATE",
                    message=f"State '{state.name}' is owned by unknown actor '{state.owner}'",
                    entity_id=state.id,
                    suggestion="Reassign the state to an existing actor",
                ))
        return issues

    def _check_triggers(self, diagram: Diagram, index: DiagramIndex) -> List[ValidationIssue]:
        issues = []
        for flow in diagram.flows:
            if flow.trigger is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="NO_TRIGGER",
                    message=f"Flow '{flow.name}' has no trigger",
                    flow_id=flow.id,
                ))
            elif index.actor(flow.trigger.actor) is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="UNKNOWN_TRIGGER_ACTOR",
                    message=(
                        f"Trigger of flow '{flow.name}' references unknown actor "
                        f"'{flow.trigger.actor}'; the trigger marker is omitted"
                    ),
                    flow_id=flow.id,
                ))
        return issues

    def _check_steps(self, diagram: Diagram, index: DiagramIndex) -> List[ValidationIssue]:
        issues = []
        for flow in diagram.flows:
            for step in flow.steps:
                issues.extend(self._check_step(flow.id, step, index))
        return issues

    def _check_step(self, flow_id: str, step: FlowStep, index: DiagramIndex) -> List[ValidationIssue]:
        issues = []
        for end, actor_id in (("from", step.from_), ("to", step.to)):
            if actor_id is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="MISSING_STEP_ACTOR",
                    message=f"Step '{step.id}' has no '{end}' actor and is not drawn",
                    entity_id=step.id,
                    flow_id=flow_id,
                ))
            elif index.actor(actor_id) is None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="UNKNOWN_STEP_ACTOR",
                    message=(
                        f"Step '{step.id}' references unknown '{end}' actor "
                        f"'{actor_id}' and is not drawn"
                    ),
                    entity_id=step.id,
                    flow_id=flow_id,
                    suggestion="Point the step at an existing actor",
                ))

        if step.state is not None and index.state(step.state) is None:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="UNKNOWN_STATE",
                message=f"Step '{step.id}' references unknown state '{step.state}'",
                entity_id=step.id,
                flow_id=flow_id,
            ))

        if step.condition is not None and index.condition(step.condition) is None:
            issues.append(ValidationIssue(
                severity=ValidationSeverity.WARNING,
                code="UNKNOWN_CONDITION",
                message=f"Step '{step.id}' references unknown condition '{step.condition}'",
                entity_id=step.id,
                flow_id=flow_id,
            ))

        if is_self_edge(step):
            issues.append(ValidationIssue(
                severity=ValidationSeverity.INFO,
                code="SELF_STEP",
                message=f"Step '{step.id}' starts and ends on '{step.from_}' (drawn as a loop)",
                entity_id=step.id,
                flow_id=flow_id,
            ))
        return issues

    def _check_empty_flows(self, diagram: Diagram) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.INFO,
                code="EMPTY_FLOW",
                message=f"Flow '{flow.name}' has no steps",
                flow_id=flow.id,
                suggestion="Add at least one step",
            )
            for flow in diagram.flows
            if not flow.steps
        ]

    def _check_generated_ids(self, diagram: Diagram) -> List[ValidationIssue]:
        """Node and edge ids built from entity ids must not collide on the canvas."""
        issues = []
        generated = set()
        for flow in diagram.flows:
            if flow.trigger is not None:
                generated.add(trigger_node_id(flow.id))
            if len(diagram.flows) > 1:
                generated.add(flow_header_node_id(flow.id))

        for actor in diagram.actors:
            if actor.id in generated:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="NODE_ID_CLASH",
                    message=f"Actor id '{actor.id}' clashes with a flow marker node",
                    entity_id=actor.id,
                    suggestion="Rename the actor id",
                ))

        owners: Dict[str, tuple] = {}
        for flow in diagram.flows:
            for step in flow.steps:
                generated_id = edge_id(flow.id, step.id)
                owner = owners.setdefault(generated_id, (flow.id, step.id))
                if owner != (flow.id, step.id):
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.WARNING,
                        code="EDGE_ID_CLASH",
                        message=(
                            f"Step '{step.id}' of flow '{flow.id}' yields edge id "
                            f"'{generated_id}', already used by step '{owner[1]}' "
                            f"of flow '{owner[0]}'"
                        ),
                        entity_id=step.id,
                        flow_id=flow.id,
                    ))
        return issues

    def _calculate_stats(self, diagram: Diagram, index: DiagramIndex) -> Dict[str, int]:
        unrendered = sum(
            1
            for flow in diagram.flows
            for step in flow.steps
            if index.actor(step.from_) is None or index.actor(step.to) is None
        )
        return {
            "actors": len(diagram.actors),
            "states": len(diagram.states),
            "flows": len(diagram.flows),
            "conditions": len(diagram.conditions),
            "steps": diagram.total_steps,
            "unrendered_steps": unrendered,
        }


def validate_diagram(diagram: Diagram, strict: bool = False) -> DiagramValidationResult:
    """Convenience function to validate a diagram."""
    return DiagramValidator(strict_mode=strict).validate(diagram)
