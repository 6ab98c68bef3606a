"""Diagram validator: reference problems are reported, never raised"""

from stateflow.ir.diagram import Actor, Flow, FlowStep, State
from stateflow.validation import ValidationSeverity, validate_diagram


def test_clean_diagram(cart_diagram):
    result = validate_diagram(cart_diagram)
    assert result.is_valid
    assert result.is_complete
    assert result.error_count == 0
    assert result.warning_count == 0
    assert result.stats["steps"] == 2
    assert result.stats["unrendered_steps"] == 0


def test_dangling_references_are_warnings(cart_diagram):
    cart_diagram.states.append(State(id="S2", name="orphan", owner="ghost"))
    cart_diagram.flows[0].steps.append(
        FlowStep(id="s3", type="effect", from_="A", to="ghost", state="nope", condition="nah")
    )
    cart_diagram.flows[0].trigger.actor = "ghost"

    result = validate_diagram(cart_diagram)
    codes = result.codes()
    assert "ORPHANED_STATE" in codes
    assert "UNKNOWN_STEP_ACTOR" in codes
    assert "UNKNOWN_STATE" in codes
    assert "UNKNOWN_CONDITION" in codes
    assert "UNKNOWN_TRIGGER_ACTOR" in codes
    assert result.is_valid
    assert not result.is_complete
    assert result.stats["unrendered_steps"] == 1


def test_strict_mode_fails_on_warnings(cart_diagram):
    cart_diagram.flows[0].steps.append(FlowStep(id="s3", type="render", from_="A"))
    assert validate_diagram(cart_diagram).is_valid
    assert not validate_diagram(cart_diagram, strict=True).is_valid


def test_duplicates_are_errors(cart_diagram):
    cart_diagram.actors.append(Actor(id="A", name="Twin", type="component"))
    result = validate_diagram(cart_diagram)
    assert not result.is_valid
    assert "DUPLICATE_ID" in result.codes()
    assert "Invalid" in result.get_summary()


def test_info_issues(cart_diagram):
    cart_diagram.flows.append(Flow(id="f2", name="Idle"))
    cart_diagram.flows[0].steps.append(FlowStep(id="s3", type="effect", from_="A", to="A"))
    result = validate_diagram(cart_diagram)
    infos = {i.code for i in result.issues if i.severity == ValidationSeverity.INFO}
    assert infos == {"NO_TRIGGER", "EMPTY_FLOW", "SELF_STEP"}
    assert result.to_dict()["info_count"] == 3


def test_integrity_codes_do_not_depend_on_ids(cart_diagram):
    cart_diagram.flows.append(Flow(
        id="empty-cart",
        name="Empty cart",
        steps=[
            FlowStep(id="x", type="effect", from_="A", to="B"),
            FlowStep(id="x", type="render", from_="B", to="A"),
        ],
    ))
    codes = validate_diagram(cart_diagram).codes()
    assert "DUPLICATE_ID" in codes
    assert "EMPTY_NAME" not in codes


def test_empty_entity_names_are_errors(cart_diagram):
    cart_diagram.actors[0].name = ""
    cart_diagram.flows[0].name = ""
    result = validate_diagram(cart_diagram)
    empty = [i.entity_id for i in result.issues if i.code == "EMPTY_NAME"]
    assert empty == ["A", "f1"]
    assert not result.is_valid


def test_actor_id_clashing_with_trigger_node(cart_diagram):
    cart_diagram.actors.append(Actor(id="trigger-f1", name="Odd", type="service"))
    result = validate_diagram(cart_diagram)
    clashes = [i for i in result.issues if i.code == "NODE_ID_CLASH"]
    assert [i.entity_id for i in clashes] == ["trigger-f1"]
    assert clashes[0].severity == ValidationSeverity.WARNING


def test_edge_id_clash_across_flows(cart_diagram):
    cart_diagram.flows = [
        Flow(id="a-b", name="One", steps=[FlowStep(id="c", type="effect", from_="A", to="B")]),
        Flow(id="a", name="Two", steps=[FlowStep(id="b-c", type="effect", from_="A", to="B")]),
    ]
    clashes = [i for i in validate_diagram(cart_diagram).issues if i.code == "EDGE_ID_CLASH"]
    assert len(clashes) == 1
    assert (clashes[0].flow_id, clashes[0].entity_id) == ("a", "b-c")
