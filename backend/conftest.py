import os

# In-memory store for the API tests; must be set before stateflow.config loads
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from stateflow.ir.diagram import (
    Actor,
    Condition,
    Diagram,
    Flow,
    FlowStep,
    FlowTrigger,
    State,
)


def make_cart_diagram() -> Diagram:
    """Component A dispatches to global store B, which pushes cartItems back."""
    return Diagram(
        id="d1",
        name="Cart",
        actors=[
            Actor(id="A", name="CartButton", type="component"),
            Actor(id="B", name="CartStore", type="store", scope="global"),
        ],
        states=[State(id="S1", name="cartItems", owner="B")],
        conditions=[Condition(id="C1", expression="items.length > 0")],
        flows=[
            Flow(
                id="f1",
                name="Add to cart",
                trigger=FlowTrigger(type="userAction", actor="A", action="click", target="add button"),
                steps=[
                    FlowStep(id="s1", type="dispatch", from_="A", to="B", action="add"),
                    FlowStep(id="s2", type="stateChange", from_="B", to="A", state="S1", description="update"),
                ],
            )
        ],
    )


@pytest.fixture
def cart_diagram() -> Diagram:
    return make_cart_diagram()
