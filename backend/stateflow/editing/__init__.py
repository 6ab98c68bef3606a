# Editing session: the current diagram, its CRUD and one-shot focus requests

from stateflow.editing.focus import FocusCommand, FocusSlot
from stateflow.editing.session import COLLECTIONS, EditingSession, new_diagram

__all__ = [
    "COLLECTIONS",
    "EditingSession",
    "FocusCommand",
    "FocusSlot",
    "new_diagram",
]
