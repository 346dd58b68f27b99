from typing import Literal

from .state import RegenerationState


def route_after_load(state: RegenerationState) -> Literal["generate", "record_document"]:
    """Generate a document first when the caller gave a goal but no document."""
    if not (state.get("document") or "").strip() and state.get("goal"):
        return "generate"
    return "record_document"


def route_after_segment(state: RegenerationState) -> Literal["validate", "reject"]:
    """Reject the cycle when no week block could be read from the document."""
    if not state.get("blocks"):
        return "reject"
    return "validate"
