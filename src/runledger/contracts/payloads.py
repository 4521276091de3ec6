"""Step input/output payloads.

A step payload is one of three shapes:

- absent: the caller sent nothing (or JSON null)
- structured: any JSON value, including text that decoded as JSON
- raw text: text that failed to decode, kept verbatim

Storage and wire form is ``None``, the value itself, or ``{"_raw": text}``.
"""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

RAW_TEXT_MARKER = "_raw"


class AbsentPayload(BaseModel):
    """No payload was supplied."""

    kind: Literal["absent"] = "absent"

    model_config = {"extra": "forbid", "frozen": True}


class StructuredPayload(BaseModel):
    """A JSON-like value."""

    kind: Literal["structured"] = "structured"
    value: Any

    model_config = {"extra": "forbid", "frozen": True}


class RawTextPayload(BaseModel):
    """Text that could not be decoded as JSON."""

    kind: Literal["raw_text"] = "raw_text"
    text: str

    model_config = {"extra": "forbid", "frozen": True}


StepPayload = Annotated[
    Union[AbsentPayload, StructuredPayload, RawTextPayload],
    Field(discriminator="kind"),
]

ABSENT = AbsentPayload()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_payload(value: Any) -> AbsentPayload | StructuredPayload | RawTextPayload:
    """Decode a caller-supplied payload.

    Strings are treated as possibly-serialized JSON. Anything that is not a
    string is already structured.
    """
    if value is None:
        return ABSENT
    if not isinstance(value, str):
        return StructuredPayload(value=value)
    try:
        decoded = json.loads(value, parse_constant=_reject_constant)
    except ValueError:
        return RawTextPayload(text=value)
    if decoded is None:
        return ABSENT
    return StructuredPayload(value=decoded)


def to_wire(payload: AbsentPayload | StructuredPayload | RawTextPayload) -> Any:
    """Return the storage/wire form of a payload."""
    if isinstance(payload, StructuredPayload):
        return payload.value
    if isinstance(payload, RawTextPayload):
        return {RAW_TEXT_MARKER: payload.text}
    return None


def from_storage(stored: Any) -> AbsentPayload | StructuredPayload | RawTextPayload:
    """Rebuild a payload from its stored form."""
    if stored is None:
        return ABSENT
    if (
        isinstance(stored, dict)
        and set(stored) == {RAW_TEXT_MARKER}
        and isinstance(stored[RAW_TEXT_MARKER], str)
    ):
        return RawTextPayload(text=stored[RAW_TEXT_MARKER])
    return StructuredPayload(value=stored)
