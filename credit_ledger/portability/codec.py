"""
Ledger JSON Codec

One JSON shape is used everywhere a ledger leaves memory: local storage,
export files and cloud backups. It is a list of customers (or creditors)
in camelCase, with ISO-8601 dates and amounts as plain JSON numbers.

IMPORTANT: Parsing never touches the current ledger. A malformed file
raises FormatError before anything reaches the Merge Reconciler.
"""

import datetime as dt
import json
from decimal import Decimal
from typing import Sequence, TypeVar, Union

import pydantic
from pydantic import TypeAdapter

from credit_ledger.engine.errors import FormatError
from credit_ledger.models.ledger import Entity

E = TypeVar("E", bound=Entity)


def serialize_collection(collection: Sequence[Entity]) -> str:
    """Render a collection in the wire shape."""
    payload = [
        entity.model_dump(mode="json", by_alias=True)
        for entity in collection
    ]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def parse_collection(data: Union[str, bytes], entity_type: type[E]) -> list[E]:
    """
    Parse a collection from the wire shape.

    Derived fields are taken as written; the Merge Reconciler re-derives
    them for anything it touches. Fractional amounts are read straight
    into Decimal, never through a binary float.

    Raises:
        FormatError: not JSON, not a list, or records that don't validate
    """
    try:
        raw = json.loads(data, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Not a valid JSON file: {e}") from e

    if not isinstance(raw, list):
        raise FormatError(
            f"Expected a list of {entity_type.kind} records, "
            f"got {type(raw).__name__}"
        )

    try:
        return TypeAdapter(list[entity_type]).validate_python(raw)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise FormatError(
            f"Invalid {entity_type.kind} record at {location}: {first.get('msg')} "
            f"({e.error_count()} problem(s) in total)"
        ) from e


def export_file_name(entity_type: type[Entity], today: dt.date) -> str:
    """Date-stamped download name, e.g. customer_data_2024-01-31.json."""
    return f"{entity_type.kind}_data_{today.isoformat()}.json"
