"""
Output shape descriptors and record validation.

An output shape maps field names to either a free-text description or a
list of allowed values (an enumerated field). Keys containing ``<...>``
placeholders are dynamic: the model fills them in, so they are never
required in the answer.
"""

import json
import logging
import re
from typing import Any, Dict, List, Mapping, Sequence, Union

from quizgen.core.exceptions import MalformedRequestError, ValidationFailure

logger = logging.getLogger(__name__)

ShapeValue = Union[str, Sequence[str], Mapping[str, Any]]
OutputShape = Mapping[str, ShapeValue]

DYNAMIC_PLACEHOLDER_RE = re.compile(r"<.*?>")
_LIST_IN_SHAPE_RE = re.compile(r"\[.*?\]")


def is_dynamic_key(key: str) -> bool:
    """Check whether a field name is a template placeholder like <location>."""
    return bool(DYNAMIC_PLACEHOLDER_RE.search(key))


def is_choice_field(value: ShapeValue) -> bool:
    """Enumerated fields are described by a list of allowed values."""
    return isinstance(value, (list, tuple))


def serialize_shape(shape: OutputShape) -> str:
    """JSON form of the shape as shown to the model."""
    return json.dumps(shape, ensure_ascii=False)


def has_choice_fields(shape: OutputShape) -> bool:
    """True when any part of the serialized shape is a list."""
    return bool(_LIST_IN_SHAPE_RE.search(serialize_shape(shape)))


def has_dynamic_elements(shape: OutputShape) -> bool:
    """True when any key or description carries a <...> placeholder."""
    return bool(DYNAMIC_PLACEHOLDER_RE.search(serialize_shape(shape)))


def validate_shape(shape: OutputShape) -> None:
    """Reject shapes that cannot be used to prompt or validate."""
    if not isinstance(shape, Mapping) or not shape:
        raise MalformedRequestError("Output shape must be a non-empty mapping")

    for key, value in shape.items():
        if not isinstance(key, str) or not key.strip():
            raise MalformedRequestError(f"Invalid field name in output shape: {key!r}")

        if isinstance(value, (str, Mapping)):
            continue

        if is_choice_field(value):
            if not value:
                raise MalformedRequestError(f"Field '{key}' has an empty choice list")
            if not all(isinstance(choice, str) for choice in value):
                raise MalformedRequestError(f"Field '{key}' choices must all be strings")
            continue

        raise MalformedRequestError(
            f"Field '{key}' must be a description string or a list of choices, "
            f"got {type(value).__name__}"
        )


def _coerce_choice(value: Any, choices: Sequence[str], default_category: str, key: str, index: int) -> Any:
    """Collapse an enumerated answer to a single allowed value."""
    if isinstance(value, list):
        if not value:
            raise ValidationFailure(f'Empty list for key "{key}" at index {index}')
        value = value[0]

    if value not in choices and default_category:
        value = default_category

    # "choice: explanation" -> "choice"
    if isinstance(value, str) and ":" in value:
        value = value.split(":")[0]

    return value


def validate_records(
    records: List[Any],
    shape: OutputShape,
    default_category: str = "",
    value_only: bool = False,
) -> List[Any]:
    """
    Check every record against the shape and coerce enumerated fields.

    Args:
        records: Parsed model output, always a list at this point
        shape: Output shape descriptor
        default_category: Replacement for out-of-set enumerated values
        value_only: Replace each record with its values

    Returns:
        The validated records (or value lists / scalars when value_only)

    Raises:
        ValidationFailure: On a non-object record or a missing field
    """
    validated: List[Any] = []

    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValidationFailure(
                f"Expected a JSON object at index {index} but got {type(record).__name__}"
            )

        for key, field_type in shape.items():
            if is_dynamic_key(key):
                continue

            if key not in record:
                raise ValidationFailure(f'Missing key "{key}" at index {index}')

            if is_choice_field(field_type):
                record[key] = _coerce_choice(record[key], field_type, default_category, key, index)

        if value_only:
            values = list(record.values())
            validated.append(values[0] if len(values) == 1 else values)
        else:
            validated.append(record)

    logger.debug(f"Validated {len(validated)} record(s)")
    return validated
