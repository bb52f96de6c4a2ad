"""
Unit tests for quizgen/core/shape.py
Tests: shape validation, dynamic keys, presence checks, enumerated-field
coercion (first element, default category, colon truncation), value_only
"""

import pytest

from quizgen.core.exceptions import MalformedRequestError, ValidationFailure
from quizgen.core.shape import (
    has_choice_fields,
    has_dynamic_elements,
    is_dynamic_key,
    validate_records,
    validate_shape,
)

ROOM_SHAPE = {"room": ["garden", "kitchen"]}
QA_SHAPE = {"question": "question", "answer": "answer"}


class TestShapeHelpers:

    def test_dynamic_key_detection(self):
        assert is_dynamic_key("<location>")
        assert is_dynamic_key("item in <place>")
        assert not is_dynamic_key("location")

    def test_choice_fields_detected(self):
        assert has_choice_fields(ROOM_SHAPE)
        assert not has_choice_fields(QA_SHAPE)

    def test_dynamic_elements_detected_in_keys_and_values(self):
        assert has_dynamic_elements({"<location>": "a place"})
        assert has_dynamic_elements({"location": "where <thing> is"})
        assert not has_dynamic_elements(QA_SHAPE)


class TestValidateShape:

    def test_valid_shapes_pass(self):
        validate_shape(QA_SHAPE)
        validate_shape(ROOM_SHAPE)
        validate_shape({"meta": {"difficulty": "easy or hard"}})

    @pytest.mark.parametrize("shape", [
        {},
        None,
        ["question"],
        {"question": 42},
        {"room": []},
        {"room": ["garden", 3]},
        {"": "blank key"},
    ])
    def test_invalid_shapes_rejected(self, shape):
        with pytest.raises(MalformedRequestError):
            validate_shape(shape)


class TestPresence:

    def test_all_fields_present(self):
        records = [{"question": "q1", "answer": "a1"}, {"question": "q2", "answer": "a2"}]
        assert validate_records(records, QA_SHAPE) == records

    def test_missing_field_names_key_and_index(self):
        records = [{"question": "q1", "answer": "a1"}, {"question": "q2"}]
        with pytest.raises(ValidationFailure) as exc_info:
            validate_records(records, QA_SHAPE)
        assert str(exc_info.value) == 'Missing key "answer" at index 1'

    def test_dynamic_keys_are_not_required(self):
        shape = {"<location>": "where the item is", "item": "item name"}
        assert validate_records([{"item": "rake"}], shape) == [{"item": "rake"}]

    def test_non_object_record_fails(self):
        with pytest.raises(ValidationFailure):
            validate_records(["just a string"], QA_SHAPE)

    def test_extra_fields_are_kept(self):
        records = [{"question": "q", "answer": "a", "hint": "h"}]
        assert validate_records(records, QA_SHAPE)[0]["hint"] == "h"


class TestEnumeratedCoercion:

    def test_out_of_set_value_replaced_by_default_category(self):
        result = validate_records([{"room": "basement"}], ROOM_SHAPE, default_category="garden")
        assert result == [{"room": "garden"}]

    def test_out_of_set_value_kept_without_default_category(self):
        assert validate_records([{"room": "basement"}], ROOM_SHAPE) == [{"room": "basement"}]

    def test_in_set_value_kept(self):
        result = validate_records([{"room": "kitchen"}], ROOM_SHAPE, default_category="garden")
        assert result == [{"room": "kitchen"}]

    def test_colon_suffix_truncated(self):
        result = validate_records([{"room": "kitchen: because it's central"}], ROOM_SHAPE)
        assert result == [{"room": "kitchen"}]

    def test_list_value_collapses_to_first_element(self):
        result = validate_records([{"room": ["kitchen", "garden"]}], ROOM_SHAPE)
        assert result == [{"room": "kitchen"}]

    def test_empty_list_value_fails(self):
        with pytest.raises(ValidationFailure):
            validate_records([{"room": []}], ROOM_SHAPE)

    def test_free_text_fields_are_not_truncated(self):
        records = [{"question": "Ratio 1:2?", "answer": "a: b"}]
        assert validate_records(records, QA_SHAPE) == [{"question": "Ratio 1:2?", "answer": "a: b"}]


class TestValueOnly:

    def test_single_field_collapses_to_scalar(self):
        assert validate_records([{"room": "kitchen"}], ROOM_SHAPE, value_only=True) == ["kitchen"]

    def test_multiple_fields_become_ordered_values(self):
        records = [{"question": "q", "answer": "a"}]
        assert validate_records(records, QA_SHAPE, value_only=True) == [["q", "a"]]
