"""
Tests for reservation input validation.
"""

import pytest

from reservations.errors import ValidationError
from reservations.schemas import (
    NO_OP_UPDATE_MESSAGE,
    NOTES_MAX_LENGTH,
    CreateReservationInput,
    DeleteReservationInput,
    LookupReservationInput,
    UpdateReservationInput,
    input_json_schema,
    parse_input,
)

VALID_CREATE = {
    "mobile": "+1234567890",
    "name": "Ada Lovelace",
    "nb_people": 4,
    "date": "2025-05-01",
    "time": "19:00",
}


def issue_fields(error: ValidationError):
    return {issue.field for issue in error.issues}


class TestCreateInput:
    def test_valid_input(self):
        payload = parse_input(CreateReservationInput, VALID_CREATE)

        assert payload.mobile == "+1234567890"
        assert payload.nb_people == 4
        assert payload.to_record() == VALID_CREATE

    def test_optional_fields_are_kept(self):
        payload = parse_input(
            CreateReservationInput,
            {**VALID_CREATE, "email": "ada@example.com", "notes": "Window seat"},
        )
        record = payload.to_record()

        assert record["email"] == "ada@example.com"
        assert record["notes"] == "Window seat"

    @pytest.mark.parametrize("raw, expected", [("4", 4), (" 6 ", 6), (3.0, 3)])
    def test_party_size_is_coerced(self, raw, expected):
        payload = parse_input(CreateReservationInput, {**VALID_CREATE, "nb_people": raw})
        assert payload.nb_people == expected

    @pytest.mark.parametrize("raw", [0, -2, "0", 2.5, "two", True, None])
    def test_invalid_party_size_is_rejected(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(CreateReservationInput, {**VALID_CREATE, "nb_people": raw})
        assert issue_fields(exc_info.value) == {"nb_people"}

    def test_party_size_floor_message(self):
        with pytest.raises(ValidationError, match="At least one person"):
            parse_input(CreateReservationInput, {**VALID_CREATE, "nb_people": 0})

    def test_every_violation_is_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(CreateReservationInput, {"mobile": "", "name": "", "nb_people": 0})

        assert issue_fields(exc_info.value) == {"mobile", "name", "nb_people", "date", "time"}
        assert "Mobile number is required" in exc_info.value.message
        assert "Name is required" in exc_info.value.message

    def test_invalid_email_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(CreateReservationInput, {**VALID_CREATE, "email": "not-an-email"})
        assert issue_fields(exc_info.value) == {"email"}

    def test_email_is_stored_as_given(self):
        payload = parse_input(CreateReservationInput, {**VALID_CREATE, "email": "Ada@Example.COM"})
        assert payload.to_record()["email"] == "Ada@Example.COM"

    def test_notes_ceiling(self):
        parse_input(CreateReservationInput, {**VALID_CREATE, "notes": "x" * NOTES_MAX_LENGTH})

        with pytest.raises(ValidationError) as exc_info:
            parse_input(
                CreateReservationInput, {**VALID_CREATE, "notes": "x" * (NOTES_MAX_LENGTH + 1)}
            )
        assert issue_fields(exc_info.value) == {"notes"}

    def test_date_format_is_not_enforced(self):
        payload = parse_input(CreateReservationInput, {**VALID_CREATE, "date": "next friday"})
        assert payload.date == "next friday"

    def test_unknown_keys_are_dropped(self):
        payload = parse_input(CreateReservationInput, {**VALID_CREATE, "table": 12})
        assert "table" not in payload.to_record()

    def test_validation_error_details_list_issues(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(CreateReservationInput, {**VALID_CREATE, "mobile": ""})

        assert exc_info.value.details == {
            "issues": [{"field": "mobile", "message": "Mobile number is required"}]
        }


class TestUpdateInput:
    def test_locating_pair_alone_is_a_no_op(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(UpdateReservationInput, {"mobile": "+1234567890", "name": "Ada Lovelace"})

        assert exc_info.value.message == NO_OP_UPDATE_MESSAGE
        assert len(exc_info.value.issues) == 1

    def test_null_fields_do_not_count_as_changes(self):
        with pytest.raises(ValidationError, match="at least one field"):
            parse_input(
                UpdateReservationInput,
                {"mobile": "+1234567890", "name": "Ada Lovelace", "notes": None},
            )

    def test_no_op_is_reported_with_field_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(UpdateReservationInput, {"name": "Ada Lovelace"})

        messages = [issue.message for issue in exc_info.value.issues]
        assert "mobile" in issue_fields(exc_info.value)
        assert NO_OP_UPDATE_MESSAGE in messages

    def test_changes_remap_new_locating_values(self):
        payload = parse_input(
            UpdateReservationInput,
            {
                "mobile": "+1234567890",
                "name": "Ada Lovelace",
                "new_mobile": "+1987654321",
                "new_name": "Ada King",
                "time": "20:00",
            },
        )

        assert payload.to_changes() == {
            "mobile": "+1987654321",
            "name": "Ada King",
            "time": "20:00",
        }
        assert len(payload.changed_fields()) == 3

    def test_empty_new_mobile_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(
                UpdateReservationInput,
                {"mobile": "+1234567890", "name": "Ada Lovelace", "new_mobile": ""},
            )
        assert "new_mobile" in issue_fields(exc_info.value)


class TestLocatingInputs:
    @pytest.mark.parametrize("model", [DeleteReservationInput, LookupReservationInput])
    def test_locating_pair_required(self, model):
        with pytest.raises(ValidationError) as exc_info:
            parse_input(model, {})
        assert issue_fields(exc_info.value) == {"mobile", "name"}

    def test_lookup_qualifiers_are_optional(self):
        payload = parse_input(
            LookupReservationInput,
            {"mobile": "+1234567890", "name": "Ada Lovelace", "date": "2025-05-01"},
        )
        assert payload.date == "2025-05-01"
        assert payload.time is None

    def test_missing_arguments_are_treated_as_empty(self):
        with pytest.raises(ValidationError):
            parse_input(DeleteReservationInput, None)


class TestJSONSchema:
    def test_create_schema_lists_required_fields(self):
        schema = input_json_schema(CreateReservationInput)

        assert schema["type"] == "object"
        assert set(schema["required"]) == {"mobile", "name", "nb_people", "date", "time"}
        assert "title" not in schema
        assert "title" not in schema["properties"]["mobile"]
        assert schema["properties"]["mobile"]["description"]

    def test_update_schema_requires_only_locating_pair(self):
        schema = input_json_schema(UpdateReservationInput)

        assert set(schema["required"]) == {"mobile", "name"}
        assert "new_mobile" in schema["properties"]
