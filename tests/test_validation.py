import pytest

from crmgraph.analytics.validation import (
    ValidationError,
    validate_focus_degrees,
    validate_int,
    validate_limit,
    validate_max_connections,
    validate_max_degrees,
    validate_min_strength,
    validate_person_id,
    validate_relationship_type,
)

UUID = "3F2B9C4E-1111-2222-3333-444455556666"


class TestValidateInt:

    def test_parses_query_strings(self):
        assert validate_int("7", "n") == 7

    def test_default_for_missing(self):
        assert validate_int(None, "n", default=3) == 3
        assert validate_int("", "n", default=3) == 3

    def test_required_without_default(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_int(None, "n")
        assert exc_info.value.parameter == "n"

    @pytest.mark.parametrize("value", ["abc", "1.5", True, 2.5, [1]])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValidationError):
            validate_int(value, "n")

    def test_bounds(self):
        with pytest.raises(ValidationError):
            validate_int("0", "n", min_value=1)
        with pytest.raises(ValidationError):
            validate_int("9", "n", max_value=5)


class TestEndpointValidators:

    def test_limit(self):
        assert validate_limit(None) == 10
        assert validate_limit("50") == 50
        with pytest.raises(ValidationError):
            validate_limit("51")
        with pytest.raises(ValidationError):
            validate_limit("0")

    def test_max_connections(self):
        assert validate_max_connections(None) == 1
        assert validate_max_connections("0") == 0
        with pytest.raises(ValidationError):
            validate_max_connections("6")

    def test_min_strength(self):
        assert validate_min_strength(None) is None
        assert validate_min_strength("3") == 3
        with pytest.raises(ValidationError):
            validate_min_strength("6")

    def test_max_degrees(self):
        assert validate_max_degrees(None) == 3
        assert validate_max_degrees(6) == 6
        with pytest.raises(ValidationError):
            validate_max_degrees(7)

    def test_focus_degrees(self):
        assert validate_focus_degrees(None) == 3
        assert validate_focus_degrees("ALL") == "all"
        assert validate_focus_degrees("2") == 2
        with pytest.raises(ValidationError):
            validate_focus_degrees("0")

    def test_person_id(self):
        assert validate_person_id(UUID, "id") == UUID.lower()
        assert validate_person_id(None, "id", required=False) is None
        with pytest.raises(ValidationError):
            validate_person_id(None, "id")
        with pytest.raises(ValidationError):
            validate_person_id("alice", "id")
        with pytest.raises(ValidationError):
            validate_person_id(42, "id")

    def test_relationship_type(self):
        assert validate_relationship_type(None) is None
        assert validate_relationship_type(" friend ") == "friend"
        with pytest.raises(ValidationError):
            validate_relationship_type("x" * 65)
        with pytest.raises(ValidationError):
            validate_relationship_type(5)


class TestValidationErrorResponse:

    def test_response_format(self):
        response = ValidationError("limit", "must be at most 50", "99").to_response()

        assert response == {
            "success": False,
            "error": {
                "code": "INVALID_PARAMETER",
                "message": "Invalid 'limit': must be at most 50",
                "httpStatus": 400,
                "details": {"parameter": "limit", "value": "99"},
            },
        }
