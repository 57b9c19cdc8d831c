from app.core.errors import FieldValidationError, flatten_request_errors


def test_flatten_drops_location_prefix_and_joins_nested() -> None:
    errors = [
        {"loc": ("body", "energy_level"), "msg": "Input should be less than or equal to 10"},
        {"loc": ("body", "photo_paths", 2), "msg": "String should have at least 1 character"},
        {"loc": ("body", "energy_level"), "msg": "second message"},
    ]
    assert flatten_request_errors(errors) == {
        "energy_level": ["Input should be less than or equal to 10", "second message"],
        "photo_paths.2": ["String should have at least 1 character"],
    }


def test_flatten_whole_body_error_goes_to_root() -> None:
    assert flatten_request_errors([{"loc": ("body",), "msg": "Field required"}]) == {
        "__root__": ["Field required"]
    }


def test_field_validation_error_shape() -> None:
    exc = FieldValidationError.single("week_of", "Connect to a coach first")
    assert exc.status_code == 422
    assert exc.detail == {
        "message": "Validation failed",
        "errors": {"week_of": ["Connect to a coach first"]},
    }
