"""Tests for the registration validator.

Verifies every field rule, that all violations are reported together
rather than stopping at the first one, and that accepted submissions are
normalised (surrounding whitespace stripped).
"""

from __future__ import annotations

from typing import Any

import pytest

from school_directory.core import errors
from school_directory.db import models as db_models
from school_directory.services import validation


def _submission(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "Oak Hill",
        "email": "a@b.com",
        "address": "12 Elm",
        "city": "Springfield",
        "state": "IL",
        "contact": "5551234567",
        "image": db_models.UploadedAsset(
            filename="oak.jpg",
            content=b"\xff\xd8" + b"0" * 10240,
            content_type="image/jpeg",
        ),
    }
    data.update(overrides)
    return data


def _violations(submission: dict[str, Any]) -> dict[str, str]:
    with pytest.raises(errors.ValidationError) as exc_info:
        validation.validate(submission)
    return {v.field: v.rule for v in exc_info.value.violations}


def test_valid_submission_passes() -> None:
    record = validation.validate(_submission(name="  Oak Hill  "))
    assert isinstance(record, db_models.ValidatedRecord)
    assert record.name == "Oak Hill"
    assert record.image.filename == "oak.jpg"


@pytest.mark.parametrize("field", ["name", "email", "image"])
def test_missing_required_field(field: str) -> None:
    data = _submission()
    del data[field]
    assert _violations(data) == {field: "required"}


def test_none_counts_as_missing() -> None:
    assert _violations(_submission(city=None)) == {"city": "required"}


def test_empty_string_is_required_violation() -> None:
    assert _violations(_submission(state="   ")) == {"state": "required"}


def test_short_name_is_min_length() -> None:
    assert _violations(_submission(name="O")) == {"name": "min_length"}


def test_contact_too_short() -> None:
    with pytest.raises(errors.ValidationError) as exc_info:
        validation.validate(_submission(contact="123"))
    (violation,) = exc_info.value.violations
    assert violation.field == "contact"
    assert violation.rule == "min_length"
    assert "10" in violation.message


def test_contact_too_long() -> None:
    assert _violations(_submission(contact="1" * 16)) == {
        "contact": "max_length",
    }


@pytest.mark.parametrize("contact", ["1" * 10, "+1 555 123 4567"])
def test_contact_bounds_inclusive(contact: str) -> None:
    assert validation.validate(_submission(contact=contact)).contact == contact


@pytest.mark.parametrize(
    "email",
    ["plainaddress", "a@b", "@b.com", "a@b.", "a b@c.com", "a@.com"],
)
def test_invalid_email(email: str) -> None:
    assert _violations(_submission(email=email)) == {"email": "email"}


@pytest.mark.parametrize(
    "email",
    ["a@b.com", "first.last+tag@mail.example.org", "x_y@sub-domain.co.uk"],
)
def test_valid_email(email: str) -> None:
    assert validation.validate(_submission(email=email)).email == email


def test_empty_image_rejected() -> None:
    empty = db_models.UploadedAsset(filename="oak.jpg", content=b"")
    assert _violations(_submission(image=empty)) == {"image": "required"}


def test_unnamed_image_rejected() -> None:
    unnamed = db_models.UploadedAsset(filename="", content=b"data")
    assert _violations(_submission(image=unnamed)) == {"image": "required"}


def test_wrong_image_type_rejected() -> None:
    violations = _violations(_submission(image=b"raw bytes"))
    assert violations == {"image": "type"}


def test_image_mapping_is_not_coerced_into_upload() -> None:
    image = {"filename": "x.jpg", "content": "abc"}
    assert _violations(_submission(image=image)) == {"image": "type"}


@pytest.mark.parametrize(
    "filename",
    ["..", ".", "/", "photos/..", "a\x00b.jpg", "tab\there.jpg"],
)
def test_unusable_image_filename_rejected(filename: str) -> None:
    image = db_models.UploadedAsset(filename=filename, content=b"data")
    with pytest.raises(errors.ValidationError) as exc_info:
        validation.validate(_submission(image=image))
    (violation,) = exc_info.value.violations
    assert violation.field == "image"
    assert violation.rule == "filename"
    assert violation.message == "Image filename is not usable"


def test_non_text_field_is_type_violation() -> None:
    with pytest.raises(errors.ValidationError) as exc_info:
        validation.validate(_submission(name=12345))
    (violation,) = exc_info.value.violations
    assert violation.field == "name"
    assert violation.rule == "type"
    assert violation.message == "Name must be text"


def test_all_violations_reported_together() -> None:
    data = {"name": "O", "email": "nope", "contact": "123"}
    violations = _violations(data)
    assert violations == {
        "name": "min_length",
        "email": "email",
        "address": "required",
        "city": "required",
        "state": "required",
        "contact": "min_length",
        "image": "required",
    }


def test_validation_error_body_lists_violations() -> None:
    with pytest.raises(errors.ValidationError) as exc_info:
        validation.validate(_submission(email="nope", contact="1"))
    body = exc_info.value.to_dict()
    assert body["error"] == "validation_failed"
    assert {v["field"] for v in body["violations"]} == {"email", "contact"}
    assert exc_info.value.status_code == 422
