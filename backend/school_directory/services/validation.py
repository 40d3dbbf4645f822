"""Field validation for school registration submissions.

The validator is the gate in front of every side effect: nothing reaches
the asset store or the database unless all rules pass. Rules are checked
independently and every violation is reported at once, so a client can
show all problems in a single round trip.

Rules:
    - name, address, city, state: required, at least 2 characters.
    - email: required, ``local@domain`` with a dotted domain.
    - contact: required, 10 to 15 characters (not parsed as a phone).
    - image: required, a non-empty upload whose filename keeps a usable
      final path component.

Example:
    >>> from school_directory.services import validation
    >>> validation.validate({"name": "Oak Hill", ...})
    ValidatedRecord(name='Oak Hill', ...)
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import pydantic
import pydantic_core

from school_directory.core import errors
from school_directory.db import models as db_models
from school_directory.services import asset_store

if TYPE_CHECKING:
    from collections.abc import Mapping

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$"
)

CONTACT_MIN_LENGTH = 10
CONTACT_MAX_LENGTH = 15

_LABELS = {
    "name": "Name",
    "email": "Email",
    "address": "Address",
    "city": "City",
    "state": "State",
    "contact": "Contact",
    "image": "Image",
}


class SchoolSubmission(pydantic.BaseModel):
    """Pydantic schema for a raw registration submission."""

    model_config = pydantic.ConfigDict(str_strip_whitespace=True)

    name: str = pydantic.Field(min_length=2)
    email: str = pydantic.Field(min_length=1)
    address: str = pydantic.Field(min_length=2)
    city: str = pydantic.Field(min_length=2)
    state: str = pydantic.Field(min_length=2)
    contact: str = pydantic.Field(
        min_length=CONTACT_MIN_LENGTH,
        max_length=CONTACT_MAX_LENGTH,
    )
    image: pydantic.InstanceOf[db_models.UploadedAsset]

    @pydantic.field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise pydantic_core.PydanticCustomError(
                "email",
                "Invalid email address",
            )
        return value

    @pydantic.field_validator("image")
    @classmethod
    def _check_image(
        cls, value: db_models.UploadedAsset
    ) -> db_models.UploadedAsset:
        if not value.filename or not value.content:
            raise pydantic_core.PydanticCustomError(
                "image_empty",
                "Image is required",
            )
        if not asset_store.final_component(value.filename):
            raise pydantic_core.PydanticCustomError(
                "filename",
                "Image filename is not usable",
            )
        return value


def _to_violation(error: Mapping[str, Any]) -> errors.Violation:
    """Translate one pydantic error entry into a Violation."""
    field = str(error["loc"][0]) if error["loc"] else "submission"
    label = _LABELS.get(field, field)
    ctx = error.get("ctx") or {}
    kind = error["type"]

    if kind == "string_too_short":
        if not str(error.get("input") or "").strip():
            return errors.Violation(field, "required", f"{label} is required")
        return errors.Violation(
            field,
            "min_length",
            f"{label} must be at least {ctx['min_length']} characters",
        )
    if kind == "string_too_long":
        return errors.Violation(
            field,
            "max_length",
            f"{label} must be at most {ctx['max_length']} characters",
        )
    if kind in ("email", "filename"):
        return errors.Violation(field, kind, error["msg"])
    if kind.endswith("_type") or kind == "is_instance_of":
        expected = "an uploaded file" if field == "image" else "text"
        return errors.Violation(field, "type", f"{label} must be {expected}")
    return errors.Violation(field, "required", f"{label} is required")


def validate(candidate: Mapping[str, object]) -> db_models.ValidatedRecord:
    """Check a submission against every field rule.

    Missing keys and ``None`` values are treated as absent fields. The
    function has no side effects.

    Args:
        candidate: Decoded submission fields; ``image`` is expected to be
            an UploadedAsset.

    Returns:
        ValidatedRecord with surrounding whitespace stripped from text.

    Raises:
        errors.ValidationError: With one Violation per failed rule.
    """
    data = {
        key: value for key, value in candidate.items() if value is not None
    }
    try:
        submission = SchoolSubmission.model_validate(data)
    except pydantic.ValidationError as exc:
        violations = [_to_violation(error) for error in exc.errors()]
        raise errors.ValidationError(violations) from None

    return db_models.ValidatedRecord(
        name=submission.name,
        email=submission.email,
        address=submission.address,
        city=submission.city,
        state=submission.state,
        contact=submission.contact,
        image=submission.image,
    )
