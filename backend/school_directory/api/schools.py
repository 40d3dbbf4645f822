"""School registration and listing API endpoints.

This module exposes the two operations of the directory over HTTP:

- ``POST /api/schools`` accepts a multipart form with the school fields
  and one image file, and returns the persisted record.
- ``GET /api/schools`` returns every school in the listing projection,
  optionally filtered by ``q`` and sorted by ``sort``.

Failures are raised as ``errors.RegistryError`` subclasses and rendered
by the handler installed in ``school_directory.main``.

Example:
    Register a school:
        >>> response = client.post(
        ...     "/api/schools",
        ...     data={"name": "Oak Hill", "email": "a@b.com",
        ...           "address": "12 Elm", "city": "Springfield",
        ...           "state": "IL", "contact": "5551234567"},
        ...     files={"image": ("oak.jpg", open("oak.jpg", "rb"),
        ...                      "image/jpeg")},
        ... )
        >>> response.json()["school"]["image"]
        '/schoolImages/oak.jpg'

    Search and sort the directory:
        >>> client.get("/api/schools", params={"q": "spring", "sort": "name"})
"""

from __future__ import annotations

import dataclasses
from typing import Any

import fastapi
from typing_extensions import TypedDict

from school_directory.core import config
from school_directory.db import database
from school_directory.db import models as db_models
from school_directory.services import asset_store, directory, registration

router = fastapi.APIRouter(prefix="/api/schools", tags=["schools"])

EMPTY_MESSAGE = "No schools found"


class RegisterResponse(TypedDict):
    message: str
    school: dict[str, Any]


class ListResponse(TypedDict):
    schools: list[dict[str, Any]]
    count: int
    message: str


def _get_repo() -> database.SchoolRepositoryProtocol:
    """Resolve the school repository dependency.

    Returns:
        SchoolRepositoryProtocol implementation
            (PostgresSchoolRepository in production).
    """
    return database.get_school_repository()


def _get_asset_store(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> asset_store.AssetStoreProtocol:
    """Resolve the asset store dependency.

    Args:
        settings: Application settings (injected via FastAPI Depends).

    Returns:
        AssetStoreProtocol implementation writing into the image directory.
    """
    return asset_store.get_asset_store(settings)


async def _read_upload(
    file: fastapi.UploadFile | None,
    max_size: int,
) -> db_models.UploadedAsset | None:
    """Read an uploaded image into memory with size validation.

    Args:
        file: FastAPI UploadFile from the multipart form, if any.
        max_size: Maximum allowed file size in bytes.

    Returns:
        UploadedAsset with the file bytes, or None when no file was sent.

    Raises:
        HTTPException: If the file exceeds the maximum size limit.
    """
    if file is None:
        return None

    chunks: list[bytes] = []
    size = 0
    while chunk := await file.read(1024 * 1024):
        size += len(chunk)
        if size > max_size:
            raise fastapi.HTTPException(
                status_code=413,
                detail="Upload too large",
            )
        chunks.append(chunk)

    return db_models.UploadedAsset(
        filename=file.filename or "",
        content=b"".join(chunks),
        content_type=file.content_type,
    )


@router.post("", status_code=201)
async def register_school(
    name: str | None = fastapi.Form(None),
    email: str | None = fastapi.Form(None),
    address: str | None = fastapi.Form(None),
    city: str | None = fastapi.Form(None),
    state: str | None = fastapi.Form(None),
    contact: str | None = fastapi.Form(None),
    image: fastapi.UploadFile | None = fastapi.File(None),  # noqa: B008
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
    store: asset_store.AssetStoreProtocol = fastapi.Depends(_get_asset_store),  # noqa: B008
    repo: database.SchoolRepositoryProtocol = fastapi.Depends(_get_repo),  # noqa: B008
) -> RegisterResponse:
    """Register a school from a multipart submission.

    Every field is optional at the HTTP level so that the validator can
    report all missing and malformed fields together.

    Args:
        name: School name.
        email: Contact email.
        address: Street address.
        city: City.
        state: State or region.
        contact: Phone number, 10 to 15 characters.
        image: School image file.
        settings: Application settings (injected via FastAPI Depends).
        store: Asset store (injected via FastAPI Depends).
        repo: School repository (injected via FastAPI Depends).

    Returns:
        Success message and the persisted school including its id.

    Raises:
        HTTPException: If the image exceeds the maximum upload size.
        errors.RegistryError: Validation, storage, write or connection
            failures, rendered by the application error handler.
    """
    asset = await _read_upload(image, settings.max_upload_size_bytes)
    submission: dict[str, object] = {
        "name": name,
        "email": email,
        "address": address,
        "city": city,
        "state": state,
        "contact": contact,
        "image": asset,
    }
    school = await registration.register_school(
        submission, store, repo, settings
    )
    return RegisterResponse(
        message="School added successfully",
        school=dataclasses.asdict(school),
    )


@router.get("")
async def list_schools(
    q: str = "",
    sort: directory.SortKey | None = None,
    repo: database.SchoolRepositoryProtocol = fastapi.Depends(_get_repo),  # noqa: B008
) -> ListResponse:
    """List every registered school.

    An empty directory is a normal result: ``schools`` is empty and
    ``message`` says so, with status 200.

    Args:
        q: Case-insensitive search over name, city and address.
        sort: Order by "name" or "city"; store order when omitted.
        repo: School repository (injected via FastAPI Depends).

    Returns:
        Dictionary with the schools, their count and a message.
    """
    schools = await registration.list_schools(repo, q, sort)
    return ListResponse(
        schools=[dataclasses.asdict(school) for school in schools],
        count=len(schools),
        message=f"{len(schools)} schools found" if schools else EMPTY_MESSAGE,
    )
