"""Registration and listing workflows.

register_school runs the write path in a fixed order: validate, store
the image, insert the record. A validation failure stops before any side
effect, and a storage failure stops before the database is touched.

The image write and the insert are two independent mutations with no
transaction around both. If the insert fails after the image was
stored, the file stays on disk without a record pointing at it. This is
logged as an orphaned asset and left for an operator to clean up; no
compensating delete is attempted because another record may already
reference the same filename.

Blocking work runs in worker threads. The image write is
bounded by ``Settings.asset_write_timeout_seconds``; queries are bounded
by the server-side statement timeout.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from school_directory.core import errors
from school_directory.services import directory, validation

if TYPE_CHECKING:
    from collections.abc import Mapping

    from school_directory.core import config
    from school_directory.db import database
    from school_directory.db import models as db_models
    from school_directory.services import asset_store

logger = logging.getLogger(__name__)


async def register_school(
    submission: Mapping[str, object],
    store: asset_store.AssetStoreProtocol,
    repo: database.SchoolRepositoryProtocol,
    settings: config.Settings,
) -> db_models.SchoolRecord:
    """Validate a submission, store its image and record the school.

    Args:
        submission: Decoded form fields plus ``image`` as UploadedAsset.
        store: Asset store for the image.
        repo: School repository used for the insert.
        settings: Application settings (timeouts).

    Returns:
        The persisted SchoolRecord including its assigned id.

    Raises:
        errors.ValidationError: Submission rejected; nothing was stored.
        errors.StorageError: Image not written; no insert attempted.
        errors.WriteError: Insert failed; the stored image is orphaned.
        errors.ConnectionError: Database unreachable; the stored image is
            orphaned.
    """
    try:
        record = validation.validate(submission)
    except errors.ValidationError as exc:
        logger.info("Rejected registration: %s", exc.message)
        raise

    try:
        reference = await asyncio.wait_for(
            asyncio.to_thread(store.store, record.image),
            timeout=settings.asset_write_timeout_seconds,
        )
    except TimeoutError as exc:
        logger.error(
            "Storing image %s exceeded %.1fs",
            record.image.filename,
            settings.asset_write_timeout_seconds,
        )
        raise errors.StorageError("Timed out storing image") from exc

    try:
        return await asyncio.to_thread(repo.register, record, reference)
    except (errors.WriteError, errors.ConnectionError):
        logger.warning(
            "Image %s is orphaned: no school record was written",
            reference,
        )
        raise


async def list_schools(
    repo: database.SchoolRepositoryProtocol,
    query: str = "",
    sort: directory.SortKey | None = None,
) -> list[db_models.SchoolSummary]:
    """Fetch every school and apply the optional search and ordering.

    Args:
        repo: School repository to read from.
        query: Case-insensitive search over name, city and address.
        sort: "name", "city" or None for store order.

    Returns:
        Matching schools; an empty list when none exist.

    Raises:
        errors.ConnectionError: Database unreachable.
        errors.ReadError: Listing query failed.
    """
    schools = await asyncio.to_thread(repo.list_all)
    return directory.apply_query(schools, query, sort)
