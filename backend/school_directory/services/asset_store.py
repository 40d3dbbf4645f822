"""Filesystem storage for uploaded school images.

Images are written into a single directory (``Settings.image_dir``) under
the filename the client declared, and records refer to them by a logical
path such as ``/schoolImages/oak.jpg`` rather than by an absolute
filesystem path. The same prefix is mounted by the app so references can
be served directly.

Name-based addressing means two uploads with the same filename collide:
the later write replaces the earlier file. Only the final component of
the declared filename is used, so a client cannot write outside the
image directory.

Example:
    >>> from school_directory.core.config import get_settings
    >>> from school_directory.db.models import UploadedAsset
    >>> store = LocalAssetStore.from_settings(get_settings())
    >>> store.store(UploadedAsset(filename="oak.jpg", content=b"..."))
    '/schoolImages/oak.jpg'
"""

from __future__ import annotations

import logging
import os
import pathlib
import shutil
import tempfile
from typing import TYPE_CHECKING, Protocol

from school_directory.core import errors

if TYPE_CHECKING:
    from school_directory.core import config
    from school_directory.db import models as db_models

logger = logging.getLogger(__name__)


class AssetStoreProtocol(Protocol):
    """Protocol interface for persisting uploaded images."""

    def store(
        self, asset: db_models.UploadedAsset
    ) -> db_models.AssetReference: ...

    def resolve(self, reference: db_models.AssetReference) -> pathlib.Path: ...


def final_component(filename: str) -> str:
    """Reduce a client-declared filename to its final path component.

    Returns an empty string when nothing usable is left, such as for
    ``..``, a bare separator or a name holding control characters.
    """
    name = pathlib.PurePosixPath(filename.replace("\\", "/")).name
    if name in (".", "..") or any(ord(ch) < 32 or ch == "\x7f" for ch in name):
        return ""
    return name


def _safe_filename(filename: str) -> str:
    name = final_component(filename)
    if not name:
        raise errors.StorageError(f"Unusable image filename: {filename!r}")
    return name


class LocalAssetStore(AssetStoreProtocol):
    """Stores images as plain files in one directory.

    Args:
        directory: Directory that holds every stored image.
        url_prefix: Logical prefix used when building references.
    """

    def __init__(
        self,
        directory: pathlib.Path,
        url_prefix: str = "/schoolImages",
    ) -> None:
        self.directory = directory
        self.url_prefix = "/" + url_prefix.strip("/")

    @classmethod
    def from_settings(cls, settings: config.Settings) -> LocalAssetStore:
        return cls(settings.image_dir, settings.image_url_prefix)

    def store(
        self, asset: db_models.UploadedAsset
    ) -> db_models.AssetReference:
        """Persist an uploaded image and return its reference.

        The bytes go to a temporary file inside the image directory that
        is then moved over the target name, so readers never observe a
        partially written image. On failure the temporary file is removed.

        Args:
            asset: The validated upload.

        Returns:
            Logical path of the stored file, e.g. "/schoolImages/oak.jpg".

        Raises:
            errors.StorageError: If the filename is unusable, or the
                directory cannot be created or the file cannot be written.
        """
        filename = _safe_filename(asset.filename)
        target_path = self.directory / filename
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                delete=False,
                dir=self.directory,
                prefix=".upload-",
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(asset.content)
                tmp.flush()
                os.fsync(tmp.fileno())

            os.chmod(tmp_name, 0o644)
            shutil.move(tmp_name, target_path)
        except (OSError, ValueError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(
                "Failed to store image %s in %s",
                filename,
                self.directory,
                exc_info=True,
            )
            raise errors.StorageError("Failed to store image") from exc

        reference = f"{self.url_prefix}/{filename}"
        logger.info("Stored image %s (%d bytes)", reference, asset.size)
        return reference

    def resolve(self, reference: db_models.AssetReference) -> pathlib.Path:
        """Map a stored reference back to its file on disk.

        Args:
            reference: Reference returned by store().

        Returns:
            Path of the file inside the image directory.
        """
        prefix = self.url_prefix + "/"
        name = reference
        if reference.startswith(prefix):
            name = reference[len(prefix):]
        return self.directory / _safe_filename(name)


def get_asset_store(settings: config.Settings) -> AssetStoreProtocol:
    """Factory function to create the asset store.

    Args:
        settings: Application settings with the image directory.

    Returns:
        LocalAssetStore writing into ``settings.image_dir``.
    """
    return LocalAssetStore.from_settings(settings)
