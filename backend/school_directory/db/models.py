"""Data models for school directory records.

This module defines the structures that flow through the registration
and listing paths. SchoolRecord is the persisted entity, SchoolSummary is
the projection served by the listing, UploadedAsset is the image payload
of a single registration call, and ValidatedRecord is what the validator
hands to the asset store and the registry writer.

Example:
    Creating a SchoolRecord as returned after registration:
        >>> from school_directory.db.models import SchoolRecord
        >>> school = SchoolRecord(
        ...     id=1,
        ...     name="Oak Hill",
        ...     email="a@b.com",
        ...     address="12 Elm",
        ...     city="Springfield",
        ...     state="IL",
        ...     contact="5551234567",
        ...     image="/schoolImages/oak.jpg",
        ... )
        >>> school.summary().city
        'Springfield'
"""

from __future__ import annotations

import dataclasses

AssetReference = str


@dataclasses.dataclass(frozen=True)
class UploadedAsset:
    """Binary image payload carried by one registration request.

    Attributes:
        filename: Filename declared by the client.
        content: Raw bytes of the upload.
        content_type: Media type declared by the client, if any.
    """

    filename: str
    content: bytes = dataclasses.field(repr=False)
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclasses.dataclass(frozen=True)
class ValidatedRecord:
    """A submission that passed every validation rule."""

    name: str
    email: str
    address: str
    city: str
    state: str
    contact: str
    image: UploadedAsset


@dataclasses.dataclass(frozen=True)
class SchoolSummary:
    """Listing projection of a school.

    Attributes:
        id: Store-assigned identifier.
        name: School name.
        address: Street address.
        city: City name.
        image: Reference to the stored image.
    """

    id: int
    name: str
    address: str
    city: str
    image: AssetReference


@dataclasses.dataclass(frozen=True)
class SchoolRecord:
    """A persisted school.

    Records are append-only: ``id`` is assigned once by the store at
    insert time and no field changes afterwards.

    Attributes:
        id: Store-assigned identifier, unique and never reused.
        name: School name, at least two characters.
        email: Contact email address.
        address: Street address.
        city: City name.
        state: State or region.
        contact: Phone number, kept as an opaque 10 to 15 character token.
        image: Reference to the stored image, e.g. "/schoolImages/oak.jpg".
    """

    id: int
    name: str
    email: str
    address: str
    city: str
    state: str
    contact: str
    image: AssetReference

    @classmethod
    def from_validated(
        cls,
        school_id: int,
        record: ValidatedRecord,
        image: AssetReference,
    ) -> SchoolRecord:
        """Build the persisted record from validated input and its image."""
        return cls(
            id=school_id,
            name=record.name,
            email=record.email,
            address=record.address,
            city=record.city,
            state=record.state,
            contact=record.contact,
            image=image,
        )

    def summary(self) -> SchoolSummary:
        return SchoolSummary(
            id=self.id,
            name=self.name,
            address=self.address,
            city=self.city,
            image=self.image,
        )
