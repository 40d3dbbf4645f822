"""Search and ordering over the listing projection.

Listing always retrieves the full set of schools; narrowing and ordering
happen in memory over that sequence. None of these helpers touch the
store or mutate their input.

- filter_schools: case-insensitive substring match on name, city or
  address. An empty query keeps every school.
- sort_by_name / sort_by_city: stable ascending sort using locale-aware
  collation of the casefolded value, ties broken by the raw value.
"""

from __future__ import annotations

import locale
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

    from school_directory.db import models as db_models

SortKey = Literal["name", "city"]


def collation_key(value: str) -> tuple[str, str]:
    """Comparator key used by every directory sort."""
    return locale.strxfrm(value.casefold()), locale.strxfrm(value)


def matches(school: db_models.SchoolSummary, query: str) -> bool:
    needle = query.casefold()
    return any(
        needle in field.casefold()
        for field in (school.name, school.city, school.address)
    )


def filter_schools(
    schools: Iterable[db_models.SchoolSummary],
    query: str,
) -> list[db_models.SchoolSummary]:
    """Keep schools whose name, city or address contains ``query``.

    Args:
        schools: Schools to search.
        query: Search text; an empty string selects everything.

    Returns:
        Matching schools in their original order.
    """
    if not query:
        return list(schools)
    return [school for school in schools if matches(school, query)]


def sort_by_name(
    schools: Iterable[db_models.SchoolSummary],
) -> list[db_models.SchoolSummary]:
    return sorted(schools, key=lambda school: collation_key(school.name))


def sort_by_city(
    schools: Iterable[db_models.SchoolSummary],
) -> list[db_models.SchoolSummary]:
    return sorted(schools, key=lambda school: collation_key(school.city))


def apply_query(
    schools: Iterable[db_models.SchoolSummary],
    query: str = "",
    sort: SortKey | None = None,
) -> list[db_models.SchoolSummary]:
    """Filter and then optionally sort a listing.

    Args:
        schools: Full listing from the repository.
        query: Search text passed to filter_schools.
        sort: "name", "city" or None to keep store order.

    Returns:
        New list with the selected schools.
    """
    selected = filter_schools(schools, query)
    if sort == "name":
        return sort_by_name(selected)
    if sort == "city":
        return sort_by_city(selected)
    return selected
