"""Normalization of Notion users and pages into match candidates."""

import logging
from collections.abc import Iterable
from typing import Any

from .models import DirectoryCandidate, DirectoryKind

logger = logging.getLogger(__name__)


def _person_name(record: dict[str, Any]) -> str | None:
    if record.get("type") != "person":
        return None
    return record.get("name") or ""


def _project_name(record: dict[str, Any]) -> str | None:
    if record.get("object") != "page":
        return None

    properties = record["properties"]
    # Title property has type "title" whatever the database calls it
    title_property = next(
        (prop for prop in properties.values() if prop.get("type") == "title"),
        properties.get("Name"),
    )
    fragments = title_property["title"]
    return "".join(fragment["plain_text"] for fragment in fragments)


def normalize(record: dict[str, Any], kind: DirectoryKind) -> DirectoryCandidate | None:
    """
    Map a raw Notion record to a candidate.

    Bot users, non-page rows and records without a usable name or id are
    skipped. Malformed records are logged and skipped, never raised.

    Args:
        record: Raw user or page object from the Notion API
        kind: Which directory the record belongs to

    Returns:
        DirectoryCandidate, or None if the record was skipped
    """
    try:
        if kind is DirectoryKind.PERSON:
            name = _person_name(record)
        else:
            name = _project_name(record)
        record_id = record.get("id")
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        logger.warning(
            f"Skipping malformed {kind.value} record {_record_id(record)}: "
            f"{type(e).__name__}: {e}"
        )
        return None

    if name is None:
        return None

    name = name.strip() if isinstance(name, str) else ""
    if not name or not record_id:
        logger.warning(f"Skipping {kind.value} record {_record_id(record)} without a name")
        return None

    return DirectoryCandidate(name=name, id=str(record_id))


def normalize_all(
    records: Iterable[dict[str, Any]], kind: DirectoryKind
) -> list[DirectoryCandidate]:
    """Normalize a listing, dropping every record that cannot be matched."""
    candidates = []
    skipped = 0
    for record in records:
        candidate = normalize(record, kind)
        if candidate is None:
            skipped += 1
            continue
        candidates.append(candidate)

    logger.debug(f"Normalized {len(candidates)} {kind.value} candidates ({skipped} skipped)")
    return candidates


def _record_id(record: Any) -> str:
    if isinstance(record, dict):
        return str(record.get("id", "<no id>"))
    return f"<{type(record).__name__}>"
