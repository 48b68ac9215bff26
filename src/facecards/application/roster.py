"""Turning directory records into game-ready people."""

import logging
from collections.abc import Iterable
from typing import Any

from facecards.domain.constants import MIN_USABLE_PEOPLE
from facecards.domain.errors import RosterTooSmallError
from facecards.domain.models import Person

logger = logging.getLogger(__name__)


def person_from_record(record: dict[str, Any]) -> Person | None:
    """
    Build a Person from one directory record.

    Accepts both the proxy's field names (name, image_path) and the
    engine's own (display_name, image_ref). Returns None without an id.
    """
    raw_id = record.get("id")
    if raw_id is None or raw_id == "":
        return None
    name = record.get("name") or record.get("display_name") or record.get("first_name") or ""
    image = record.get("image_path") or record.get("image_ref") or ""
    pronouns = record.get("pronouns") or None
    return Person(id=str(raw_id), display_name=str(name), image_ref=str(image), pronouns=pronouns)


def parse_roster(records: Iterable[dict[str, Any]]) -> list[Person]:
    """Keep only people with both a name and a photo, in directory order, without duplicates."""
    people: list[Person] = []
    seen: set[str] = set()
    skipped = 0
    for record in records:
        person = person_from_record(record) if isinstance(record, dict) else None
        if person is None or not person.is_usable or person.id in seen:
            skipped += 1
            continue
        seen.add(person.id)
        people.append(person)
    if skipped:
        logger.info(f"Skipped {skipped} directory records without a usable name and photo")
    return people


def ensure_playable(roster: list[Person]) -> None:
    """Raise RosterTooSmallError unless the roster can support a round."""
    if len(roster) < MIN_USABLE_PEOPLE:
        raise RosterTooSmallError(len(roster))
