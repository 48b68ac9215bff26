import pytest

from facecards.application.roster import ensure_playable, parse_roster, person_from_record
from facecards.domain.errors import RosterTooSmallError


def test_proxy_fields_map_to_person():
    person = person_from_record(
        {"id": 42, "name": "Ada Lovelace", "image_path": "/ada.jpg", "pronouns": "she/her"}
    )
    assert person.id == "42"
    assert person.display_name == "Ada Lovelace"
    assert person.image_ref == "/ada.jpg"
    assert person.pronouns == "she/her"


def test_missing_id_is_rejected():
    assert person_from_record({"name": "No Id", "image_path": "/x.jpg"}) is None


def test_only_usable_people_kept():
    records = [
        {"id": 1, "name": "Ada Lovelace", "image_path": "/ada.jpg"},
        {"id": 2, "name": "", "image_path": "/blank.jpg"},
        {"id": 3, "name": "No Photo", "image_path": None},
        {"id": 4, "name": "   ", "image_path": "/spaces.jpg"},
        {"id": 1, "name": "Ada Again", "image_path": "/ada2.jpg"},
        "not a record",
        {"id": 5, "display_name": "Grace Hopper", "image_ref": "/grace.jpg"},
    ]
    people = parse_roster(records)
    assert [p.id for p in people] == ["1", "5"]
    assert people[1].pronouns is None


def test_ensure_playable():
    people = parse_roster(
        [
            {"id": 1, "name": "Ada Lovelace", "image_path": "/ada.jpg"},
            {"id": 2, "name": "Grace Hopper", "image_path": "/grace.jpg"},
        ]
    )
    ensure_playable(people)

    with pytest.raises(RosterTooSmallError) as exc:
        ensure_playable(people[:1])
    assert exc.value.usable == 1
