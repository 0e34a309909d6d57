"""Tests for profile serialisation and outlet lookup."""

from datetime import datetime, timedelta, timezone

from sqlmodel import Session

from account_admin.models import UserProfile
from account_admin.services.profiles import (
    count_active_admins,
    profile_to_dict,
    resolve_outlet_name,
)


def test_profile_to_dict_omits_empty_fields():
    profile = UserProfile(
        id="u9",
        email="u9@example.com",
        full_name="Nikhil Rao",
        role="viewer",
        phone="",
        is_active=False,
        created_at=datetime(2024, 3, 1, 8, 0),
        updated_at=datetime(2024, 3, 2, 8, 0, tzinfo=timezone.utc),
    )

    assert profile_to_dict(profile) == {
        "id": "u9",
        "email": "u9@example.com",
        "full_name": "Nikhil Rao",
        "role": "viewer",
        "is_active": False,
        "created_at": "2024-03-01T08:00:00Z",
        "updated_at": "2024-03-02T08:00:00Z",
    }


def test_resolve_outlet_name(engine, seed):
    with Session(engine) as session:
        assert resolve_outlet_name(session, "loc-1") == "Downtown"
        assert resolve_outlet_name(session, "loc-404") is None
        assert resolve_outlet_name(session, None) is None


def test_count_active_admins(engine, seed):
    with Session(engine) as session:
        assert count_active_admins(session) == 2


def test_profile_to_dict_renders_offsets_as_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    profile = UserProfile(
        id="u9",
        email="u9@example.com",
        full_name="Nikhil Rao",
        role="viewer",
        created_at=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
        last_login=datetime(2024, 3, 3, 13, 30, tzinfo=ist),
    )

    data = profile_to_dict(profile)

    assert data["created_at"] == "2024-03-01T08:00:00Z"
    assert data["last_login"] == "2024-03-03T08:00:00Z"
