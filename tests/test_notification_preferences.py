"""Tests for supplier notification preferences."""

from __future__ import annotations

from datetime import time

import pytest

from app.domain.entities import NotificationPreferences
from app.infrastructure.repositories import NotificationPreferencesRepository


def test_defaults_allow_in_app_and_email_but_not_sms() -> None:
    preferences = NotificationPreferences(fournisseur_id="supplier-1")

    assert preferences.allows("new_order", "in_app") is True
    assert preferences.allows("new_order", "email") is True
    assert preferences.allows("new_order", "sms") is False


def test_sub_type_toggle_and_channel_toggle() -> None:
    preferences = NotificationPreferences(
        fournisseur_id="supplier-1", payment_failed=False, email_notifications=False
    )

    assert preferences.allows("payment_failed") is False
    assert preferences.allows("payment_paid") is True
    assert preferences.allows("status_changed", "email") is False
    assert preferences.allows("something_new") is True


def test_unknown_channel_is_rejected() -> None:
    with pytest.raises(ValueError):
        NotificationPreferences(fournisseur_id="supplier-1").allows("new_order", "pigeon")


def test_quiet_hours_wrap_around_midnight() -> None:
    preferences = NotificationPreferences(fournisseur_id="supplier-1", quiet_hours_enabled=True)

    assert preferences.in_quiet_hours(time(23, 30)) is True
    assert preferences.in_quiet_hours(time(7, 59)) is True
    assert preferences.in_quiet_hours(time(8, 0)) is False
    assert preferences.in_quiet_hours(time(12, 0)) is False


def test_quiet_hours_disabled_by_default() -> None:
    assert NotificationPreferences(fournisseur_id="supplier-1").in_quiet_hours(time(23, 0)) is False


def test_repository_creates_defaults_lazily(session) -> None:
    repository = NotificationPreferencesRepository(session)

    assert repository.get("supplier-1") is None
    created = repository.get_or_create("supplier-1")
    assert created.id is not None
    assert created.new_order_received is True
    assert repository.get_or_create("supplier-1").id == created.id


def test_repository_updates_fields(session) -> None:
    repository = NotificationPreferencesRepository(session)

    updated = repository.update(
        "supplier-1", {"payment_pending": False, "quiet_hours_start": "21:30"}
    )

    assert updated.payment_pending is False
    assert updated.quiet_hours_start == "21:30"
    assert repository.get("supplier-1").payment_pending is False


def test_repository_rejects_unknown_fields_and_bad_clock(session) -> None:
    repository = NotificationPreferencesRepository(session)

    with pytest.raises(ValueError, match="Unknown preference fields"):
        repository.update("supplier-1", {"favourite_colour": "blue"})
    with pytest.raises(ValueError, match="Invalid time of day"):
        repository.update("supplier-1", {"quiet_hours_end": "late"})
