"""Tests for the status vocabulary translator."""

import pytest

from app.core.status import (
    STORAGE_TO_UI,
    UI_TO_STORAGE,
    StorageStatus,
    UiStatus,
    is_storage_status,
    is_ui_status,
    to_storage,
    to_ui,
)


@pytest.mark.parametrize(
    ("ui_status", "storage_status"),
    [
        ("pending", "scheduled"),
        ("attended", "completed"),
        ("missed", "no-show"),
        ("cancelled", "cancelled"),
    ],
)
def test_mapping_is_a_bijection(ui_status: str, storage_status: str) -> None:
    """Each UI token maps to exactly one storage token and back."""
    assert to_storage(ui_status) == storage_status
    assert to_ui(storage_status) == ui_status
    assert to_ui(to_storage(ui_status)) == ui_status
    assert to_storage(to_ui(storage_status)) == storage_status


def test_mapping_covers_closed_sets() -> None:
    assert set(UI_TO_STORAGE) == {status.value for status in UiStatus}
    assert set(STORAGE_TO_UI) == {status.value for status in StorageStatus}


@pytest.mark.parametrize(
    ("value", "expected"),
    [("Attended", "completed"), ("MISSED", "no-show"), (" Pending ", "scheduled")],
)
def test_to_storage_is_case_insensitive(value: str, expected: str) -> None:
    assert to_storage(value) == expected


def test_to_ui_is_case_insensitive() -> None:
    assert to_ui("No-Show") == "missed"
    assert to_ui("COMPLETED") == "attended"


def test_unrecognized_input_passes_through_unchanged() -> None:
    assert to_storage("Rescheduled") == "Rescheduled"
    assert to_ui("archived") == "archived"


def test_storage_and_ui_predicates() -> None:
    assert is_storage_status("no-show")
    assert not is_storage_status("missed")
    assert is_ui_status("Missed")
    assert not is_ui_status("no-show")
