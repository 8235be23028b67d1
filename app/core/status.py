"""Appointment status vocabularies and the mapping between them.

The ``appointments.status`` column only accepts the storage vocabulary
(``scheduled``, ``completed``, ``no-show``, ``cancelled``) while clients
speak the UI vocabulary (``pending``, ``attended``, ``missed``,
``cancelled``). Every read and write goes through :func:`to_ui` and
:func:`to_storage` so that a UI token is never persisted.
"""

from enum import Enum


class UiStatus(str, Enum):
    """Client facing appointment status."""

    PENDING = "pending"
    ATTENDED = "attended"
    MISSED = "missed"
    CANCELLED = "cancelled"


class StorageStatus(str, Enum):
    """Persisted appointment status (matches the table check constraint)."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"
    CANCELLED = "cancelled"


UI_TO_STORAGE: dict[str, str] = {
    UiStatus.PENDING.value: StorageStatus.SCHEDULED.value,
    UiStatus.ATTENDED.value: StorageStatus.COMPLETED.value,
    UiStatus.MISSED.value: StorageStatus.NO_SHOW.value,
    UiStatus.CANCELLED.value: StorageStatus.CANCELLED.value,
}

STORAGE_TO_UI: dict[str, str] = {storage: ui for ui, storage in UI_TO_STORAGE.items()}

TERMINAL_UI_STATUSES = frozenset(
    {UiStatus.ATTENDED.value, UiStatus.MISSED.value, UiStatus.CANCELLED.value}
)


def _normalize(value: str) -> str:
    return value.strip().lower()


def to_storage(ui_status: str) -> str:
    """
    Translate a UI status token into its storage token.

    Lookup is case-insensitive. Unrecognized input is returned unchanged.

    Args:
        ui_status: UI token such as ``"Attended"`` or ``"missed"``

    Returns:
        Canonical lowercase storage token, or the input as given
    """
    return UI_TO_STORAGE.get(_normalize(ui_status), ui_status)


def to_ui(storage_status: str) -> str:
    """
    Translate a storage status token into its UI token.

    Lookup is case-insensitive. Unrecognized input is returned unchanged.

    Args:
        storage_status: Storage token such as ``"no-show"``

    Returns:
        Canonical lowercase UI token, or the input as given
    """
    return STORAGE_TO_UI.get(_normalize(storage_status), storage_status)


def is_storage_status(value: str) -> bool:
    """Check that a value is one of the four persisted tokens."""
    return value in STORAGE_TO_UI


def is_ui_status(value: str) -> bool:
    """Check (case-insensitively) that a value is one of the four UI tokens."""
    return _normalize(value) in UI_TO_STORAGE
