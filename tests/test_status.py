import pytest

from appointments.status import (
    AppointmentStatus,
    UnknownStatus,
    badge_for,
    is_terminal,
    normalize_status,
)


class TestNormalizeStatus:
    """Legacy spellings collapse onto the canonical statuses."""

    @pytest.mark.parametrize("raw, expected", [
        ("accepted", AppointmentStatus.APPROVED),
        ("approved", AppointmentStatus.APPROVED),
        ("booked", AppointmentStatus.PENDING),
        ("canceled", AppointmentStatus.CANCELLED),
        ("declined", AppointmentStatus.REJECTED),
        (" Completed ", AppointmentStatus.COMPLETED),
    ])
    def test_aliases(self, raw, expected):
        assert normalize_status(raw) == expected

    def test_canonical_member_passes_through(self):
        assert normalize_status(AppointmentStatus.REJECTED) == AppointmentStatus.REJECTED

    def test_unknown_status_raises(self):
        with pytest.raises(UnknownStatus):
            normalize_status("teleported")

    def test_none_raises(self):
        with pytest.raises(UnknownStatus):
            normalize_status(None)


class TestTerminalStatuses:

    @pytest.mark.parametrize("status", ["completed", "rejected", "cancelled"])
    def test_terminal(self, status):
        assert is_terminal(status)

    @pytest.mark.parametrize("status", ["pending", "approved", "accepted"])
    def test_not_terminal(self, status):
        assert not is_terminal(status)


def test_badge_uses_canonical_label():
    assert badge_for("accepted") == {"label": "Approved", "tone": "blue"}
    assert badge_for("cancelled")["tone"] == "red"
