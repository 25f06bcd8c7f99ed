"""Tests for the onboarding step indicator."""

from staff_onboarding.forms.progress import build_progress, progress_as_dicts


def _statuses(current_step: str, is_same_person: bool) -> dict[str, str]:
    return {s.id: s.status for s in build_progress(current_step, is_same_person)}


class TestTwoPartyProgress:
    """Tests for separate employer and employee signers."""

    def test_employer_step(self) -> None:
        assert _statuses("employer", False) == {
            "employer": "current",
            "employee": "upcoming",
            "complete": "upcoming",
        }

    def test_employee_step(self) -> None:
        assert _statuses("employee", False) == {
            "employer": "complete",
            "employee": "current",
            "complete": "upcoming",
        }

    def test_complete(self) -> None:
        assert set(_statuses("complete", False).values()) == {"complete"}


class TestSamePersonProgress:
    """Tests for the combined single-signer flow."""

    def test_combined_step(self) -> None:
        assert _statuses("employer", True) == {"combined": "current", "complete": "upcoming"}

    def test_complete(self) -> None:
        assert _statuses("complete", True) == {"combined": "complete", "complete": "complete"}


class TestProgressAsDicts:
    def test_shape(self) -> None:
        steps = progress_as_dicts("employer", False)
        assert steps[0] == {
            "id": "employer",
            "label": "Employer",
            "description": "Employment details",
            "status": "current",
        }
