"""Step indicator shown above the onboarding forms."""

from dataclasses import asdict, dataclass

_SAME_PERSON_STEPS = (
    ("combined", "Complete Form", "All information"),
    ("complete", "Done", "Submitted"),
)

_TWO_PARTY_STEPS = (
    ("employer", "Employer", "Employment details"),
    ("employee", "Employee", "Personal details"),
    ("complete", "Done", "Submitted"),
)


@dataclass
class ProgressStep:
    """One step of the wizard and where the submission stands on it."""

    id: str
    label: str
    description: str
    status: str  # complete | current | upcoming


def _step_status(step_id: str, current_step: str, is_same_person: bool) -> str:
    if current_step == "complete":
        return "complete"

    if is_same_person:
        return "upcoming" if step_id == "complete" else "current"

    if step_id == current_step:
        return "current"
    if step_id == "employer" and current_step != "employer":
        return "complete"
    return "upcoming"


def build_progress(current_step: str, is_same_person: bool) -> list[ProgressStep]:
    """Build the step list for a submission.

    Args:
        current_step: ``employer``, ``employee`` or ``complete``.
        is_same_person: Whether employer and employee are the same signer,
            in which case both sections are one combined step.

    Returns:
        Steps in display order with their status.
    """
    steps = _SAME_PERSON_STEPS if is_same_person else _TWO_PARTY_STEPS
    return [
        ProgressStep(
            id=step_id,
            label=label,
            description=description,
            status=_step_status(step_id, current_step, is_same_person),
        )
        for step_id, label, description in steps
    ]


def progress_as_dicts(current_step: str, is_same_person: bool) -> list[dict[str, str]]:
    return [asdict(step) for step in build_progress(current_step, is_same_person)]
