"""Callback to the TME Portal when the employer section is done.

The portal sends the employee their invitation email on receipt.
"""

from typing import Any

import requests

from staff_onboarding.utils.config import PortalConfig
from staff_onboarding.utils.logger import get_logger

logger = get_logger(__name__)

EMPLOYER_COMPLETE_PATH = "/api/clients-v2/staff/onboarding/employer-complete"


class PortalError(RuntimeError):
    """The portal call failed; carries the status to pass back to the client."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PortalNotifier:
    """Thin client for the TME Portal onboarding callback.

    Args:
        config: Portal base URL and request timeout.
        session: HTTP session, mainly so tests can substitute one.
    """

    def __init__(
        self, config: PortalConfig | None = None, session: requests.Session | None = None
    ) -> None:
        self.config = config or PortalConfig()
        self.session = session or requests.Session()

    @property
    def employer_complete_url(self) -> str:
        return self.config.base_url.rstrip("/") + EMPLOYER_COMPLETE_PATH

    def notify_employer_complete(
        self, supabase_id: str, job_title: str | None = None
    ) -> dict[str, Any]:
        """Tell the portal the employer has signed.

        Args:
            supabase_id: Submission row id.
            job_title: Title to put in the invitation email.

        Returns:
            The portal's JSON response.

        Raises:
            PortalError: If the portal is unreachable or answers with an error.
        """
        logger.info("Notifying TME Portal for supabaseId: %s", supabase_id)
        try:
            response = self.session.post(
                self.employer_complete_url,
                json={"supabaseId": supabase_id, "jobTitle": job_title},
                timeout=self.config.timeout_s,
            )
            result = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("TME Portal call failed: %s", exc)
            raise PortalError("Failed to notify employer completion", 500) from exc

        if not response.ok:
            logger.error("TME Portal returned error: %s", result)
            message = "Failed to notify TME Portal"
            if isinstance(result, dict) and result.get("error"):
                message = result["error"]
            raise PortalError(message, response.status_code)

        logger.info("TME Portal response: %s", result)
        return result
