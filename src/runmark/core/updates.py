"""Release update check against a published release-metadata document."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from runmark.config import get_settings

LOGGER = logging.getLogger(__name__)


class UpdateError(Exception):
    """Release metadata could not be fetched or decoded."""

    pass


class ReleaseInfo(BaseModel):
    """The fields of a release document the update check relies on."""

    tag_name: str
    name: str = ""
    html_url: str = ""


@dataclass
class UpdateStatus:
    """Outcome of an update check, ready to show to the user.

    Attributes:
        available: Whether a newer release exists
        message: User-facing summary
        url: Download page for the newer release
    """

    available: bool
    message: str
    url: Optional[str] = None


def version_components(version: str) -> list[int]:
    """Split a dotted version into integers.

    A leading/trailing ``v`` is ignored and non-numeric components count
    as 0, so ``"v1.2-beta"`` becomes ``[1, 0]``.
    """
    components: list[int] = []
    for part in version.strip().strip("vV").split("."):
        if not part:
            continue
        try:
            components.append(int(part))
        except ValueError:
            components.append(0)
    return components


def compare_versions(version1: str, version2: str) -> int:
    """Compare two dotted versions numerically.

    Missing components are treated as 0, so ``1.2`` equals ``1.2.0``.

    Returns:
        -1 if version1 is older, 1 if newer, 0 if equal
    """
    parts1 = version_components(version1)
    parts2 = version_components(version2)
    length = max(len(parts1), len(parts2))
    parts1 += [0] * (length - len(parts1))
    parts2 += [0] * (length - len(parts2))

    for v1, v2 in zip(parts1, parts2):
        if v1 < v2:
            return -1
        if v1 > v2:
            return 1
    return 0


class UpdateChecker:
    """Checks whether a newer release than the running build exists."""

    def __init__(
        self,
        current_version: str,
        url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        """Initialize the checker.

        Args:
            current_version: Version string of the running build
            url: Release metadata URL (default from settings)
            client: Optional HTTP client (a short-lived one is used otherwise)
            timeout: Request timeout in seconds
            max_retries: Attempts for transport failures
        """
        settings = get_settings()
        self.current_version = current_version
        self.url = url or settings.release_url
        self.timeout = timeout or settings.request_timeout
        self.max_retries = max_retries or settings.max_retries
        self._client = client

    def _get(self) -> httpx.Response:
        headers = {"Accept": "application/vnd.github+json"}
        if self._client is not None:
            return self._client.get(self.url, headers=headers, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self.url, headers=headers)

    def fetch_latest(self) -> ReleaseInfo:
        """Fetch and decode the latest release document.

        Transport errors are retried with exponential backoff.

        Raises:
            UpdateError: If the request fails or the body is not a release
        """
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=1, min=2, max=10),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = self._get()
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise UpdateError(str(e) or type(e).__name__) from e

        try:
            return ReleaseInfo.model_validate_json(response.content)
        except ValidationError as e:
            raise UpdateError("release metadata could not be decoded") from e

    def check(self) -> UpdateStatus:
        """Run the check, reporting failures in the message instead of raising."""
        try:
            release = self.fetch_latest()
        except UpdateError as e:
            LOGGER.debug("Update check against %s failed", self.url, exc_info=True)
            return UpdateStatus(
                available=False,
                message=f"Failed to check for updates: {e}",
            )

        if compare_versions(release.tag_name, self.current_version) > 0:
            name = release.name or release.tag_name
            return UpdateStatus(
                available=True,
                message=f"Version {name} ({release.tag_name}) is available.",
                url=release.html_url or None,
            )

        return UpdateStatus(
            available=False,
            message=f"Your app is up to date (Version {self.current_version}).",
        )
