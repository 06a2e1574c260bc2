"""Update check against the published release feed.

The check is best-effort: any failure to fetch or decode the release
descriptor is logged and results in no prompt.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..auth.transport import HttpTransport
from ..errors import StandAppError
from .version import is_newer


class ReleaseInfo(BaseModel):
    """Latest published release, as described by the feed."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    tag_name: str = Field(..., min_length=1, description="Version tag, usually v-prefixed")
    html_url: str = Field(..., min_length=1, description="Download page of the release")


@dataclass(frozen=True)
class UpdateDecision:
    should_prompt: bool
    latest_version: Optional[str] = None
    url: Optional[str] = None


FetchLatest = Callable[[], Awaitable[Union[ReleaseInfo, Mapping[str, Any]]]]
PromptCallback = Callable[[UpdateDecision], Any]


async def fetch_latest_release(transport: HttpTransport, feed_url: str) -> ReleaseInfo:
    """GET the release feed and decode its descriptor.

    Raises:
        TransportFailure: If the feed cannot be reached
        StandAppError: If the feed answers with a non-2xx status
        ValueError: If the body is not a valid release descriptor
    """
    response = await transport.get(feed_url, headers={"Accept": "application/json"})
    if not response.ok:
        raise StandAppError(f"Release feed returned HTTP {response.status}")
    return ReleaseInfo.model_validate(json.loads(response.body))


class VersionGate:
    """Decides whether to offer the user an upgrade."""

    def __init__(self, transport: HttpTransport, feed_url: str, delay_seconds: float = 3.0):
        """Initialize the gate.

        Args:
            transport: HTTP collaborator for the default feed fetch
            feed_url: Release feed URL
            delay_seconds: Wait after startup before the scheduled check runs
        """
        self.transport = transport
        self.feed_url = feed_url
        self.delay_seconds = delay_seconds
        self._task: Optional[asyncio.Task] = None

    async def fetch_latest(self) -> ReleaseInfo:
        return await fetch_latest_release(self.transport, self.feed_url)

    async def check_for_update(self, current_version: str, fetch_latest: Optional[FetchLatest] = None) -> UpdateDecision:
        """Compare the running version with the latest release.

        Returns:
            A decision whose ``should_prompt`` is True only when the release
            is strictly newer than ``current_version``
        """
        fetch = fetch_latest or self.fetch_latest
        try:
            release = await fetch()
            if not isinstance(release, ReleaseInfo):
                release = ReleaseInfo.model_validate(release)
        except Exception as e:
            logger.warning(f"Update check failed: {e}")
            return UpdateDecision(should_prompt=False)

        should_prompt = is_newer(release.tag_name, current_version)
        if should_prompt:
            logger.info(f"Update available: {release.tag_name} (running {current_version})")
        else:
            logger.debug(f"No update: latest {release.tag_name}, running {current_version}")

        return UpdateDecision(should_prompt=should_prompt, latest_version=release.tag_name, url=release.html_url)

    def schedule(self, current_version: str, on_prompt: PromptCallback) -> asyncio.Task:
        """Run the check once, ``delay_seconds`` after this call.

        ``on_prompt`` is called (and awaited if it returns an awaitable) only
        when an upgrade should be offered. Repeated calls return the task
        already scheduled.
        """
        if self._task is not None:
            return self._task

        self._task = asyncio.get_running_loop().create_task(self._delayed_check(current_version, on_prompt))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _delayed_check(self, current_version: str, on_prompt: PromptCallback) -> UpdateDecision:
        await asyncio.sleep(self.delay_seconds)
        decision = await self.check_for_update(current_version)
        if not decision.should_prompt:
            return decision

        try:
            result = on_prompt(decision)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Update prompt callback failed: {e}")

        return decision
