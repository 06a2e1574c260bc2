"""HTTP transport for talking to the Stand App server and the release feed.

The authenticator and the update check only see ``TransportResponse``
values and ``TransportFailure`` exceptions, never aiohttp types.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

import aiohttp
from loguru import logger

from ..errors import StandAppError

USER_AGENT = "StandApp-Client/1.0.0"


class TransportFailure(StandAppError):
    """DNS failure, timeout, refused connection or malformed response."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and decoded text body of one HTTP exchange."""

    status: int
    body: str = ""
    headers: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        """First value of a header, matched case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


class HttpTransport(Protocol):
    """Asynchronous HTTP collaborator."""

    async def post_form(self, url: str, fields: Mapping[str, str]) -> TransportResponse: ...

    async def get(self, url: str, headers: Optional[Mapping[str, str]] = None) -> TransportResponse: ...

    async def close(self) -> None: ...


class AiohttpTransport:
    """``HttpTransport`` backed by a shared ``aiohttp.ClientSession``."""

    def __init__(self, timeout_seconds: float = 30.0, session: Optional[aiohttp.ClientSession] = None):
        """Initialize the transport.

        Args:
            timeout_seconds: Total timeout for one request
            session: Existing session to use; one is created lazily otherwise
        """
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    async def post_form(self, url: str, fields: Mapping[str, str]) -> TransportResponse:
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": USER_AGENT,
        }
        return await self._request("POST", url, headers=headers, data=dict(fields))

    async def get(self, url: str, headers: Optional[Mapping[str, str]] = None) -> TransportResponse:
        request_headers = {"User-Agent": USER_AGENT}
        if headers:
            request_headers.update(headers)
        return await self._request("GET", url, headers=request_headers)

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def _request(self, method: str, url: str, **kwargs) -> TransportResponse:
        session = self._get_session()
        try:
            async with session.request(method, url, timeout=self.timeout, **kwargs) as resp:
                body = await resp.text()
                logger.debug(f"{method} {url} -> HTTP {resp.status}")
                return TransportResponse(
                    status=resp.status,
                    body=body,
                    headers=tuple(resp.headers.items()),
                )

        except asyncio.TimeoutError:
            raise TransportFailure(f"Request to {url} timed out") from None

        except aiohttp.InvalidURL as e:
            raise TransportFailure(f"Invalid URL: {e}") from e

        except aiohttp.ClientError as e:
            raise TransportFailure(f"Network error: {e}") from e

        except UnicodeDecodeError as e:
            raise TransportFailure(f"Malformed response body: {e}") from e

        except ValueError as e:
            raise TransportFailure(f"Invalid request: {e}") from e

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # Cookies are managed explicitly through the stored session token
            self._session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())
            self._owns_session = True
        return self._session
