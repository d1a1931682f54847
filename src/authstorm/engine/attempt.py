"""Single-attempt HTTP executor with per-attempt connections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiohttp

from authstorm._internal.errors import AttemptError
from authstorm._internal.logging import get_logger

if TYPE_CHECKING:
    from authstorm._internal.config import RunConfig
    from authstorm._internal.types import Credential, Headers

logger = get_logger("engine.attempt")


def build_headers(credential: Credential) -> Headers:
    """Return the request headers for one attempt."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {credential}",
    }


class AttemptExecutor:
    """Sends one authenticated POST per ``execute`` call.

    Wraps an ``aiohttp.ClientSession`` configured so that no connection
    is ever reused: the connector closes every connection after its
    response (``force_close``) and has no pool limit, so concurrent
    attempts are never queued behind each other. Every attempt is bounded
    by ``config.timeout``.

    One executor may be shared by all workers of a run.

    Attributes:
        config: The run configuration (target URL, payload, timeout).
    """

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> AttemptExecutor:
        """Open the underlying aiohttp session."""
        connector = aiohttp.TCPConnector(force_close=True, limit=0)
        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=self._timeout,
        )
        logger.debug("Opened session for %s (timeout=%.1fs)", self.config.url, self.config.timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def execute(self, credential: Credential) -> int:
        """Perform one attempt with the given credential.

        Args:
            credential: Bearer token for this attempt only.

        Returns:
            The HTTP status code of a successful (2xx) response.

        Raises:
            AttemptError: On a non-2xx status, a transport fault, or a
                timeout.
            RuntimeError: If called outside the async context manager.
        """
        if self._session is None:
            msg = "AttemptExecutor must be used as an async context manager"
            raise RuntimeError(msg)

        try:
            async with self._session.post(
                self.config.url,
                headers=build_headers(credential),
                data=self.config.payload,
            ) as resp:
                status = resp.status
                await resp.read()
        except TimeoutError as exc:
            msg = f"Timed out after {self.config.timeout:g}s"
            raise AttemptError(msg, kind="timeout") from exc
        except aiohttp.ClientError as exc:
            msg = f"{type(exc).__name__}: {exc}"
            raise AttemptError(msg, kind="transport") from exc

        if not 200 <= status < 300:
            raise AttemptError.from_status(status)
        return status
