"""
Pepper Providers — the server-held half of the vault key material.

The pepper is fetched from ``GET {pepper_url}/api/security/pepper`` with the
caller's bearer token and is used as the HKDF salt. It is never persisted
by the vault.

Development builds may fall back to :data:`DEVELOPMENT_PEPPER`, a value
published here in source and therefore worthless as a secret. Production
builds never fall back: a failed fetch raises :class:`PepperUnavailable`.
"""
import base64
import asyncio
import binascii
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import aiohttp
from pydantic import BaseModel, Field

from .config import VaultConfig
from .crypto import PEPPER_SIZE
from .exceptions import PepperUnavailable

logger = logging.getLogger("seed_vault.vault")

PEPPER_PATH = "/api/security/pepper"

# Publicly known; only ever used when VaultConfig.is_development is true.
DEVELOPMENT_PEPPER = b"hihodl-dev-pepper-not-a-secret!!"


class SessionContext(BaseModel):
    """Authenticated session the pepper is fetched with."""

    access_token: str = Field(min_length=1)
    user_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"SessionContext(user_id={self.user_id!r}, access_token='***')"

    __str__ = __repr__


@runtime_checkable
class PepperProvider(Protocol):
    async def get_pepper(self, session: Optional[SessionContext]) -> bytes:
        ...


class StaticPepperProvider:
    """Returns a fixed pepper. For tests and offline tooling."""

    def __init__(self, pepper: bytes):
        if len(pepper) != PEPPER_SIZE:
            raise ValueError(f"Pepper must be exactly {PEPPER_SIZE} bytes")
        self._pepper = bytes(pepper)

    def __repr__(self) -> str:
        return "<StaticPepperProvider [redacted]>"

    async def get_pepper(self, session: Optional[SessionContext]) -> bytes:
        return self._pepper


class RemotePepperProvider:
    """Fetches the pepper from the backend over an authenticated channel.

    Args:
        config: Vault configuration (endpoint, timeout, environment).
        http: Optional ``aiohttp.ClientSession``-compatible client. When
            omitted a session is created lazily and owned by the provider.
    """

    def __init__(self, config: VaultConfig, http: Any = None):
        self._config = config
        self._http = http
        self._owns_http = http is None

    @property
    def url(self) -> str:
        return f"{self._config.pepper_url}{PEPPER_PATH}"

    async def _get_http(self) -> Any:
        if self._http is None or getattr(self._http, "closed", False):
            timeout = aiohttp.ClientTimeout(total=self._config.pepper_timeout)
            self._http = aiohttp.ClientSession(timeout=timeout)
            self._owns_http = True
        return self._http

    async def close(self) -> None:
        """Close the HTTP session if this provider created it."""
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    async def _fetch(self, session: Optional[SessionContext]) -> bytes:
        if session is None:
            raise PepperUnavailable("Not authenticated")
        http = await self._get_http()
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {session.access_token}",
        }
        async with http.get(self.url, headers=headers) as resp:
            if resp.status != 200:
                raise PepperUnavailable(f"Pepper endpoint returned HTTP {resp.status}")
            data = await resp.json()
        return decode_pepper(data)

    async def get_pepper(self, session: Optional[SessionContext]) -> bytes:
        """Return the 32-byte pepper.

        Raises:
            PepperUnavailable: If the fetch fails outside development builds.
        """
        try:
            return await self._fetch(session)
        except (
            aiohttp.ClientError, asyncio.TimeoutError, ValueError, PepperUnavailable,
        ) as err:
            logger.error("Failed to fetch pepper from backend: %s", err)
            if not self._config.is_development:
                raise PepperUnavailable(
                    "Failed to fetch pepper from backend. This is required "
                    f"for security; ensure {PEPPER_PATH} is available."
                ) from err
            logger.warning(
                "SECURITY WARNING: using the development pepper "
                "(environment=%s). This must never happen in production.",
                self._config.environment,
            )
            return DEVELOPMENT_PEPPER


def decode_pepper(data: Any) -> bytes:
    """Decode the ``{"pepper": "<base64>"}`` response body.

    Raises:
        PepperUnavailable: If the body is malformed or not 32 bytes.
    """
    if not isinstance(data, dict) or not isinstance(data.get("pepper"), str):
        raise PepperUnavailable("Malformed pepper response")
    try:
        pepper = base64.b64decode(data["pepper"], validate=True)
    except (binascii.Error, ValueError) as err:
        raise PepperUnavailable("Pepper is not valid base64") from err
    if len(pepper) != PEPPER_SIZE:
        raise PepperUnavailable(
            f"Pepper must be {PEPPER_SIZE} bytes, got {len(pepper)}"
        )
    return pepper
