"""Random bearer token generation."""

from __future__ import annotations

import base64
import secrets

from authstorm._internal.errors import ConfigError
from authstorm._internal.types import Credential

# Bytes of entropy behind each token (~43 base64 characters).
CREDENTIAL_BYTES = 32


def generate_credential() -> Credential:
    """Return a fresh, single-use bearer token.

    The token is the base64 text of ``CREDENTIAL_BYTES`` bytes drawn from
    the operating system CSPRNG, so two attempts never share a value in
    practice.

    Raises:
        ConfigError: If the OS entropy source is unavailable. This is
            fatal for the whole run, not a per-attempt failure.
    """
    try:
        raw = secrets.token_bytes(CREDENTIAL_BYTES)
    except (NotImplementedError, OSError) as exc:
        msg = "Operating system entropy source is unavailable"
        raise ConfigError(msg) from exc
    return base64.b64encode(raw).decode("ascii")
