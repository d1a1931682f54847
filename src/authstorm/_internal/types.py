"""Shared type aliases for AuthStorm."""

from __future__ import annotations

# HTTP headers dictionary.
Headers = dict[str, str]

# Opaque bearer token value, used once and discarded.
Credential = str
