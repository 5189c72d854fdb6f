"""Opaque identifier generation and key hashing."""

from __future__ import annotations

import hashlib
import secrets


TOKEN_BYTES = 24


def generate_token() -> str:
    """Generate a URL-safe token from the system CSPRNG."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_id(prefix: str = "") -> str:
    """Generate an unguessable id, optionally tagged like ``o_...``."""
    token = generate_token()
    return f"{prefix}_{token}" if prefix else token


def hash_token(token: str, server_salt: str) -> str:
    """Create deterministic token hash via sha256(token + server_salt)."""
    payload = f"{token}{server_salt}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def log_ref(key: str) -> str:
    """Short, non-reversible reference to a hashed store key for log lines."""
    return key[:12]
