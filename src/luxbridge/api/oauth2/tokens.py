# OAuth2 credential generation.
# Created: 2026-10-12

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string

ACCESS_TOKEN_PREFIX = "lbat_"

_ALPHABET = string.ascii_letters + string.digits


def random_string(length: int = 32) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_client_id() -> str:
    return random_string(16)


def generate_client_secret() -> str:
    return random_string(64)


def generate_access_token() -> str:
    return f"{ACCESS_TOKEN_PREFIX}{secrets.token_urlsafe(48)}"


def s256_challenge(code_verifier: str) -> str:
    """PKCE S256: BASE64URL(SHA256(code_verifier)) without padding."""
    digest = hashlib.sha256(code_verifier.encode()).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


def verify_pkce(code_verifier: str, code_challenge: str, method: str | None) -> bool:
    """Check a verifier against a stored challenge.

    ``S256`` compares the hashed verifier; ``plain`` (or no method) compares the
    verifier directly. Unknown methods never verify.
    """
    if method == "S256":
        expected = s256_challenge(code_verifier)
    elif method in (None, "", "plain"):
        expected = code_verifier
    else:
        return False
    return hmac.compare_digest(expected.encode(), code_challenge.encode())
