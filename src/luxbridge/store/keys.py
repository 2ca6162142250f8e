# Key namespace for the credential store.
# Created: 2026-10-12

from __future__ import annotations


def client_key(client_id: str) -> str:
    return f"client:{client_id}"


def authcode_key(code: str) -> str:
    return f"authcode:{code}"


def oauth_token_key(token: str) -> str:
    return f"oauth_token:{token}"


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def user_sessions_key(identity_id: str) -> str:
    return f"user_sessions:{identity_id}"


def platform_link_key(identity_id: str, platform: str) -> str:
    return f"platform_link:{identity_id}:{platform}"


def identity_key(identity_id: str) -> str:
    return f"identity:{identity_id}"


def platform_user_key(email: str) -> str:
    return f"platform_user:{email.strip().lower()}"


def platform_user_id_key(user_id: str) -> str:
    return f"platform_user_id:{user_id}"


SESSION_PATTERN = "session:*"

# Ephemeral state dropped by ``luxbridge clear-sessions``; client registrations survive.
EPHEMERAL_PATTERNS = ("session:*", "user_sessions:*", "authcode:*", "oauth_token:*")
