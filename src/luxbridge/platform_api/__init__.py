"""Mock downstream platform APIs (login, registration, identity check)."""
