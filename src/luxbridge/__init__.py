"""LuxBridge auth — OAuth 2.1 authorization server and platform credential broker."""

__version__ = "0.1.0"
