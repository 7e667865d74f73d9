"""Sticker Dream - self-signed TLS identity for local network HTTPS."""

__version__ = "0.1.0"
