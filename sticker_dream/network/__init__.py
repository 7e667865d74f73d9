"""Local network discovery."""

from .resolver import NetworkIdentityResolver, is_valid_ipv4

__all__ = ["NetworkIdentityResolver", "is_valid_ipv4"]
