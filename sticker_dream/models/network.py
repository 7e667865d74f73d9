"""Network identity models."""

from typing import Optional

from pydantic import BaseModel, Field


LOOPBACK_ADDRESS = "127.0.0.1"


class NetworkIdentity(BaseModel):
    """
    Result of local address discovery.

    Either a resolved interface address or the loopback fallback, kept
    distinct so callers can decide whether to warn.
    """
    address: str = Field(..., description="IPv4 address to advertise")
    used_loopback_fallback: bool = Field(default=False, description="True when no interface qualified")
    reason: Optional[str] = Field(None, description="Why the fallback was used")

    @classmethod
    def resolved(cls, address: str) -> "NetworkIdentity":
        return cls(address=address)

    @classmethod
    def fallback(cls, reason: str) -> "NetworkIdentity":
        return cls(address=LOOPBACK_ADDRESS, used_loopback_fallback=True, reason=reason)

    def __str__(self) -> str:
        return self.address


class ServerURLs(BaseModel):
    """Addresses a browser can use to reach the service."""
    local: str = Field(..., description="URL valid on this machine")
    network: str = Field(..., description="URL for other devices on the network")
