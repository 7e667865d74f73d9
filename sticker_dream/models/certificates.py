"""Certificate models for the local TLS identity."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class CertificateState(str, Enum):
    """Lifecycle state of the on-disk certificate."""
    MISSING = "missing"
    VALID = "valid"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class SanType(str, Enum):
    """Subject Alternative Name entry kinds."""
    DNS = "DNS"
    IP = "IP"


class CertPaths(BaseModel):
    """Locations of the private key and certificate."""
    key: Path = Field(..., description="Private key (PEM)")
    cert: Path = Field(..., description="Certificate (PEM)")


class SubjectAltName(BaseModel):
    """A single Subject Alternative Name entry."""
    kind: SanType = Field(..., description="Entry type")
    value: str = Field(..., description="DNS name or IP address")

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.value}"

    @classmethod
    def dns(cls, name: str) -> "SubjectAltName":
        return cls(kind=SanType.DNS, value=name)

    @classmethod
    def ip(cls, address: str) -> "SubjectAltName":
        return cls(kind=SanType.IP, value=address)


def build_subject_alt_names(hostname: str, address: str) -> List[SubjectAltName]:
    """
    Build the SAN list for the service identity.

    Order is hostname, localhost, loopback IP, then the discovered address.
    Repeated entries (e.g. a loopback fallback address) keep their first
    position only.

    Args:
        hostname: Service hostname (also the subject CN)
        address: Currently resolved IPv4 address

    Returns:
        Ordered list of SAN entries
    """
    candidates = [
        SubjectAltName.dns(hostname),
        SubjectAltName.dns("localhost"),
        SubjectAltName.ip("127.0.0.1"),
        SubjectAltName.ip(address),
    ]

    sans: List[SubjectAltName] = []
    for san in candidates:
        if san not in sans:
            sans.append(san)
    return sans


def format_subject_alt_names(sans: List[SubjectAltName]) -> str:
    """Render SANs as an OpenSSL subjectAltName value."""
    return ",".join(str(san) for san in sans)


class CertificateRecord(BaseModel):
    """
    Certificate Record - What the on-disk certificate claims.

    Derived on demand from the PEM file; never stored separately.
    """
    key_path: Path = Field(..., description="Private key location")
    cert_path: Path = Field(..., description="Certificate location")
    subject_cn: Optional[str] = Field(None, description="Subject common name")
    sans: List[SubjectAltName] = Field(
        default_factory=list,
        description="Subject Alternative Names in certificate order"
    )
    not_before: datetime = Field(..., description="Validity start (UTC)")
    not_after: datetime = Field(..., description="Validity end (UTC)")

    def covers(self, address: str) -> bool:
        """Check whether the certificate lists an IP SAN for the address."""
        return SubjectAltName.ip(address) in self.sans
