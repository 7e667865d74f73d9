"""Data models for Sticker Dream TLS provisioning."""

from .certificates import (
    CertificateRecord,
    CertificateState,
    CertPaths,
    SanType,
    SubjectAltName,
    build_subject_alt_names,
    format_subject_alt_names,
)
from .network import LOOPBACK_ADDRESS, NetworkIdentity, ServerURLs

__all__ = [
    "CertificateRecord",
    "CertificateState",
    "CertPaths",
    "SanType",
    "SubjectAltName",
    "build_subject_alt_names",
    "format_subject_alt_names",
    "LOOPBACK_ADDRESS",
    "NetworkIdentity",
    "ServerURLs",
]
