"""Certificate expiration checks."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID

from ..models.certificates import CertificateRecord, CertificateState, SubjectAltName
from .store import CertificateStore


logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

# Returned when the certificate cannot be read; treated like "expired"
UNREADABLE_DAYS = -1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def load_certificate(data: bytes) -> x509.Certificate:
    """Parse a PEM certificate."""
    return x509.load_pem_x509_certificate(data)


class ExpirationPolicy:
    """
    Decides whether the stored certificate can be reused.

    Renewal happens early (within the threshold) so that a rarely restarted
    device does not run into an expired certificate between restarts.
    """

    def __init__(
        self,
        store: CertificateStore,
        renewal_threshold_days: int = 30,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize expiration policy.

        Args:
            store: Certificate store to inspect
            renewal_threshold_days: Renew when this many days or fewer remain
            clock: Returns the current time (timezone aware)
        """
        self.store = store
        self.renewal_threshold_days = renewal_threshold_days
        self.clock = clock

    def _load(self) -> x509.Certificate:
        with open(self.store.paths().cert, 'rb') as f:
            return load_certificate(f.read())

    def days_until_expiration(self) -> int:
        """
        Whole days until the certificate expires.

        Returns:
            floor((not_after - now) / 1 day), or -1 if the certificate
            cannot be read or parsed
        """
        try:
            cert = self._load()
        except (OSError, ValueError) as e:
            logger.debug(f"Certificate unreadable, treating as expired: {e}")
            return UNREADABLE_DAYS

        remaining = cert.not_valid_after_utc - self.clock()
        return remaining // ONE_DAY

    def needs_renewal(self) -> bool:
        """Check if the certificate is expired or inside the renewal window."""
        days = self.days_until_expiration()
        return days < 0 or days <= self.renewal_threshold_days

    def evaluate(self) -> CertificateState:
        """
        Classify the stored certificate.

        Returns:
            MISSING, EXPIRED (includes unreadable), EXPIRING_SOON or VALID
        """
        if not self.store.exists():
            return CertificateState.MISSING

        days = self.days_until_expiration()
        if days < 0:
            return CertificateState.EXPIRED
        if days <= self.renewal_threshold_days:
            return CertificateState.EXPIRING_SOON
        return CertificateState.VALID

    def describe(self) -> Optional[CertificateRecord]:
        """
        Read back subject, SANs and validity window.

        Returns:
            CertificateRecord, or None if the certificate cannot be read
        """
        try:
            cert = self._load()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot describe certificate: {e}")
            return None

        paths = self.store.paths()
        return CertificateRecord(
            key_path=paths.key,
            cert_path=paths.cert,
            subject_cn=_common_name(cert),
            sans=_subject_alt_names(cert),
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
        )


def _common_name(cert: x509.Certificate) -> Optional[str]:
    attributes = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    return str(attributes[0].value)


def _subject_alt_names(cert: x509.Certificate) -> list[SubjectAltName]:
    try:
        extension = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []

    sans = []
    for name in extension.value:
        if isinstance(name, x509.DNSName):
            sans.append(SubjectAltName.dns(name.value))
        elif isinstance(name, x509.IPAddress):
            sans.append(SubjectAltName.ip(str(name.value)))
    return sans
