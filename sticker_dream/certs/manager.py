"""Certificate lifecycle management."""

import logging
from typing import Optional

from ..audit import AuditLogger
from ..config import TLSConfig
from ..errors import CertificateError, GenerationFailed
from ..models.certificates import CertificateState, CertPaths, build_subject_alt_names
from ..network.resolver import NetworkIdentityResolver
from .expiration import ExpirationPolicy
from .generator import KeyMaterialGenerator
from .store import CertificateStore


logger = logging.getLogger(__name__)


class CertificateLifecycleManager:
    """
    Keeps a usable self-signed certificate on disk.

    Responsibilities:
    - Reuse the stored certificate while it has more than the renewal
      threshold left
    - Regenerate when missing, expiring soon, expired or unreadable
    - Bind the certificate to the currently discovered LAN address

    Runs once at startup; there is no background renewal. Concurrent use of
    one certificate directory from several processes is not supported.
    """

    def __init__(
        self,
        config: Optional[TLSConfig] = None,
        store: Optional[CertificateStore] = None,
        policy: Optional[ExpirationPolicy] = None,
        generator: Optional[KeyMaterialGenerator] = None,
        resolver: Optional[NetworkIdentityResolver] = None,
        audit: Optional[AuditLogger] = None
    ):
        """
        Initialize certificate lifecycle manager.

        Args:
            config: Paths, validity window and OpenSSL settings
            store: Certificate store (built from config if omitted)
            policy: Expiration policy (built from config if omitted)
            generator: Key material generator (built from config if omitted)
            resolver: Network identity resolver
            audit: Audit logger for lifecycle events
        """
        self.config = config or TLSConfig()
        self.store = store or CertificateStore(self.config)
        self.policy = policy or ExpirationPolicy(
            self.store,
            renewal_threshold_days=self.config.renewal_threshold_days
        )
        self.generator = generator or KeyMaterialGenerator(
            openssl_bin=self.config.openssl_bin,
            validity_days=self.config.validity_days,
            timeout=self.config.generation_timeout
        )
        self.resolver = resolver or NetworkIdentityResolver()
        self.audit = audit or AuditLogger(self.config.hostname, self.config.audit_log)

    def paths(self) -> CertPaths:
        return self.store.paths()

    def ensure(self) -> CertPaths:
        """
        Make sure a valid certificate is in place.

        Returns:
            Key and certificate paths

        Raises:
            CertificateError: Generation was needed and failed
        """
        state = self.policy.evaluate()

        if state == CertificateState.VALID:
            days = self.policy.days_until_expiration()
            logger.info(f"Using existing certificate ({days} days remaining)")
            self.audit.log_certificate_reused(str(self.paths().cert), days)
            return self.paths()

        if state == CertificateState.MISSING:
            logger.info("No certificate found, generating a new one")
        elif state == CertificateState.EXPIRING_SOON:
            logger.info(
                f"Certificate expires within {self.config.renewal_threshold_days} days, regenerating"
            )
        else:
            logger.warning("Certificate is expired or unreadable, regenerating")

        return self._generate(state)

    def regenerate(self) -> CertPaths:
        """Force a new certificate regardless of the current state."""
        state = self.policy.evaluate()
        logger.info(f"Forcing certificate regeneration (current state: {state.value})")
        return self._generate(state)

    def _generate(self, previous_state: CertificateState) -> CertPaths:
        """Generate and persist a new key pair."""
        hostname = self.config.hostname
        cert_path = str(self.paths().cert)

        identity = self.resolver.resolve()
        sans = build_subject_alt_names(hostname, identity.address)

        try:
            result = self.generator.generate(hostname, sans)
        except CertificateError as e:
            logger.error(f"Failed to generate certificates: {e}")
            self.audit.log_generation_failed(cert_path, str(e))
            raise

        try:
            paths = self.store.persist(result.key_pem, result.cert_pem)
        except OSError as e:
            logger.error(f"Failed to write certificates: {e}")
            self.audit.log_generation_failed(cert_path, str(e))
            raise GenerationFailed(f"Could not write key pair to {self.store.cert_dir}: {e}") from e

        record = self.policy.describe()
        not_after = record.not_after if record else None

        if previous_state == CertificateState.MISSING:
            self.audit.log_certificate_issued(cert_path, hostname, [str(s) for s in sans], not_after)
        else:
            self.audit.log_certificate_renewed(cert_path, previous_state.value, not_after)

        logger.info(f"Generated certificates in {self.store.cert_dir}")
        logger.info(f"Valid for: localhost, {identity.address}, {hostname}")
        if identity.used_loopback_fallback:
            logger.warning("Certificate only covers this machine; remote devices will not trust it")

        return paths

    def get_certificate_status(self) -> dict:
        """Get certificate status information."""
        state = self.policy.evaluate()
        if state == CertificateState.MISSING:
            return {
                "has_certificate": False,
                "state": state.value,
                "error": "No certificate"
            }

        days = self.policy.days_until_expiration()
        record = self.policy.describe()

        status = {
            "has_certificate": True,
            "state": state.value,
            "days_remaining": days,
            "should_renew": self.policy.needs_renewal(),
            "renewal_threshold_days": self.config.renewal_threshold_days,
            "key_path": str(self.paths().key),
            "cert_path": str(self.paths().cert),
        }

        if record:
            status.update({
                "subject": record.subject_cn,
                "sans": [str(san) for san in record.sans],
                "valid_from": record.not_before.isoformat(),
                "valid_to": record.not_after.isoformat(),
            })

        return status
