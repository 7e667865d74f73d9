"""Runtime configuration for certificate provisioning and the HTTPS service."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .models.certificates import CertPaths


DEFAULT_HOSTNAME = "sticker.local"

# Environment overrides, field name -> variable
ENV_OVERRIDES = {
    "base_dir": "STICKER_DREAM_BASE_DIR",
    "hostname": "STICKER_DREAM_HOSTNAME",
    "validity_days": "STICKER_DREAM_CERT_VALIDITY_DAYS",
    "renewal_threshold_days": "STICKER_DREAM_CERT_RENEWAL_DAYS",
    "openssl_bin": "STICKER_DREAM_OPENSSL",
    "generation_timeout": "STICKER_DREAM_OPENSSL_TIMEOUT",
    "port": "PORT",
    "audit_log": "STICKER_DREAM_AUDIT_LOG",
}


class TLSConfig(BaseModel):
    """
    Certificate lifecycle settings.

    Passed into the lifecycle manager at construction so tests can point it
    at a temporary directory and use short thresholds.
    """
    base_dir: Path = Field(default_factory=Path.cwd, description="Directory holding the certs folder")
    cert_dir_name: str = Field(default="certs", description="Certificate folder name")
    key_filename: str = Field(default="key.pem", description="Private key file name")
    cert_filename: str = Field(default="cert.pem", description="Certificate file name")
    hostname: str = Field(default=DEFAULT_HOSTNAME, description="Subject common name and first DNS SAN")
    validity_days: int = Field(default=365, gt=0, description="Total certificate validity")
    renewal_threshold_days: int = Field(default=30, ge=0, description="Renew when this many days or fewer remain")
    openssl_bin: str = Field(default="openssl", description="OpenSSL executable")
    generation_timeout: Optional[float] = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for OpenSSL (None waits forever)"
    )
    port: int = Field(default=3000, gt=0, lt=65536, description="HTTPS listen port")
    download_filename: str = Field(
        default="sticker-dream.pem",
        description="Attachment name for certificate downloads"
    )
    audit_log: Optional[Path] = Field(default=None, description="Audit trail file (JSON lines)")

    @field_validator("hostname")
    @classmethod
    def _check_hostname(cls, value: str) -> str:
        # Must stay a plain DNS label sequence: it is spliced into the
        # OpenSSL subject (/CN=...) and SAN list (comma separated)
        labels = value.split(".")
        for label in labels:
            if not label or len(label) > 63:
                raise ValueError(f"Invalid hostname: {value!r}")
            if label.startswith("-") or label.endswith("-"):
                raise ValueError(f"Invalid hostname: {value!r}")
            if not all(c.isascii() and (c.isalnum() or c == "-") for c in label):
                raise ValueError(f"Invalid hostname: {value!r}")
        return value.lower()

    @model_validator(mode="after")
    def _check_window(self) -> "TLSConfig":
        if self.renewal_threshold_days >= self.validity_days:
            raise ValueError(
                "renewal_threshold_days must be smaller than validity_days "
                f"({self.renewal_threshold_days} >= {self.validity_days})"
            )
        return self

    @property
    def cert_dir(self) -> Path:
        """Directory containing the key and certificate."""
        return self.base_dir / self.cert_dir_name

    @property
    def paths(self) -> CertPaths:
        """Key and certificate locations."""
        return CertPaths(
            key=self.cert_dir / self.key_filename,
            cert=self.cert_dir / self.cert_filename,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "TLSConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Explicit values that win over the environment

        Returns:
            Validated configuration
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field_name, variable in ENV_OVERRIDES.items():
            raw = environ.get(variable)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
