"""Self-signed key pair generation through the OpenSSL command line."""

import logging
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import GenerationFailed, ToolUnavailable
from ..models.certificates import SubjectAltName, format_subject_alt_names


logger = logging.getLogger(__name__)

KEY_ALGORITHM = "rsa:2048"
STDERR_EXCERPT_CHARS = 500


@dataclass
class GenerationResult:
    """PEM payloads produced by one generation run."""
    key_pem: bytes
    cert_pem: bytes


def _excerpt(stderr: Optional[bytes]) -> str:
    if not stderr:
        return ""
    text = stderr.decode("utf-8", errors="replace").strip()
    return text[-STDERR_EXCERPT_CHARS:]


class KeyMaterialGenerator:
    """
    Creates a self-signed RSA certificate with `openssl req -x509`.

    Arguments are always passed as a list so the subject and SAN values
    never reach a shell.
    """

    def __init__(
        self,
        openssl_bin: str = "openssl",
        validity_days: int = 365,
        timeout: Optional[float] = 60.0
    ):
        """
        Initialize generator.

        Args:
            openssl_bin: OpenSSL executable name or path
            validity_days: Certificate validity in days
            timeout: Seconds to wait for OpenSSL (None waits forever)
        """
        self.openssl_bin = openssl_bin
        self.validity_days = validity_days
        self.timeout = timeout

    def build_command(
        self,
        subject_cn: str,
        sans: Sequence[SubjectAltName],
        key_path: Path,
        cert_path: Path
    ) -> List[str]:
        """Build the OpenSSL argument list."""
        return [
            self.openssl_bin, "req", "-x509",
            "-newkey", KEY_ALGORITHM,
            "-keyout", str(key_path),
            "-out", str(cert_path),
            "-days", str(self.validity_days),
            "-nodes",
            "-subj", f"/CN={subject_cn}",
            "-addext", f"subjectAltName={format_subject_alt_names(list(sans))}",
        ]

    def generate(self, subject_cn: str, sans: Sequence[SubjectAltName]) -> GenerationResult:
        """
        Generate a new key and self-signed certificate.

        Args:
            subject_cn: Subject common name
            sans: Subject Alternative Names, in certificate order

        Returns:
            GenerationResult with both PEM payloads

        Raises:
            ToolUnavailable: OpenSSL is missing or not executable
            GenerationFailed: OpenSSL failed, timed out or wrote nothing usable
        """
        with tempfile.TemporaryDirectory(prefix="sticker-dream-certs-") as workdir:
            key_path = Path(workdir) / "key.pem"
            cert_path = Path(workdir) / "cert.pem"
            command = self.build_command(subject_cn, sans, key_path, cert_path)

            logger.debug(f"Running {self.openssl_bin} for CN={subject_cn}")

            try:
                subprocess.run(command, check=True, capture_output=True, timeout=self.timeout)
            except FileNotFoundError as e:
                raise ToolUnavailable(self.openssl_bin, "not found on PATH") from e
            except PermissionError as e:
                raise ToolUnavailable(self.openssl_bin, "not executable") from e
            except subprocess.TimeoutExpired as e:
                raise GenerationFailed(
                    f"{self.openssl_bin} did not finish within {self.timeout} seconds",
                    stderr=_excerpt(e.stderr)
                ) from e
            except subprocess.CalledProcessError as e:
                raise GenerationFailed(
                    f"{self.openssl_bin} failed to generate certificate",
                    returncode=e.returncode,
                    stderr=_excerpt(e.stderr)
                ) from e

            try:
                key_pem = key_path.read_bytes()
                cert_pem = cert_path.read_bytes()
            except OSError as e:
                raise GenerationFailed(f"Generated key pair is unreadable: {e}") from e

        if not key_pem.strip() or not cert_pem.strip():
            raise GenerationFailed("OpenSSL produced an empty key or certificate")

        return GenerationResult(key_pem=key_pem, cert_pem=cert_pem)
