"""On-disk storage for the TLS key pair."""

import logging
import os
from pathlib import Path

from ..config import TLSConfig
from ..errors import CertificateNotFound
from ..models.certificates import CertPaths


logger = logging.getLogger(__name__)

KEY_FILE_MODE = 0o600


class CertificateStore:
    """
    Owns the key and certificate files.

    Only the lifecycle manager writes here. There is no locking; a single
    writer process per certificate directory is assumed.
    """

    def __init__(self, config: TLSConfig):
        self.config = config

    @property
    def cert_dir(self) -> Path:
        return self.config.cert_dir

    def paths(self) -> CertPaths:
        """Get key and certificate paths."""
        return self.config.paths

    def exists(self) -> bool:
        """
        Check that both files are present and readable.

        Each path is checked on its own so a half-written pair counts as
        missing.
        """
        paths = self.paths()
        return _readable(paths.key) and _readable(paths.cert)

    def persist(self, key_pem: bytes, cert_pem: bytes) -> CertPaths:
        """
        Write a new key pair.

        Both files are written to temporary names first and then moved over
        the old pair, so a failed write never leaves a new key next to an
        old certificate. The key is owner-only from the moment it is created.

        Args:
            key_pem: Private key (PEM)
            cert_pem: Certificate (PEM)

        Returns:
            Paths of the written files

        Raises:
            OSError: The pair could not be written; an old pair is either
                left untouched or removed entirely
        """
        paths = self.paths()
        self.cert_dir.mkdir(parents=True, exist_ok=True)

        key_tmp = _temporary(paths.key)
        cert_tmp = _temporary(paths.cert)

        try:
            fd = os.open(key_tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_MODE)
            with os.fdopen(fd, 'wb') as f:
                # O_CREAT ignores the mode when a stale temp file already exists
                os.chmod(key_tmp, KEY_FILE_MODE)
                f.write(key_pem)

            with open(cert_tmp, 'wb') as f:
                f.write(cert_pem)
        except OSError as e:
            logger.error(f"Failed to write key pair to {self.cert_dir}: {e}")
            _discard(key_tmp, cert_tmp)
            raise

        try:
            os.replace(key_tmp, paths.key)
            os.replace(cert_tmp, paths.cert)
        except OSError as e:
            # A half-replaced pair must read as missing, not as valid
            logger.error(f"Failed to replace key pair in {self.cert_dir}: {e}")
            _discard(key_tmp, cert_tmp, paths.key, paths.cert)
            raise

        logger.debug(f"Wrote key pair to {self.cert_dir}")
        return paths

    def read_certificate(self) -> bytes:
        """
        Read the certificate bytes.

        Raises:
            CertificateNotFound: File is missing or unreadable
        """
        cert_path = self.paths().cert
        try:
            with open(cert_path, 'rb') as f:
                return f.read()
        except OSError as e:
            logger.debug(f"Cannot read certificate {cert_path}: {e}")
            raise CertificateNotFound(cert_path) from e


def _readable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def _temporary(path: Path) -> Path:
    return path.with_name(path.name + '.tmp')


def _discard(*paths: Path) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
