"""Read-only operations that let a device install and trust the certificate."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..audit import AuditLogger
from ..certs.store import CertificateStore
from ..errors import CertificateNotFound
from ..models.network import ServerURLs
from ..network.resolver import NetworkIdentityResolver
from .qr import QRRenderer, UnavailableQRRenderer


logger = logging.getLogger(__name__)

PEM_CONTENT_TYPE = "application/x-pem-file"
CERT_DOWNLOAD_PATH = "/certs/cert.pem"


@dataclass
class CertificateDownload:
    """Certificate payload ready to be sent to a device."""
    content: bytes
    filename: str
    content_type: str = PEM_CONTENT_TYPE

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


class TrustBootstrapSurface:
    """
    Serves the certificate and the reachable URL to client devices.

    Never writes certificate files; the lifecycle manager owns them.
    """

    def __init__(
        self,
        store: CertificateStore,
        resolver: NetworkIdentityResolver,
        port: int,
        qr_renderer: Optional[QRRenderer] = None,
        download_filename: str = "sticker-dream.pem",
        audit: Optional[AuditLogger] = None
    ):
        """
        Initialize trust bootstrap surface.

        Args:
            store: Certificate store to read from
            resolver: Network identity resolver for URLs
            port: HTTPS port advertised in URLs
            qr_renderer: QR capability chosen at startup
            download_filename: Attachment name for downloads
            audit: Audit logger for download events (optional)
        """
        self.store = store
        self.resolver = resolver
        self.port = port
        self.qr_renderer = qr_renderer or UnavailableQRRenderer()
        self.download_filename = download_filename
        self.audit = audit

    def certificate_download(self, client: Optional[str] = None) -> CertificateDownload:
        """
        Load the certificate for download.

        Args:
            client: Requesting client address, for the audit trail

        Raises:
            CertificateNotFound: Certificate was removed after startup
        """
        cert_path = str(self.store.paths().cert)
        try:
            content = self.store.read_certificate()
        except CertificateNotFound:
            if self.audit:
                self.audit.log_certificate_download_failed(cert_path, client)
            raise

        if self.audit:
            self.audit.log_certificate_downloaded(cert_path, client)

        return CertificateDownload(content=content, filename=self.download_filename)

    def server_urls(self) -> ServerURLs:
        """Local and network URLs from a fresh address resolution."""
        return self.resolver.server_urls(self.port)

    def certificate_url(self) -> str:
        """Network URL a device can open to download the certificate."""
        return f"{self.server_urls().network}{CERT_DOWNLOAD_PATH}"

    def qr_payload(self) -> dict:
        """
        Build the QR endpoint payload.

        Returns:
            {"url": network URL, "localUrl": local URL, "qr": data URL or None}
        """
        urls = self.server_urls()
        return {
            "url": urls.network,
            "localUrl": urls.local,
            "qr": self.qr_renderer.to_data_url(urls.network),
        }
