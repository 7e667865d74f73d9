"""HTTPS service exposing the trust bootstrap routes."""

import logging
from enum import Enum
from typing import Optional

from flask import Flask, Response, jsonify, request

from ..certs.manager import CertificateLifecycleManager
from ..errors import CertificateNotFound
from ..models.certificates import CertPaths
from ..trust.bootstrap import CERT_DOWNLOAD_PATH, TrustBootstrapSurface

logger = logging.getLogger(__name__)

BANNER_WIDTH = 50


class HealthStatus(str, Enum):
    """Service health derived from the certificate state."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


_HEALTH_BY_STATE = {
    "valid": HealthStatus.HEALTHY,
    "expiring_soon": HealthStatus.DEGRADED,
}


class TrustBootstrapService:
    """
    Flask front end for certificate download and device discovery.

    Routes:
    - GET /certs/cert.pem: certificate for device installation
    - GET /api/qr: network URL and QR image
    - GET /health: certificate health
    """

    def __init__(
        self,
        manager: CertificateLifecycleManager,
        surface: TrustBootstrapSurface
    ):
        """
        Initialize service.

        Args:
            manager: Certificate lifecycle manager (status and paths)
            surface: Trust bootstrap operations
        """
        self.manager = manager
        self.surface = surface
        self.app = Flask(__name__)
        self._setup_routes()

    def _setup_routes(self):
        """Set up Flask routes."""

        @self.app.route(CERT_DOWNLOAD_PATH, methods=['GET'])
        def download_certificate():
            """Serve the certificate for iOS/Android profile installation."""
            try:
                download = self.surface.certificate_download(client=request.remote_addr)
            except CertificateNotFound as e:
                logger.error(f"Certificate download failed: {e}")
                return jsonify({"error": "Certificate not found"}), 404

            return Response(
                download.content,
                content_type=download.content_type,
                headers={"Content-Disposition": download.content_disposition}
            )

        @self.app.route('/api/qr', methods=['GET'])
        def qr():
            """Network URL and QR code for mobile access."""
            return jsonify(self.surface.qr_payload())

        @self.app.route('/health', methods=['GET'])
        def health():
            """Health check endpoint."""
            certificate = self.manager.get_certificate_status()
            status = _HEALTH_BY_STATE.get(certificate["state"], HealthStatus.UNHEALTHY)
            code = 503 if status == HealthStatus.UNHEALTHY else 200
            return jsonify({
                "status": status.value,
                "certificate": certificate,
            }), code

    def startup_banner(self) -> str:
        """Connection info printed when the server starts."""
        urls = self.surface.server_urls()
        rule = '═' * BANNER_WIDTH

        lines = [
            '',
            rule,
            '  Sticker Dream',
            rule,
            '',
            f'  Local:   {urls.local}',
            f'  Network: {urls.network}',
            '',
            '  Scan this QR code with your phone/tablet:',
            '',
            self.surface.qr_renderer.to_terminal(urls.network),
            rule,
            '  First time on iOS? Visit:',
            f'  {urls.network}{CERT_DOWNLOAD_PATH}',
            '  to download and trust the certificate.',
            rule,
            '',
        ]
        return '\n'.join(lines)

    def run(self, cert_paths: CertPaths, host: str = '0.0.0.0', port: Optional[int] = None, **kwargs):
        """
        Run the HTTPS service.

        Args:
            cert_paths: Key and certificate from the lifecycle manager
            host: Host to bind to
            port: Port to bind to (defaults to the surface port)
            **kwargs: Additional arguments for Flask app.run()
        """
        port = port or self.surface.port
        logger.info(f"Starting HTTPS service on {host}:{port}")
        self.app.run(
            host=host,
            port=port,
            ssl_context=(str(cert_paths.cert), str(cert_paths.key)),
            **kwargs
        )


def create_service(
    manager: CertificateLifecycleManager,
    qr_renderer=None,
    port: Optional[int] = None
) -> TrustBootstrapService:
    """
    Wire the trust bootstrap surface and Flask service together.

    Args:
        manager: Certificate lifecycle manager
        qr_renderer: QR capability chosen at startup
        port: Advertised port (defaults to the manager config)

    Returns:
        TrustBootstrapService
    """
    config = manager.config
    surface = TrustBootstrapSurface(
        store=manager.store,
        resolver=manager.resolver,
        port=port or config.port,
        qr_renderer=qr_renderer,
        download_filename=config.download_filename,
        audit=manager.audit
    )
    return TrustBootstrapService(manager, surface)
