"""Trust bootstrap for client devices."""

from .bootstrap import CertificateDownload, TrustBootstrapSurface
from .qr import QRCodeRenderer, QRRenderer, UnavailableQRRenderer, select_qr_renderer

__all__ = [
    "CertificateDownload",
    "TrustBootstrapSurface",
    "QRCodeRenderer",
    "QRRenderer",
    "UnavailableQRRenderer",
    "select_qr_renderer",
]
