"""QR code rendering capability for the trust bootstrap page and banner."""

import base64
import io
import logging
from typing import Optional


logger = logging.getLogger(__name__)


class QRRenderer:
    """Renders a URL as a scannable code."""

    available = False

    def to_data_url(self, text: str) -> Optional[str]:
        """PNG data URL for embedding in HTML, or None."""
        raise NotImplementedError

    def to_terminal(self, text: str) -> str:
        """Text rendering for the console."""
        raise NotImplementedError


class UnavailableQRRenderer(QRRenderer):
    """Used when no QR library is installed; falls back to the plain URL."""

    def to_data_url(self, text: str) -> Optional[str]:
        return None

    def to_terminal(self, text: str) -> str:
        return f"[QR code unavailable - install 'qrcode' package]\nURL: {text}"


class QRCodeRenderer(QRRenderer):
    """Renderer backed by the `qrcode` package."""

    available = True

    def __init__(self, qrcode_module, box_size: int = 8, border: int = 2):
        """
        Initialize renderer.

        Args:
            qrcode_module: The imported `qrcode` package
            box_size: Pixels per module in PNG output
            border: Quiet zone width in modules
        """
        self._qrcode = qrcode_module
        self.box_size = box_size
        self.border = border

    def _build(self, text: str, border: int):
        qr = self._qrcode.QRCode(box_size=self.box_size, border=border)
        qr.add_data(text)
        qr.make(fit=True)
        return qr

    def to_data_url(self, text: str) -> Optional[str]:
        image = self._build(text, self.border).make_image()
        buffer = io.BytesIO()
        image.save(buffer)
        encoded = base64.b64encode(buffer.getvalue()).decode('ascii')
        return f"data:image/png;base64,{encoded}"

    def to_terminal(self, text: str) -> str:
        out = io.StringIO()
        self._build(text, 1).print_ascii(out=out, invert=True)
        return out.getvalue()


def select_qr_renderer() -> QRRenderer:
    """
    Pick the renderer once at startup.

    Returns:
        QRCodeRenderer if `qrcode` is importable, else UnavailableQRRenderer
    """
    try:
        import qrcode
    except ImportError:
        logger.info("qrcode package not installed, QR codes disabled")
        return UnavailableQRRenderer()
    return QRCodeRenderer(qrcode)
