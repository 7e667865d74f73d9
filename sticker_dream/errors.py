"""Error types raised by certificate provisioning."""

from typing import Optional


class CertificateError(Exception):
    """Base class for certificate lifecycle failures."""


class ToolUnavailable(CertificateError):
    """The external certificate tool is missing or cannot be executed."""

    def __init__(self, tool: str, detail: Optional[str] = None):
        self.tool = tool
        self.detail = detail
        message = f"Certificate tool '{tool}' is not available"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class GenerationFailed(CertificateError):
    """
    The certificate tool ran but did not produce a usable key pair.

    Carries the exit status and an excerpt of stderr so callers can report
    what went wrong without re-running the tool.
    """

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        if returncode is not None:
            message = f"{message} (exit status {returncode})"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)


class CertificateNotFound(CertificateError):
    """The certificate file is absent or unreadable when requested."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Certificate not found: {path}")
