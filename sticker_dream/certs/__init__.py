"""Self-signed certificate lifecycle."""

from .store import CertificateStore
from .expiration import ExpirationPolicy
from .generator import GenerationResult, KeyMaterialGenerator
from .manager import CertificateLifecycleManager

__all__ = [
    "CertificateStore",
    "ExpirationPolicy",
    "GenerationResult",
    "KeyMaterialGenerator",
    "CertificateLifecycleManager",
]
