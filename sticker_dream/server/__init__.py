"""HTTPS service for Sticker Dream."""

from .app import HealthStatus, TrustBootstrapService, create_service

__all__ = ["HealthStatus", "TrustBootstrapService", "create_service"]
