"""Shared fixtures for certificate lifecycle tests."""

import pytest

from sticker_dream.audit import AuditLogger
from sticker_dream.certs import CertificateLifecycleManager, CertificateStore
from sticker_dream.config import TLSConfig
from sticker_dream.network import NetworkIdentityResolver
from sticker_dream.tests.helpers import LAN_ADDRESS, RecordingGenerator, ipv4, ipv6, make_key_pair, utcnow


@pytest.fixture
def config(tmp_path):
    return TLSConfig(base_dir=tmp_path)


@pytest.fixture
def store(config):
    return CertificateStore(config)


@pytest.fixture
def resolver():
    return NetworkIdentityResolver(interface_source=lambda: {
        "lo": [ipv4("127.0.0.1")],
        "en0": [ipv6("fe80::1"), ipv4(LAN_ADDRESS)],
    })


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def manager(config, store, resolver, generator):
    return CertificateLifecycleManager(
        config,
        store=store,
        generator=generator,
        resolver=resolver,
        audit=AuditLogger(config.hostname, config.base_dir / "audit.log"),
    )


@pytest.fixture
def write_certificate(store):
    """Write a key pair whose certificate expires after the given delta."""
    def _write(expires_in, **kwargs):
        key_pem, cert_pem = make_key_pair(utcnow() + expires_in, **kwargs)
        store.persist(key_pem, cert_pem)
        return cert_pem
    return _write
