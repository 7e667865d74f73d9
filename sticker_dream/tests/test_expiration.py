"""Tests for certificate expiration checks."""

from datetime import datetime, timedelta, timezone

import pytest

from sticker_dream.certs import ExpirationPolicy
from sticker_dream.models import CertificateState, build_subject_alt_names
from sticker_dream.tests.helpers import make_key_pair

# Whole seconds; X.509 times carry no fractions
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def policy_with_cert(store, expires_in, threshold=30):
    key_pem, cert_pem = make_key_pair(NOW + expires_in)
    store.persist(key_pem, cert_pem)
    return ExpirationPolicy(store, renewal_threshold_days=threshold, clock=lambda: NOW)


def test_expired_certificate_needs_renewal(store):
    """Test that a certificate past not_after is renewed."""
    policy = policy_with_cert(store, timedelta(days=-1))

    assert policy.days_until_expiration() == -1
    assert policy.needs_renewal()
    assert policy.evaluate() == CertificateState.EXPIRED


def test_long_lived_certificate_is_kept(store):
    """Test that more than the threshold remaining means no renewal."""
    policy = policy_with_cert(store, timedelta(days=400))

    assert policy.days_until_expiration() == 400
    assert not policy.needs_renewal()
    assert policy.evaluate() == CertificateState.VALID


def test_threshold_boundary_is_inclusive(store):
    """Test that exactly 30 days remaining triggers renewal."""
    policy = policy_with_cert(store, timedelta(days=30))

    assert policy.days_until_expiration() == 30
    assert policy.needs_renewal()
    assert policy.evaluate() == CertificateState.EXPIRING_SOON


def test_one_day_past_threshold_is_kept(store):
    """Test that 31 whole days remaining does not renew."""
    policy = policy_with_cert(store, timedelta(days=31))

    assert not policy.needs_renewal()
    assert policy.evaluate() == CertificateState.VALID


def test_days_are_floored(store):
    """Test partial days round down."""
    policy = policy_with_cert(store, timedelta(days=45, hours=23))
    assert policy.days_until_expiration() == 45

    policy = policy_with_cert(store, timedelta(hours=-1))
    assert policy.days_until_expiration() == -1


def test_expiring_today_is_expiring_soon(store):
    """Test that less than a day left is still expiring, not expired."""
    policy = policy_with_cert(store, timedelta(hours=5))

    assert policy.days_until_expiration() == 0
    assert policy.evaluate() == CertificateState.EXPIRING_SOON


def test_custom_threshold(store):
    """Test an injected short threshold."""
    policy = policy_with_cert(store, timedelta(days=10), threshold=5)
    assert not policy.needs_renewal()


@pytest.mark.parametrize("content", [b"", b"not a certificate", b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n"])
def test_unparsable_certificate_is_treated_as_expired(store, content):
    """Test the -1 sentinel for garbage certificate files."""
    store.persist(b"KEY", content)
    policy = ExpirationPolicy(store, clock=lambda: NOW)

    assert policy.days_until_expiration() == -1
    assert policy.needs_renewal()
    assert policy.evaluate() == CertificateState.EXPIRED
    assert policy.describe() is None


def test_missing_certificate(store):
    """Test the sentinel and MISSING state without files."""
    policy = ExpirationPolicy(store, clock=lambda: NOW)

    assert policy.days_until_expiration() == -1
    assert policy.needs_renewal()
    assert policy.evaluate() == CertificateState.MISSING


def test_missing_key_is_missing(store):
    """Test that a certificate without its key counts as missing."""
    policy = policy_with_cert(store, timedelta(days=200))
    store.paths().key.unlink()

    assert policy.evaluate() == CertificateState.MISSING


def test_describe_reads_back_identity(store):
    """Test subject, SANs and validity window read from the PEM."""
    sans = build_subject_alt_names("sticker.local", "192.168.1.50")
    key_pem, cert_pem = make_key_pair(NOW + timedelta(days=365), sans=sans, not_before=NOW)
    store.persist(key_pem, cert_pem)

    record = ExpirationPolicy(store, clock=lambda: NOW).describe()

    assert record.subject_cn == "sticker.local"
    assert record.sans == sans
    assert record.not_before == NOW
    assert record.not_after == NOW + timedelta(days=365)
    assert record.covers("192.168.1.50")
    assert not record.covers("10.0.0.1")
