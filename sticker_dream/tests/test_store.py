"""Tests for on-disk certificate storage."""

import builtins
import os
import stat

import pytest

from sticker_dream.certs import store as store_module
from sticker_dream.errors import CertificateNotFound


@pytest.fixture
def disk_full_on_cert(monkeypatch):
    """Fail the certificate write the way a full disk would."""
    def fake_open(file, mode="r", *args, **kwargs):
        if "w" in mode and os.fspath(file).endswith("cert.pem.tmp"):
            raise OSError(28, "No space left on device")
        return builtins.open(file, mode, *args, **kwargs)

    monkeypatch.setattr(store_module, "open", fake_open, raising=False)


def test_paths_are_deterministic(store, tmp_path):
    """Test key and cert locations under certs/."""
    paths = store.paths()

    assert paths.key == tmp_path / "certs" / "key.pem"
    assert paths.cert == tmp_path / "certs" / "cert.pem"
    assert store.paths() == paths


def test_exists_requires_both_files(store):
    """Test that a partial pair counts as missing."""
    assert not store.exists()

    store.cert_dir.mkdir(parents=True)
    store.paths().key.write_bytes(b"key")
    assert not store.exists()

    store.paths().cert.write_bytes(b"cert")
    assert store.exists()

    store.paths().key.unlink()
    assert not store.exists()


def test_persist_creates_directory_and_restricts_key(store):
    """Test that persist writes both files and makes the key owner-only."""
    paths = store.persist(b"KEY", b"CERT")

    assert paths.key.read_bytes() == b"KEY"
    assert paths.cert.read_bytes() == b"CERT"
    assert stat.S_IMODE(paths.key.stat().st_mode) == 0o600


def test_persist_tightens_existing_key_permissions(store):
    """Test that regeneration fixes a key left group/world readable."""
    store.cert_dir.mkdir(parents=True)
    store.paths().key.write_bytes(b"OLD")
    store.paths().key.chmod(0o644)

    store.persist(b"NEW", b"CERT")

    mode = stat.S_IMODE(store.paths().key.stat().st_mode)
    assert mode & (stat.S_IRWXG | stat.S_IRWXO) == 0


def test_read_certificate(store):
    """Test reading cert bytes and the not-found error."""
    with pytest.raises(CertificateNotFound):
        store.read_certificate()

    store.persist(b"KEY", b"CERT")
    assert store.read_certificate() == b"CERT"


def test_persist_failure_never_exposes_key(store, disk_full_on_cert):
    """Test a failed certificate write leaves no group/world readable key behind."""
    with pytest.raises(OSError):
        store.persist(b"KEY", b"CERT")

    for path in store.cert_dir.iterdir():
        assert stat.S_IMODE(path.stat().st_mode) & (stat.S_IRWXG | stat.S_IRWXO) == 0
    assert list(store.cert_dir.glob("*.tmp")) == []
    assert not store.exists()


def test_persist_failure_keeps_old_pair(store, disk_full_on_cert):
    """Test the old key and certificate survive a failed write together."""
    store.cert_dir.mkdir(parents=True)
    store.paths().key.write_bytes(b"OLD KEY")
    store.paths().cert.write_bytes(b"OLD CERT")

    with pytest.raises(OSError):
        store.persist(b"NEW KEY", b"NEW CERT")

    assert store.paths().key.read_bytes() == b"OLD KEY"
    assert store.paths().cert.read_bytes() == b"OLD CERT"
    assert list(store.cert_dir.glob("*.tmp")) == []


def test_failed_replace_leaves_pair_missing(store, monkeypatch):
    """Test a half-replaced pair is removed instead of mixing old and new."""
    store.persist(b"OLD KEY", b"OLD CERT")
    real_replace = os.replace

    def replace(src, dst):
        if os.fspath(dst).endswith("cert.pem"):
            raise OSError(5, "Input/output error")
        real_replace(src, dst)

    monkeypatch.setattr(store_module.os, "replace", replace)

    with pytest.raises(OSError):
        store.persist(b"NEW KEY", b"NEW CERT")

    assert not store.exists()
    assert list(store.cert_dir.iterdir()) == []


def test_persist_tightens_stale_temporary_key(store):
    """Test a leftover temp key with loose permissions is not reused as is."""
    store.cert_dir.mkdir(parents=True)
    stale = store.cert_dir / "key.pem.tmp"
    stale.write_bytes(b"STALE")
    stale.chmod(0o644)

    paths = store.persist(b"KEY", b"CERT")

    assert paths.key.read_bytes() == b"KEY"
    assert stat.S_IMODE(paths.key.stat().st_mode) == 0o600
    assert not stale.exists()
