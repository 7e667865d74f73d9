"""Certificate and interface builders shared by the tests."""

import ipaddress
import socket
from collections import namedtuple
from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from sticker_dream.certs import GenerationResult
from sticker_dream.models import SanType


# Shape of psutil.net_if_addrs() entries
Addr = namedtuple("Addr", ["family", "address", "netmask", "broadcast", "ptp"])

LAN_ADDRESS = "192.168.1.50"


def ipv4(address):
    return Addr(socket.AF_INET, address, "255.255.255.0", None, None)


def ipv6(address):
    return Addr(socket.AF_INET6, address, None, None, None)


def utcnow():
    return datetime.now(timezone.utc)


def make_key_pair(not_after, cn="sticker.local", sans=None, not_before=None):
    """Mint a self-signed certificate with an arbitrary validity window."""
    key = ec.generate_private_key(ec.SECP256R1())
    if not_before is None:
        not_before = not_after - timedelta(days=365)

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, cn)])
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
    )

    if sans:
        general_names = []
        for san in sans:
            if san.kind == SanType.DNS:
                general_names.append(x509.DNSName(san.value))
            else:
                general_names.append(x509.IPAddress(ipaddress.ip_address(san.value)))
        builder = builder.add_extension(x509.SubjectAlternativeName(general_names), critical=False)

    cert = builder.sign(key, hashes.SHA256())

    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return key_pem, cert.public_bytes(serialization.Encoding.PEM)


def key_matches_certificate(key_pem, cert_pem):
    """Check that a private key belongs to a certificate."""
    key = serialization.load_pem_private_key(key_pem, password=None)
    cert = x509.load_pem_x509_certificate(cert_pem)
    return key.public_key().public_numbers() == cert.public_key().public_numbers()


class RecordingGenerator:
    """Stands in for OpenSSL; records each generation request."""

    def __init__(self, validity_days=365, error=None):
        self.validity_days = validity_days
        self.error = error
        self.calls = []

    def generate(self, subject_cn, sans):
        self.calls.append((subject_cn, list(sans)))
        if self.error:
            raise self.error
        key_pem, cert_pem = make_key_pair(
            utcnow() + timedelta(days=self.validity_days),
            cn=subject_cn,
            sans=sans,
            not_before=utcnow(),
        )
        return GenerationResult(key_pem=key_pem, cert_pem=cert_pem)
