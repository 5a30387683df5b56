import dataclasses
import datetime
import logging
import os
import typing

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.hazmat.primitives.serialization import NoEncryption
from cryptography.hazmat.primitives.serialization import PrivateFormat
from cryptography.hazmat.primitives.serialization import load_pem_private_key
from cryptography.x509.oid import NameOID


logger = logging.getLogger(__name__)

PADDING_LENGTH = 12


def format_datetime(dt: datetime.datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def common_name(name: x509.Name) -> typing.Optional[str]:
    attributes = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attributes:
        return None
    return str(attributes[0].value)


def dns_alt_names(
    extensions: x509.Extensions
) -> typing.List[str]:
    try:
        san = extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return list(san.value.get_values_for_type(x509.DNSName))


@dataclasses.dataclass
class Certificate:
    name: str
    content: x509.Certificate

    @property
    def subject_alt_names(self) -> typing.List[str]:
        return dns_alt_names(self.content.extensions)

    @property
    def serial_number(self) -> int:
        return self.content.serial_number

    def fingerprint(self) -> str:
        return ":".join(
            f"{byte:02X}" for byte in self.content.fingerprint(hashes.SHA256())
        )

    def to_text(self) -> str:
        fields = {
            "Name": self.name,
            "Subject": self.content.subject.rfc4514_string(),
            "Issuer": self.content.issuer.rfc4514_string(),
            "Serial": f"{self.serial_number:X}",
            "Not Before": format_datetime(self.content.not_valid_before_utc),
            "Not After": format_datetime(self.content.not_valid_after_utc),
            "Alt Names": ", ".join(self.subject_alt_names) or "(none)",
            "Fingerprint": self.fingerprint(),
        }
        return "\n".join([
            " ".join([(" " * PADDING_LENGTH + field)[-PADDING_LENGTH:], ":", value])
            for field, value in fields.items()
        ])


@dataclasses.dataclass
class CertificateRequest:
    name: str
    content: x509.CertificateSigningRequest

    @property
    def subject_alt_names(self) -> typing.List[str]:
        return dns_alt_names(self.content.extensions)


def read_pem(path: str) -> typing.Optional[bytes]:
    if not os.path.isfile(path):
        return None
    with open(path, mode="rb") as pem_fd:
        return pem_fd.read()


def write_pem(path: str, data: bytes, private: bool = False) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, mode="wb") as pem_fd:
        pem_fd.write(data)
    if private:
        os.chmod(path, 0o600)
    logger.debug("Wrote %s", path)


def load_certificate(path: str) -> typing.Optional[x509.Certificate]:
    raw = read_pem(path)
    if raw is None:
        return None
    return x509.load_pem_x509_certificate(raw)


def load_request(path: str) -> typing.Optional[x509.CertificateSigningRequest]:
    raw = read_pem(path)
    if raw is None:
        return None
    return x509.load_pem_x509_csr(raw)


def load_crl(path: str) -> typing.Optional[x509.CertificateRevocationList]:
    raw = read_pem(path)
    if raw is None:
        return None
    if b'-----BEGIN X509 CRL-----' in raw:
        return x509.load_pem_x509_crl(raw)
    return x509.load_der_x509_crl(raw)


def load_private_key(path: str) -> typing.Optional[PrivateKeyTypes]:
    raw = read_pem(path)
    if raw is None:
        return None
    return load_pem_private_key(raw, None)


def private_key_pem(key: PrivateKeyTypes) -> bytes:
    return key.private_bytes(
        Encoding.PEM,
        PrivateFormat.PKCS8,
        NoEncryption()
    )
