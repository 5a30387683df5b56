import dataclasses
import datetime
import os
import typing

from cryptography import x509
from cryptography.x509.oid import NameOID
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding
import pytest

from certadmin import certificates
from certadmin.authority import LocalCertificateAuthority
from certadmin.exceptions import CertificateVerificationError


@dataclasses.dataclass
class FakeCertish:
    subject_alt_names: typing.Optional[typing.List[str]] = None


class FakeCA:
    """Records every call made by an Interface."""

    def __init__(
        self,
        signed: typing.Sequence[str] = (),
        waiting: typing.Sequence[str] = (),
        verify_errors: typing.Optional[typing.Dict[str, str]] = None,
        alt_names: typing.Optional[typing.Dict[str, typing.List[str]]] = None,
        descriptions: typing.Optional[typing.Dict[str, str]] = None,
        fail_on: typing.Optional[typing.Dict[str, Exception]] = None
    ):
        self.signed = list(signed)
        self.waiting = list(waiting)
        self.verify_errors = verify_errors or {}
        self.alt_names = alt_names or {}
        self.descriptions = descriptions or {}
        self.fail_on = fail_on or {}
        self.calls: typing.List[typing.Tuple] = []

    def _record(self, *call):
        self.calls.append(call)
        host = call[1] if len(call) > 1 else None
        if host in self.fail_on:
            raise self.fail_on[host]

    def signed_hosts(self):
        self.calls.append(("signed_hosts",))
        return list(self.signed)

    def waiting_hosts(self):
        self.calls.append(("waiting_hosts",))
        return list(self.waiting)

    def verify(self, host):
        self._record("verify", host)
        if host in self.verify_errors:
            raise CertificateVerificationError(
                host=host, reason=self.verify_errors[host]
            )

    def generate(self, host, options):
        self._record("generate", host, options)

    def sign(self, host, allow_dns_alt_names=False):
        self._record("sign", host, allow_dns_alt_names)

    def revoke(self, host):
        self._record("revoke", host)

    def destroy(self, host):
        self._record("destroy", host)

    def describe(self, host):
        self._record("describe", host)
        return self.descriptions.get(host)

    def find_certificate(self, host):
        self.calls.append(("find_certificate", host))
        return FakeCertish(self.alt_names.get(host))

    def find_request(self, host):
        self.calls.append(("find_request", host))
        return FakeCertish(self.alt_names.get(host))

    def calls_to(self, name: str) -> typing.List[typing.Tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def fake_ca() -> typing.Callable[..., FakeCA]:
    return FakeCA


@pytest.fixture
def local_ca(tmp_path) -> LocalCertificateAuthority:
    return LocalCertificateAuthority(str(tmp_path / "ssl"))


@pytest.fixture
def submit_request(local_ca: LocalCertificateAuthority):
    """Write a certificate request as an agent would submit it."""
    def submit(
        host: str,
        alt_names: typing.Sequence[str] = (),
        common_name: typing.Optional[str] = None
    ) -> x509.CertificateSigningRequest:
        private_key = rsa.generate_private_key(65537, 2048)
        builder = x509.CertificateSigningRequestBuilder().subject_name(
            x509.Name([
                x509.NameAttribute(NameOID.COMMON_NAME, common_name or host)
            ])
        )
        if alt_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName(
                    [x509.DNSName(name) for name in [host, *alt_names]]
                ),
                critical=False
            )
        csr = builder.sign(private_key, hashes.SHA256())
        os.makedirs(local_ca.requests_dir, exist_ok=True)
        with open(
            os.path.join(local_ca.requests_dir, f"{host}.pem"), mode="wb"
        ) as csr_fd:
            csr_fd.write(csr.public_bytes(Encoding.PEM))
        return csr
    return submit


@pytest.fixture
def expired_cert_for(local_ca: LocalCertificateAuthority):
    """Replace a signed certificate with an expired one from the same CA."""
    def replace(host: str) -> x509.Certificate:
        local_ca.setup()
        ca_cert = certificates.load_certificate(local_ca.ca_cert_path)
        ca_key = certificates.load_private_key(local_ca.ca_key_path)
        private_key = rsa.generate_private_key(65537, 2048)
        now = datetime.datetime.now(datetime.timezone.utc)
        cert = x509.CertificateBuilder(
            issuer_name=ca_cert.subject,
            subject_name=x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, host)]),
            public_key=private_key.public_key(),
            serial_number=x509.random_serial_number(),
            not_valid_before=now - datetime.timedelta(days=30),
            not_valid_after=now - datetime.timedelta(days=1),
        ).sign(private_key=ca_key, algorithm=hashes.SHA256())
        certificates.write_pem(
            os.path.join(local_ca.signed_dir, f"{host}.pem"),
            cert.public_bytes(Encoding.PEM)
        )
        return cert
    return replace
