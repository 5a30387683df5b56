"""
    A certificate authority kept in a single directory.

    Directory Structure:
        <ssldir>/
        ├── ca/
        │   ├── ca_key.pem          # CA private key
        │   ├── ca_crt.pem          # CA certificate
        │   ├── ca_crl.pem          # Certificate revocation list
        │   ├── signed/<host>.pem   # Signed host certificates
        │   └── requests/<host>.pem # Pending certificate requests
        └── private_keys/<host>.pem # Keys created by generate
"""
import datetime
import logging
import os
import typing

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from .exceptions import CertificateAuthorityError
from . import certificates
from . import verification


logger = logging.getLogger(__name__)

CA_NAME = "certadmin CA"
CA_VALIDITY = datetime.timedelta(days=365 * 10)
CERT_VALIDITY = datetime.timedelta(days=365 * 5)
CRL_VALIDITY = datetime.timedelta(days=365 * 5)
# Backdate issued certificates to tolerate clock skew between hosts.
BACKDATE = datetime.timedelta(days=1)
KEY_SIZE = 2048


@typing.runtime_checkable
class CertificateAuthorityProtocol(typing.Protocol):
    def signed_hosts(self) -> typing.List[str]: ...

    def waiting_hosts(self) -> typing.List[str]: ...

    def verify(self, host: str) -> None: ...

    def generate(self, host: str, options: typing.Dict[str, typing.Any]) -> None: ...

    def sign(self, host: str, allow_dns_alt_names: bool = False) -> None: ...

    def revoke(self, host: str) -> None: ...

    def destroy(self, host: str) -> None: ...

    def describe(self, host: str) -> typing.Optional[str]: ...

    def find_certificate(
        self, host: str
    ) -> typing.Optional[certificates.Certificate]: ...

    def find_request(
        self, host: str
    ) -> typing.Optional[certificates.CertificateRequest]: ...


class LocalCertificateAuthority:
    """Certificate authority backed by PEM files under ssldir."""

    def __init__(self, ssldir: str):
        self.ssldir = os.path.expanduser(ssldir)
        self.ca_dir = os.path.join(self.ssldir, "ca")
        self.ca_key_path = os.path.join(self.ca_dir, "ca_key.pem")
        self.ca_cert_path = os.path.join(self.ca_dir, "ca_crt.pem")
        self.crl_path = os.path.join(self.ca_dir, "ca_crl.pem")
        self.signed_dir = os.path.join(self.ca_dir, "signed")
        self.requests_dir = os.path.join(self.ca_dir, "requests")
        self.private_keys_dir = os.path.join(self.ssldir, "private_keys")

    def _path(self, directory: str, host: str) -> str:
        if (
            not host or
            host.startswith(".") or
            os.sep in host or
            (os.altsep and os.altsep in host)
        ):
            raise CertificateAuthorityError(f"Invalid host name {host!r}")
        return os.path.join(directory, f"{host}.pem")

    def _hosts_in(self, directory: str) -> typing.List[str]:
        if not os.path.isdir(directory):
            return []
        return sorted(
            filename[:-len(".pem")]
            for filename in os.listdir(directory)
            if filename.endswith(".pem")
        )

    def setup(self) -> None:
        "Create the CA key, certificate and an empty CRL if they are missing."
        if os.path.isfile(self.ca_cert_path) and os.path.isfile(self.ca_key_path):
            return
        logger.info("Creating a new certificate authority in %s", self.ca_dir)
        ca_key = rsa.generate_private_key(65537, KEY_SIZE)
        dn = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, CA_NAME)])
        now = datetime.datetime.now(datetime.timezone.utc)
        ca_cert = x509.CertificateBuilder(
            issuer_name=dn, subject_name=dn,
            public_key=ca_key.public_key(),
            serial_number=x509.random_serial_number(),
            not_valid_before=now - BACKDATE,
            not_valid_after=now + CA_VALIDITY,
        ).add_extension(
            x509.BasicConstraints(ca=True, path_length=None),
            critical=True
        ).add_extension(
            x509.KeyUsage(
                digital_signature=False, content_commitment=False,
                key_encipherment=False, data_encipherment=False,
                key_agreement=False, key_cert_sign=True, crl_sign=True,
                encipher_only=False, decipher_only=False
            ),
            critical=True
        ).sign(private_key=ca_key, algorithm=hashes.SHA256())

        certificates.write_pem(
            self.ca_key_path, certificates.private_key_pem(ca_key), private=True
        )
        certificates.write_pem(
            self.ca_cert_path, ca_cert.public_bytes(Encoding.PEM)
        )
        self._write_crl(ca_cert, ca_key, [])

    def _ca_cert_and_key(self):
        self.setup()
        return (
            certificates.load_certificate(self.ca_cert_path),
            certificates.load_private_key(self.ca_key_path)
        )

    def _write_crl(
        self,
        ca_cert: x509.Certificate,
        ca_key,
        revoked: typing.Iterable[x509.RevokedCertificate]
    ) -> None:
        now = datetime.datetime.now(datetime.timezone.utc)
        builder = x509.CertificateRevocationListBuilder().issuer_name(
            ca_cert.subject
        ).last_update(now).next_update(now + CRL_VALIDITY)
        for revoked_cert in revoked:
            builder = builder.add_revoked_certificate(revoked_cert)
        crl = builder.sign(private_key=ca_key, algorithm=hashes.SHA256())
        certificates.write_pem(self.crl_path, crl.public_bytes(Encoding.PEM))

    def signed_hosts(self) -> typing.List[str]:
        return self._hosts_in(self.signed_dir)

    def waiting_hosts(self) -> typing.List[str]:
        return self._hosts_in(self.requests_dir)

    def find_certificate(
        self,
        host: str
    ) -> typing.Optional[certificates.Certificate]:
        cert = certificates.load_certificate(self._path(self.signed_dir, host))
        if cert is None:
            return None
        return certificates.Certificate(name=host, content=cert)

    def find_request(
        self,
        host: str
    ) -> typing.Optional[certificates.CertificateRequest]:
        request = certificates.load_request(self._path(self.requests_dir, host))
        if request is None:
            return None
        return certificates.CertificateRequest(name=host, content=request)

    def generate(self, host: str, options: typing.Dict[str, typing.Any]) -> None:
        """
            Create a key and a certificate request for host, then sign it.

            options["dns_alt_names"] lists extra DNS names for the request.
        """
        if self.find_certificate(host) or self.find_request(host):
            raise CertificateAuthorityError(
                f"{host} already has a certificate or a pending request"
            )
        alt_names = [
            name for name in (options.get("dns_alt_names") or []) if name
        ]

        logger.info("Generating a key and a certificate request for %s", host)
        key = rsa.generate_private_key(65537, KEY_SIZE)
        builder = x509.CertificateSigningRequestBuilder().subject_name(
            x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, host)])
        )
        if alt_names:
            names = [host] + [name for name in alt_names if name != host]
            builder = builder.add_extension(
                x509.SubjectAlternativeName([x509.DNSName(name) for name in names]),
                critical=False
            )
        request = builder.sign(key, hashes.SHA256())

        certificates.write_pem(
            self._path(self.private_keys_dir, host),
            certificates.private_key_pem(key),
            private=True
        )
        certificates.write_pem(
            self._path(self.requests_dir, host),
            request.public_bytes(Encoding.PEM)
        )
        self.sign(host, allow_dns_alt_names=bool(alt_names))

    def sign(self, host: str, allow_dns_alt_names: bool = False) -> None:
        request = self.find_request(host)
        if request is None:
            raise CertificateAuthorityError(
                f"Could not find certificate request for {host}"
            )
        csr = request.content
        if not csr.is_signature_valid:
            raise CertificateAuthorityError(
                f"CSR for {host} contains an invalid signature"
            )
        if certificates.common_name(csr.subject) != host:
            raise CertificateAuthorityError(
                f"CSR subject {csr.subject.rfc4514_string()} does not match {host}"
            )
        alt_names = [name for name in request.subject_alt_names if name != host]
        if alt_names and not allow_dns_alt_names:
            raise CertificateAuthorityError(
                f"CSR '{host}' contains subject alternative names "
                f"({', '.join(alt_names)}), which are disallowed. "
                f"Use --allow-dns-alt-names to sign this request."
            )

        ca_cert, ca_key = self._ca_cert_and_key()
        now = datetime.datetime.now(datetime.timezone.utc)
        builder = x509.CertificateBuilder(
            issuer_name=ca_cert.subject,
            subject_name=csr.subject,
            public_key=csr.public_key(),
            serial_number=x509.random_serial_number(),
            not_valid_before=now - BACKDATE,
            not_valid_after=now + CERT_VALIDITY,
        ).add_extension(
            x509.BasicConstraints(ca=False, path_length=None),
            critical=True
        )
        if request.subject_alt_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName([
                    x509.DNSName(name) for name in request.subject_alt_names
                ]),
                critical=False
            )
        cert = builder.sign(private_key=ca_key, algorithm=hashes.SHA256())

        certificates.write_pem(
            self._path(self.signed_dir, host),
            cert.public_bytes(Encoding.PEM)
        )
        os.remove(self._path(self.requests_dir, host))
        logger.info(
            "Signed certificate request for %s (serial %X)",
            host, cert.serial_number
        )

    def revoke(self, host: str) -> None:
        cert = self.find_certificate(host)
        if cert is None:
            raise CertificateAuthorityError(
                f"Could not find a serial number for {host}"
            )
        ca_cert, ca_key = self._ca_cert_and_key()
        crl = certificates.load_crl(self.crl_path)
        revoked = list(crl) if crl is not None else []
        if any(entry.serial_number == cert.serial_number for entry in revoked):
            logger.warning("Certificate for %s is already revoked", host)
            return
        revoked.append(
            x509.RevokedCertificateBuilder().serial_number(
                cert.serial_number
            ).revocation_date(
                datetime.datetime.now(datetime.timezone.utc)
            ).build()
        )
        self._write_crl(ca_cert, ca_key, revoked)
        logger.info("Revoked certificate with serial %X", cert.serial_number)

    def verify(self, host: str) -> None:
        cert = self.find_certificate(host)
        if cert is None:
            raise CertificateAuthorityError(
                f"Could not find a certificate for {host}"
            )
        ca_cert = certificates.load_certificate(self.ca_cert_path)
        if ca_cert is None:
            raise CertificateAuthorityError(
                f"No CA certificate found in {self.ca_dir}"
            )
        verification.verify_certificate(
            host,
            cert.content,
            ca_cert,
            certificates.load_crl(self.crl_path)
        )
        logger.info(
            "Verified %s", verification.describe_verification(host, cert.content)
        )

    def destroy(self, host: str) -> None:
        removed = False
        for directory, kind in (
            (self.signed_dir, "certificate"),
            (self.requests_dir, "certificate request"),
            (self.private_keys_dir, "private key"),
        ):
            path = self._path(directory, host)
            if os.path.isfile(path):
                os.remove(path)
                logger.info("Removed %s %s at %s", kind, host, path)
                removed = True
        if not removed:
            logger.warning("Nothing was deleted for %s", host)

    def describe(self, host: str) -> typing.Optional[str]:
        cert = self.find_certificate(host)
        if cert is None:
            return None
        return cert.to_text()
