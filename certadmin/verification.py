import datetime
import typing

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.padding import PKCS1v15
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed25519, ed448, rsa

from .exceptions import CertificateVerificationError
from . import certificates


def verify_signature(
    subject: x509.Certificate,
    issuer: x509.Certificate
) -> None:
    "Check the subject's signature with the issuer's public key."
    issuer_public_key = issuer.public_key()
    if isinstance(issuer_public_key, dsa.DSAPublicKey):
        issuer_public_key.verify(
            subject.signature,
            subject.tbs_certificate_bytes,
            subject.signature_hash_algorithm
        )
    elif isinstance(issuer_public_key, ec.EllipticCurvePublicKey):
        issuer_public_key.verify(
            subject.signature,
            subject.tbs_certificate_bytes,
            subject.signature_algorithm_parameters
        )
    elif isinstance(
        issuer_public_key,
        (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)
    ):
        issuer_public_key.verify(
            subject.signature,
            subject.tbs_certificate_bytes
        )
    elif isinstance(issuer_public_key, rsa.RSAPublicKey):
        issuer_public_key.verify(
            subject.signature,
            subject.tbs_certificate_bytes,
            PKCS1v15(),
            subject.signature_hash_algorithm
        )
    else:
        raise TypeError(
            f"Unsupported issuer key type {type(issuer_public_key).__name__}"
        )


def verify_certificate(
    host: str,
    subject: x509.Certificate,
    issuer: x509.Certificate,
    crl: typing.Optional[x509.CertificateRevocationList] = None
) -> None:
    """
        Verify a host certificate issued by the local CA with:

        * Current time to not valid before and not valid after.
        * Issuer's distinguished name.
        * Issuer's public key (signature check).
        * The CA's revocation list, when there is one.

        Raises CertificateVerificationError with a short reason.
    """
    def fail(reason: str):
        raise CertificateVerificationError(
            host=host,
            reason=reason,
            serial_number=subject.serial_number
        )

    current_time = datetime.datetime.now(datetime.timezone.utc)
    if current_time < subject.not_valid_before_utc:
        fail("certificate is not yet valid")
    if current_time > subject.not_valid_after_utc:
        fail("certificate has expired")
    if subject.issuer != issuer.subject:
        fail("unable to get local issuer certificate")
    try:
        verify_signature(subject, issuer)
    except InvalidSignature:
        fail("certificate signature failure")

    if crl is not None:
        if crl.get_revoked_certificate_by_serial_number(
            subject.serial_number
        ) is not None:
            fail("certificate revoked")


def describe_verification(host: str, cert: x509.Certificate) -> str:
    return (
        f"{host}: {cert.subject.rfc4514_string()} valid until "
        f"{certificates.format_datetime(cert.not_valid_after_utc)}"
    )
