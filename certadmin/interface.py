"""
    Command-line style interface to a certificate authority.

    An Interface holds one verb, the hosts it applies to and the options of a
    single administrative action. Calling apply() runs it against a CA
    collaborator exactly once.
"""
import enum
import logging
import sys
import typing

from .exceptions import CertificateVerificationError, InterfaceError

if typing.TYPE_CHECKING:
    from .authority import CertificateAuthorityProtocol


logger = logging.getLogger(__name__)


class Verb(enum.Enum):
    DESTROY = "destroy"
    LIST = "list"
    REVOKE = "revoke"
    GENERATE = "generate"
    SIGN = "sign"
    PRINT = "print"
    VERIFY = "verify"


class Selection(enum.Enum):
    ALL = "all"
    SIGNED = "signed"


Subjects = typing.Union[Selection, typing.List[str], None]
HostInfo = typing.Tuple[typing.Any, typing.Optional[str]]

# Categories are rendered in this order before the final sort.
CATEGORIES = ("request", "signed", "invalid")
GLYPHS = {"request": " ", "signed": "+", "invalid": "-"}

# Verbs without a dedicated handler call the CA once per host.
HOST_OPERATIONS: typing.Dict[Verb, typing.Callable[[typing.Any, str], None]] = {
    Verb.DESTROY: lambda ca, host: ca.destroy(host),
    Verb.REVOKE: lambda ca, host: ca.revoke(host),
    Verb.VERIFY: lambda ca, host: ca.verify(host),
}


class Interface:
    def __init__(
        self,
        method: typing.Union[Verb, str],
        options: typing.Optional[typing.Dict[str, typing.Any]] = None,
        trace: bool = False,
        output: typing.Optional[typing.TextIO] = None
    ):
        options = dict(options or {})
        self.method = method
        self.subjects = options.pop("to", None)
        self.options = options
        self.trace = trace
        self._output = output

    @property
    def method(self) -> Verb:
        return self._method

    @method.setter
    def method(self, value: typing.Union[Verb, str]):
        try:
            self._method = Verb(value)
        except ValueError:
            raise ValueError(f"Invalid method {value} to apply") from None

    @property
    def subjects(self) -> Subjects:
        return self._subjects

    @subjects.setter
    def subjects(self, value):
        if not (
            isinstance(value, Selection) or
            isinstance(value, (list, tuple)) or
            value is None
        ):
            raise ValueError(f"Subjects must be a list or all; not {value!r}")
        if isinstance(value, (list, tuple)):
            if not all(isinstance(host, str) for host in value):
                raise ValueError(
                    f"Subjects must be a list of host names; not {value!r}"
                )
            # An empty list means the caller selected nothing at all.
            value = list(value) or None
        self._subjects = value

    @property
    def output(self) -> typing.TextIO:
        return self._output or sys.stdout

    def apply(self, ca: "CertificateAuthorityProtocol") -> None:
        """
            Run the configured verb against the CA.

            InterfaceError always reaches the caller. Any other error is
            logged as a single "Could not call" line and swallowed, which
            means a failing host stops the rest of a multi-host loop.
        """
        if self.subjects is None and self.method is not Verb.LIST:
            raise ValueError(
                f"You must provide hosts or all when using {self.method.value}"
            )

        handlers: typing.Dict[Verb, typing.Callable[[typing.Any], None]] = {
            Verb.GENERATE: self.generate,
            Verb.LIST: self.list_hosts,
            Verb.SIGN: self.sign,
            Verb.PRINT: self.print_hosts,
        }
        try:
            if self.method in handlers:
                handlers[self.method](ca)
                return
            operation = HOST_OPERATIONS[self.method]
            for host in self._known_hosts(ca):
                operation(ca, host)
        except InterfaceError:
            raise
        except Exception as e:
            if self.trace:
                logger.exception("Could not call %s: %s", self.method.value, e)
            else:
                logger.error("Could not call %s: %s", self.method.value, e)

    def _known_hosts(self, ca: "CertificateAuthorityProtocol") -> typing.List[str]:
        if isinstance(self.subjects, Selection):
            return ca.signed_hosts()
        return self.subjects

    def generate(self, ca: "CertificateAuthorityProtocol") -> None:
        if isinstance(self.subjects, Selection):
            raise InterfaceError(
                "it makes no sense to generate all hosts; you must specify a list"
            )
        for host in self.subjects:
            ca.generate(host, self.options)

    def sign(self, ca: "CertificateAuthorityProtocol") -> None:
        if self.subjects is Selection.SIGNED:
            raise InterfaceError(
                "signed certificates cannot be signed again; "
                "you must specify a list or all"
            )
        if self.subjects is Selection.ALL:
            hosts = ca.waiting_hosts()
        else:
            hosts = self.subjects
        if not hosts:
            raise InterfaceError("no waiting certificate requests to sign")
        for host in hosts:
            ca.sign(
                host,
                allow_dns_alt_names=bool(
                    self.options.get("allow_dns_alt_names", False)
                )
            )

    def print_hosts(self, ca: "CertificateAuthorityProtocol") -> None:
        for host in self._known_hosts(ca):
            value = ca.describe(host)
            if value:
                print(value, file=self.output)
            else:
                logger.error("could not find certificate for %s", host)

    def classify(
        self,
        ca: "CertificateAuthorityProtocol",
        hosts: typing.Iterable[str],
        signed: typing.Collection[str],
        requests: typing.Collection[str]
    ) -> typing.Dict[str, typing.Dict[str, HostInfo]]:
        """
            Sort every host into the request, signed or invalid category.

            Pending requests are never verified. A verification failure is
            kept as the explanation of an invalid entry.
        """
        certs: typing.Dict[str, typing.Dict[str, HostInfo]] = {
            category: {} for category in CATEGORIES
        }
        for host in sorted(set(hosts)):
            verify_error = None
            if host not in requests:
                try:
                    ca.verify(host)
                except CertificateVerificationError as e:
                    verify_error = str(e)
                    if e.serial_number is not None:
                        logger.debug(
                            "Certificate %X for %s failed verification: %s",
                            e.serial_number, host, verify_error
                        )

            if verify_error is not None:
                certs["invalid"][host] = (ca.find_certificate(host), verify_error)
            elif host in signed and host not in requests:
                certs["signed"][host] = (ca.find_certificate(host), None)
            else:
                certs["request"][host] = (ca.find_request(host), None)
        return certs

    def list_hosts(self, ca: "CertificateAuthorityProtocol") -> None:
        signed = ca.signed_hosts()
        requests = ca.waiting_hosts()

        if self.subjects is Selection.ALL:
            hosts = list(signed) + list(requests)
        elif self.subjects is Selection.SIGNED:
            hosts = list(signed)
        elif self.subjects is None:
            hosts = list(requests)
        else:
            hosts = self.subjects

        if not hosts:
            return

        certs = self.classify(ca, hosts, signed, requests)
        width = max(
            (len(host) for entries in certs.values() for host in entries),
            default=0
        )

        lines = []
        for category in CATEGORIES:
            for host, info in certs[category].items():
                lines.append(self.format_host(host, category, info, width))
        print("\n".join(sorted(lines)), file=self.output)

    def format_host(
        self,
        host: str,
        category: str,
        info: HostInfo,
        width: int
    ) -> str:
        certish, verify_error = info
        alt_names: typing.List[str] = []
        if category != "invalid" and certish is not None:
            alt_names = [
                name
                for name in (getattr(certish, "subject_alt_names", None) or [])
                if name != host
            ]

        segments = [GLYPHS[category], host.ljust(width)]
        if alt_names:
            segments.append(f"(alt names: {', '.join(alt_names)})")
        if verify_error is not None:
            segments.append(f"({verify_error})")
        return " ".join(segments)
