import typing


class InterfaceError(Exception):
    """
        The requested verb makes no sense for the given hosts.

        Never swallowed by the command dispatcher.
    """
    pass


class CertificateAuthorityError(Exception):
    pass


class CertificateVerificationError(Exception):
    def __init__(
        self,
        *args,
        host: str,
        reason: str,
        serial_number: typing.Optional[int] = None,
        **kwargs
    ):
        if not isinstance(host, str):
            raise TypeError("host must be a str")
        if not isinstance(reason, str):
            raise TypeError("reason must be a str")
        super().__init__(*args, **kwargs)
        self.host = host
        self.reason = reason
        self.serial_number = serial_number

    def __str__(self) -> str:
        return self.reason
