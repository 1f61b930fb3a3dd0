class DecodingError(Exception):
    """

    Raised when calldata cannot be decoded into a function call

    """


class MalformedCalldata(DecodingError):
    """
    Raised when a calldata payload is too short to contain a 4 byte function selector, or is not valid hex.
    This is the only condition that causes :meth:`~nethermind.clearsign.ClearSigner.decode` to fail outright.
    """


class DescriptorValidationError(Exception):
    """

    Raised when a descriptor document cannot be converted into a :class:`~nethermind.clearsign.types.Descriptor`.
    Descriptors passed to ``extend()`` are validated first, and invalid ones are skipped instead of raising.

    """


class ExternalLookupFailure(Exception):
    """
    Raised by verified-source collaborators when the remote host returns an error or a response that cannot
    be parsed.  Never escapes the decoding pipeline: the external source adapter converts it into a cached miss.
    """
