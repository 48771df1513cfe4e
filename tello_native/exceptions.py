class TelloError(Exception):
    """Base class for every error raised by tello_native."""


class DecodeError(TelloError):
    """A datagram (or one of its sub-payloads) could not be decoded."""


class ReceiverTakenError(TelloError):
    """The message stream already has a consumer."""
