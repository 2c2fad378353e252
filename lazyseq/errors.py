"""Exception types raised by lazyseq."""


class SequenceError(Exception):
    """Base class for lazyseq errors."""
    pass


class BridgeError(SequenceError):
    """Raised when a pull source is used in a way that would deadlock."""
    pass
