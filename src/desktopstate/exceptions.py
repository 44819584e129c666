"""Exception hierarchy for the desktop state store."""


class StateStoreError(Exception):
    """Base class for all state store errors."""


class CascadeDepthError(StateStoreError):
    """Raised when nested subscriber cascades exceed the configured depth.

    Two observers that keep mutating each other's paths would otherwise recurse
    until the interpreter stack runs out.
    """

    def __init__(self, path: str, depth: int):
        self.path = path
        self.depth = depth
        super().__init__(
            f"Subscriber cascade for '{path}' exceeded maximum depth of {depth}"
        )


class SnapshotFormatError(StateStoreError):
    """Raised while staging a snapshot whose subsection has the wrong shape."""


class StorageWriteError(StateStoreError):
    """Raised by storage backends when a value cannot be written.

    Never escapes the storage boundary: DurableStorage.set() logs it and
    returns False.
    """
