__all__ = [
    "BaseScanError",
    "DatasetNotFoundError",
    "MetadataValidationError",
    "NotADatasetError",
    "ReaderClosedError",
    "ScanItemValidationError",
    "UnsupportedScanError",
]


class BaseScanError(ValueError):
    """
    Base error which all h5scan errors are sub-classed from.
    """

    _msg: str = "{}"

    def __init__(self, *args: object) -> None:
        """
        If a single argument is passed, treat it as a pre-formatted message.

        If multiple arguments are passed, they are used as arguments for a template string class
        variable.
        """
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class DatasetNotFoundError(BaseScanError, FileNotFoundError):
    """
    Raised when a dataset cannot be found in a file, or the file itself is missing.
    """

    _msg = "No dataset found in file {!r} at path {!r}"


class NotADatasetError(BaseScanError):
    """
    Raised when the object at a path exists but is not an array dataset, e.g. a group.
    """

    _msg = "Object in file {!r} at path {!r} is not a dataset"


class MetadataValidationError(BaseScanError):
    """Raised when a dataset descriptor is inconsistent in some way"""

    _msg = "Invalid value for '{}'. Expected '{}'. Got '{}'."


class ScanItemValidationError(BaseScanError):
    """Raised when a scan item is structurally malformed"""

    _msg = "Invalid value for '{}'. Expected '{}'. Got '{}'."


class UnsupportedScanError(BaseScanError):
    """
    Raised when a scan kind is not defined for the target path, e.g. a bounded scan of a
    virtual catalog.
    """

    _msg = "{} is not supported for path {!r}"


class ReaderClosedError(BaseScanError):
    """Raised when reading from a dataset reader that has already been closed."""
