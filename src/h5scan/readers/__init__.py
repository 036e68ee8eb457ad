from h5scan.readers._hdf5 import HDF5Reader
from h5scan.readers._logging import LoggingOpener, LoggingReader
from h5scan.readers._memory import MemoryOpener, MemoryReader

__all__ = [
    "HDF5Reader",
    "LoggingOpener",
    "LoggingReader",
    "MemoryOpener",
    "MemoryReader",
]
