from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import h5py
import numpy as np

from h5scan.abc.reader import DatasetReader
from h5scan.core.common import product
from h5scan.errors import DatasetNotFoundError, NotADatasetError
from h5scan.readers._memory import block_selection

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Self

    import numpy.typing as npt

    from h5scan.core.descriptor import DatasetDescriptor

logger = getLogger(__name__)


class HDF5Reader(DatasetReader):
    """
    Reader for one dataset of an HDF5 file.

    The file is opened read-only when the reader is created and closed by :meth:`close`.

    Parameters
    ----------
    file_name : str
        Path of the HDF5 file.
    path : str
        Path of the dataset inside the file, e.g. ``/datatypes/int8``.

    Raises
    ------
    DatasetNotFoundError
        If the file does not exist or has no object at ``path``.
    NotADatasetError
        If the object at ``path`` is a group.
    """

    def __init__(self, file_name: str, path: str) -> None:
        super().__init__()
        self.file_name = str(file_name)
        self.path = path
        try:
            self._file = h5py.File(self.file_name, "r")
        except FileNotFoundError:
            raise DatasetNotFoundError(self.file_name, path) from None
        try:
            if path not in self._file:
                raise DatasetNotFoundError(self.file_name, path)
            obj = self._file[path]
            if not isinstance(obj, h5py.Dataset):
                raise NotADatasetError(self.file_name, path)
        except Exception:
            self._file.close()
            raise
        self._dataset = obj
        logger.debug("Opened %s:%s shape=%s", self.file_name, path, obj.shape)

    @classmethod
    def open(cls, descriptor: DatasetDescriptor) -> Self:
        """Open the dataset a descriptor points at."""
        return cls(descriptor.file_name, descriptor.real_path)

    def __repr__(self) -> str:
        return f"HDF5Reader({self.file_name!r}, {self.path!r})"

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._dataset.shape)

    def close(self) -> None:
        # docstring inherited
        if not self.closed:
            self._file.close()
            logger.debug("Closed %s", self.file_name)
        super().close()

    def read_all(self) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        return np.asarray(self._dataset[()]).reshape(-1)

    def read_from(self, offset: int, count: int) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        shape = self.shape
        if len(shape) <= 1:
            return np.asarray(self._dataset[offset : offset + count]).reshape(-1)

        # read the outer-axis rows covering the run, then trim
        row_len = product(shape[1:])
        if row_len == 0:
            return np.empty(0, dtype=self._dataset.dtype)
        first_row = offset // row_len
        last_row = min(-(-(offset + count) // row_len), shape[0])
        rows = np.asarray(self._dataset[first_row:last_row]).reshape(-1)
        start = offset - first_row * row_len
        return rows[start : start + count]

    def read_block(self, shape: Sequence[int], offset: Sequence[int]) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        return np.asarray(self._dataset[block_selection(shape, offset)]).reshape(-1)
