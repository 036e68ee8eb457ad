from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import numpy as np

from h5scan.abc.reader import DatasetReader
from h5scan.errors import DatasetNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    import numpy.typing as npt

    from h5scan.core.descriptor import DatasetDescriptor

logger = getLogger(__name__)


def block_selection(shape: Sequence[int], offset: Sequence[int]) -> tuple[slice, ...]:
    """The per-axis slices selecting a block. Slicing clips blocks at the array edges."""
    return tuple(slice(o, o + s) for s, o in zip(shape, offset, strict=True))


class MemoryReader(DatasetReader):
    """
    Reader for an array held in memory.

    Parameters
    ----------
    array : array-like
        The dataset. It is read, never modified.
    """

    def __init__(self, array: npt.ArrayLike) -> None:
        super().__init__()
        self._array = np.asarray(array)

    def __repr__(self) -> str:
        return f"MemoryReader(shape={self._array.shape}, dtype={self._array.dtype})"

    def read_all(self) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        return self._array.reshape(-1)

    def read_from(self, offset: int, count: int) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        return self._array.reshape(-1)[offset : offset + count]

    def read_block(self, shape: Sequence[int], offset: Sequence[int]) -> npt.NDArray[Any]:
        # docstring inherited
        self._check_open()
        return self._array[block_selection(shape, offset)].reshape(-1)


class MemoryOpener:
    """
    Opens :class:`MemoryReader` instances for descriptors.

    Parameters
    ----------
    datasets : mapping
        Arrays keyed by ``(file_name, real_path)``.
    """

    def __init__(self, datasets: Mapping[tuple[str, str], npt.ArrayLike] | None = None) -> None:
        self._datasets = dict(datasets or {})

    def __repr__(self) -> str:
        return f"MemoryOpener({sorted(self._datasets)!r})"

    def add(self, file_name: str, real_path: str, array: npt.ArrayLike) -> None:
        self._datasets[(file_name, real_path)] = array

    def __call__(self, descriptor: DatasetDescriptor) -> MemoryReader:
        key = (descriptor.file_name, descriptor.real_path)
        try:
            array = self._datasets[key]
        except KeyError:
            raise DatasetNotFoundError(descriptor.file_name, descriptor.real_path) from None
        logger.debug("Opening in-memory dataset %s", key)
        return MemoryReader(array)
