from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

from h5scan.errors import ReaderClosedError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType
    from typing import Any, Self

    import numpy.typing as npt

    from h5scan.core.descriptor import DatasetDescriptor

__all__ = ["DatasetOpener", "DatasetReader"]


class DatasetReader(ABC):
    """
    Abstract base class for readers of one array dataset.

    A reader is an open connection to the dataset. It must be closed when no longer
    needed; use it as a context manager to close it on every exit path.

    All read methods return a one-dimensional array holding the elements in row-major
    order.
    """

    _is_closed: bool

    def __init__(self) -> None:
        self._is_closed = False

    def __enter__(self) -> Self:
        """Enter a context manager that will close the reader upon exiting."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the reader."""
        self.close()

    @property
    def closed(self) -> bool:
        return self._is_closed

    def close(self) -> None:
        """Close the reader. Closing twice is a no-op."""
        self._is_closed = True

    def _check_open(self) -> None:
        if self._is_closed:
            raise ReaderClosedError(f"{self!r} is closed")

    @abstractmethod
    def read_all(self) -> npt.NDArray[Any]:
        """
        Read every element of the dataset.

        Returns
        -------
        numpy.ndarray
            One-dimensional array of ``size`` elements.
        """
        ...

    @abstractmethod
    def read_from(self, offset: int, count: int) -> npt.NDArray[Any]:
        """
        Read ``count`` elements starting at the linear index ``offset``.

        The result is shorter than ``count`` when the run passes the end of the dataset.

        Parameters
        ----------
        offset : int
            Linear index of the first element.
        count : int
            Number of elements to read.

        Returns
        -------
        numpy.ndarray
        """
        ...

    @abstractmethod
    def read_block(self, shape: Sequence[int], offset: Sequence[int]) -> npt.NDArray[Any]:
        """
        Read the rectangular block of the given per-axis ``shape`` starting at ``offset``.

        A block that passes the end of an axis is cut short along that axis.

        Parameters
        ----------
        shape : sequence of int
            Length of the block along each axis.
        offset : sequence of int
            Start of the block along each axis.

        Returns
        -------
        numpy.ndarray
            The block's elements, flattened in row-major order over the block.
        """
        ...


DatasetOpener: TypeAlias = Callable[["DatasetDescriptor"], DatasetReader]
