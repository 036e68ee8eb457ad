from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from h5scan.core.common import is_integer, parse_columns, parse_shapelike
from h5scan.core.config import default_io_size
from h5scan.errors import ScanItemValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from h5scan.core.common import ChunkCoords, ShapeLike
    from h5scan.core.descriptor import DatasetDescriptor

__all__ = ["BoundedMDScan", "BoundedScan", "ScanItem", "UnboundedScan"]


def parse_io_size(data: int | None) -> int:
    if data is None:
        return default_io_size()
    if is_integer(data) and data > 0:
        return int(data)
    raise ScanItemValidationError("io_size", "a positive integer", data)


def parse_offset(data: int) -> int:
    if is_integer(data) and data >= 0:
        return int(data)
    raise ScanItemValidationError("offset", "a non-negative integer", data)


def parse_block(
    dataset: DatasetDescriptor, block_shape: ShapeLike, block_offset: ShapeLike
) -> tuple[ChunkCoords, ChunkCoords]:
    try:
        shape_parsed = parse_shapelike(block_shape)
        offset_parsed = parse_shapelike(block_offset)
    except (TypeError, ValueError) as e:
        raise ScanItemValidationError(str(e)) from e
    if len(shape_parsed) != len(offset_parsed):
        raise ScanItemValidationError(
            "block_offset", f"{len(shape_parsed)} axes to match block_shape", offset_parsed
        )
    if len(shape_parsed) != dataset.ndim:
        raise ScanItemValidationError(
            "block_shape", f"{dataset.ndim} axes to match the dataset", shape_parsed
        )
    if not all(s > 0 for s in shape_parsed):
        raise ScanItemValidationError("block_shape", "positive lengths", shape_parsed)
    return shape_parsed, offset_parsed


@dataclass(frozen=True)
class UnboundedScan:
    """Read a whole dataset, or answer a virtual catalog path."""

    dataset: DatasetDescriptor
    """The dataset to read."""
    io_size: int
    """Advisory number of elements per read."""
    columns: tuple[str, ...]
    """Requested output columns; empty means the default columns."""

    def __init__(
        self,
        dataset: DatasetDescriptor,
        io_size: int | None = None,
        columns: Iterable[str] | None = None,
    ) -> None:
        object.__setattr__(self, "dataset", dataset)
        object.__setattr__(self, "io_size", parse_io_size(io_size))
        object.__setattr__(self, "columns", parse_columns(columns))


@dataclass(frozen=True)
class BoundedScan:
    """Read a contiguous run of ``io_size`` elements starting at a linear offset."""

    dataset: DatasetDescriptor
    """The dataset to read."""
    io_size: int
    """Number of elements to read. The run is shorter at the end of the dataset."""
    offset: int
    """Linear index of the first element."""
    columns: tuple[str, ...]
    """Requested output columns; empty means the default columns."""

    def __init__(
        self,
        dataset: DatasetDescriptor,
        io_size: int | None = None,
        offset: int = 0,
        columns: Iterable[str] | None = None,
    ) -> None:
        object.__setattr__(self, "dataset", dataset)
        object.__setattr__(self, "io_size", parse_io_size(io_size))
        object.__setattr__(self, "offset", parse_offset(offset))
        object.__setattr__(self, "columns", parse_columns(columns))


@dataclass(frozen=True)
class BoundedMDScan:
    """Read one rectangular block of a multi-axis dataset."""

    dataset: DatasetDescriptor
    """The dataset to read."""
    io_size: int
    """Advisory number of elements per read."""
    block_shape: ChunkCoords
    """Length of the block along each axis."""
    block_offset: ChunkCoords
    """Start of the block along each axis."""
    columns: tuple[str, ...]
    """Requested output columns; empty means the default columns."""

    def __init__(
        self,
        dataset: DatasetDescriptor,
        io_size: int | None = None,
        *,
        block_shape: ShapeLike,
        block_offset: ShapeLike,
        columns: Iterable[str] | None = None,
    ) -> None:
        shape_parsed, offset_parsed = parse_block(dataset, block_shape, block_offset)
        object.__setattr__(self, "dataset", dataset)
        object.__setattr__(self, "io_size", parse_io_size(io_size))
        object.__setattr__(self, "block_shape", shape_parsed)
        object.__setattr__(self, "block_offset", offset_parsed)
        object.__setattr__(self, "columns", parse_columns(columns))


ScanItem: TypeAlias = UnboundedScan | BoundedScan | BoundedMDScan
