"""
Mapping of block-local element positions to linear indices in the whole dataset.

A reader delivers the elements of a rectangular block in row-major order over the
block. Every element has a *local index* (its position in that delivery) and a
*global index* (its position in the row-major flattening of the full dataset). This
module computes the latter from the former.

The last block along an axis may be cut short by the end of the axis (an *edge
block*). Local positions are laid out over the block's actual extent, its *edge span*,
not over the nominal block shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from h5scan.core.common import parse_shapelike, product

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from h5scan.core.common import ChunkCoords, ShapeLike

__all__ = [
    "BlockIndexer",
    "block_global_indices",
    "edge_span",
    "edge_spans",
    "is_full_block",
    "local_to_global",
    "row_major_strides",
    "run_indices",
]


def is_full_block(dim_len: int, block_len: int, block_offset: int) -> bool:
    """
    True if the block starting at ``block_offset`` spans ``block_len`` items.

    On a regular grid, where blocks are numbered ``block_offset // block_len``, this
    holds for every block before the ``dim_len // block_len``-th. Offsets off the grid
    are checked against the end of the axis the same way.
    """
    return block_offset + block_len <= dim_len


def edge_span(dim_len: int, block_len: int, block_offset: int) -> int:
    """
    The number of items actually covered by a block along one axis.

    This is ``block_len`` for a full block, and the number of items remaining
    after ``block_offset`` (``dim_len - block_offset``) for a block cut short by the
    end of the axis, whether or not it starts on the block grid.

    Examples
    --------
    >>> edge_span(10, 4, 4)
    4
    >>> edge_span(10, 4, 8)
    2
    >>> edge_span(10, 4, 7)
    3
    """
    return max(min(block_len, dim_len - block_offset), 0)


def edge_spans(
    dimensions: Sequence[int], block_shape: Sequence[int], block_offset: Sequence[int]
) -> ChunkCoords:
    """Per-axis edge spans of a block. See :func:`edge_span`."""
    return tuple(
        edge_span(d, b, o) for d, b, o in zip(dimensions, block_shape, block_offset, strict=True)
    )


def row_major_strides(shape: Sequence[int]) -> ChunkCoords:
    """
    Element strides of a C-ordered array of the given shape.

    >>> row_major_strides((4, 5, 6))
    (30, 6, 1)
    """
    strides = []
    acc = 1
    for length in reversed(shape):
        strides.append(acc)
        acc *= length
    return tuple(reversed(strides))


def _unravel(local: int, spans: Sequence[int]) -> ChunkCoords:
    # The outermost coordinate is a plain quotient, never reduced modulo its span.
    coords = []
    rest = local
    for span in reversed(spans[1:]):
        rest, coord = divmod(rest, span)
        coords.append(coord)
    coords.append(rest)
    return tuple(reversed(coords))


def local_to_global(
    dimensions: Sequence[int],
    block_shape: Sequence[int],
    block_offset: Sequence[int],
    local_index: int,
) -> int:
    """
    Convert a position within a block to a linear index in the whole dataset.

    For a two-axis dataset with dimensions ``(R, C)`` this is::

        span = edge_span(C, block_shape[1], block_offset[1])
        (block_offset[0] + local_index // span) * C + block_offset[1] + local_index % span

    and the same row-major linearization extends to any number of axes.

    Parameters
    ----------
    dimensions : sequence of int
        Length of each axis of the dataset.
    block_shape : sequence of int
        Nominal length of the block along each axis.
    block_offset : sequence of int
        Start of the block along each axis.
    local_index : int
        Position of the element in the reader's row-major delivery of the block.

    Returns
    -------
    int
    """
    spans = edge_spans(dimensions, block_shape, block_offset)
    coords = _unravel(int(local_index), spans)
    strides = row_major_strides(dimensions)
    return sum((o + c) * s for o, c, s in zip(block_offset, coords, strides, strict=False))


def block_global_indices(
    dimensions: Sequence[int],
    block_shape: Sequence[int],
    block_offset: Sequence[int],
    count: int | None = None,
) -> npt.NDArray[np.int64]:
    """
    Global indices of the first ``count`` local positions of a block.

    ``count`` defaults to the number of elements in the block's edge spans, which is the
    number of elements a reader returns for it. This is the vectorized form of
    :func:`local_to_global`.
    """
    spans = edge_spans(dimensions, block_shape, block_offset)
    if count is None:
        count = product(spans)
    rest = np.arange(count, dtype=np.int64)
    if not spans:
        return rest
    strides = row_major_strides(dimensions)
    out = np.zeros(count, dtype=np.int64)
    for axis in range(len(spans) - 1, 0, -1):
        rest, coord = np.divmod(rest, spans[axis])
        out += (block_offset[axis] + coord) * strides[axis]
    out += (block_offset[0] + rest) * strides[0]
    return out


def run_indices(offset: int, count: int, size: int) -> npt.NDArray[np.int64]:
    """
    Indices of a contiguous run of ``count`` elements from ``offset``, cut at ``size``.
    """
    return np.arange(offset, max(min(offset + count, size), offset), dtype=np.int64)


@dataclass(frozen=True)
class BlockIndexer:
    """
    Index mapping for one block of a dataset.

    Iterating yields ``(local_index, global_index)`` pairs in reader order.

    Parameters
    ----------
    dimensions : tuple of int
        Length of each axis of the dataset.
    block_shape : tuple of int
        Nominal length of the block along each axis.
    block_offset : tuple of int
        Start of the block along each axis.
    """

    dimensions: ChunkCoords
    block_shape: ChunkCoords
    block_offset: ChunkCoords

    def __init__(
        self, dimensions: ShapeLike, block_shape: ShapeLike, block_offset: ShapeLike
    ) -> None:
        dimensions_parsed = parse_shapelike(dimensions)
        block_shape_parsed = parse_shapelike(block_shape)
        block_offset_parsed = parse_shapelike(block_offset)
        if not len(dimensions_parsed) == len(block_shape_parsed) == len(block_offset_parsed):
            raise ValueError(
                "dimensions, block_shape and block_offset must have the same number of axes. "
                f"Got {dimensions_parsed}, {block_shape_parsed} and {block_offset_parsed}."
            )
        object.__setattr__(self, "dimensions", dimensions_parsed)
        object.__setattr__(self, "block_shape", block_shape_parsed)
        object.__setattr__(self, "block_offset", block_offset_parsed)

    @property
    def spans(self) -> ChunkCoords:
        return edge_spans(self.dimensions, self.block_shape, self.block_offset)

    @property
    def is_edge(self) -> bool:
        """True if the block is cut short along any axis."""
        return self.spans != self.block_shape

    @property
    def nitems(self) -> int:
        return product(self.spans)

    def global_index(self, local_index: int) -> int:
        return local_to_global(self.dimensions, self.block_shape, self.block_offset, local_index)

    def global_indices(self, count: int | None = None) -> npt.NDArray[np.int64]:
        return block_global_indices(self.dimensions, self.block_shape, self.block_offset, count)

    def __len__(self) -> int:
        return self.nitems

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for local, glob in enumerate(self.global_indices().tolist()):
            yield local, glob
