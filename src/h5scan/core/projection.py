from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from h5scan.core.common import DEFAULT_COLUMNS, FILE_ID, INDEX, VALUE, parse_columns

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from h5scan.core.common import Row

logger = logging.getLogger(__name__)

# Each producer turns the (file id, indices, values) of one scan into the values of one
# output column. Values are only looked at when the Value column is requested.
_PRODUCERS: dict[str, Callable[[int, Sequence[int], Sequence[Any] | None], Iterable[Any]]] = {
    FILE_ID: lambda file_id, indices, values: itertools.repeat(file_id, len(indices)),
    INDEX: lambda file_id, indices, values: indices,
    VALUE: lambda file_id, indices, values: values,  # type: ignore[dict-item]
}


@dataclass(frozen=True)
class Projection:
    """
    The output columns of a data scan.

    Attributes
    ----------
    columns : tuple of str
        The effective column order: the requested order, or ``DEFAULT_COLUMNS`` when
        nothing was requested. May contain names that are not data columns.
    fields : tuple of str
        The recognized subset of ``columns``, in the same order. These are emitted.
    """

    columns: tuple[str, ...]
    fields: tuple[str, ...]

    @property
    def wants_value(self) -> bool:
        return VALUE in self.fields

    @property
    def wants_index(self) -> bool:
        return INDEX in self.fields

    @property
    def wants_id(self) -> bool:
        return FILE_ID in self.fields

    def build_rows(
        self, file_id: int, indices: Sequence[int], values: Sequence[Any] | None = None
    ) -> list[Row]:
        """
        Assemble one row per index.

        ``values`` must be given, with the same length as ``indices``, when the
        projection wants the Value column.
        """
        if self.wants_value and values is None:
            raise ValueError("values are required when the Value column is projected")
        if not self.fields:
            return [() for _ in indices]
        columns = [_PRODUCERS[name](file_id, indices, values) for name in self.fields]
        return list(zip(*columns, strict=False))

    def build_row(self, file_id: int, index: int, value: Any = None) -> Row:
        return self.build_rows(file_id, [index], [value])[0]


def resolve_projection(columns: Iterable[str] | None) -> Projection:
    """
    Resolve requested column names into a projection.

    Fields keep the literal request order, so ``["Index", "FileID"]`` yields rows
    ``(index, file_id)``. Unknown names are dropped without error.
    """
    requested = parse_columns(columns)
    effective = requested or DEFAULT_COLUMNS
    fields = tuple(name for name in effective if name in _PRODUCERS)
    if len(fields) != len(effective):
        logger.debug(
            "Dropping unknown columns %s", [name for name in effective if name not in _PRODUCERS]
        )
    return Projection(columns=effective, fields=fields)
