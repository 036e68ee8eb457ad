from __future__ import annotations

import functools
import numbers
import operator
from collections.abc import Iterable
from typing import Any, Final, Literal

ShapeLike = Iterable[int] | int
ChunkCoords = tuple[int, ...]
Row = tuple[Any, ...]

# data columns
FILE_ID: Final = "FileID"
INDEX: Final = "Index"
VALUE: Final = "Value"
DEFAULT_COLUMNS: Final = (FILE_ID, INDEX, VALUE)

# catalog fields
FILE_PATH: Final = "FilePath"
FILE_SIZE: Final = "FileSize"
DATASET_PATH: Final = "DatasetPath"
ELEMENT_TYPE: Final = "ElementType"
DIMENSIONS: Final = "Dimensions"
ELEMENT_COUNT: Final = "ElementCount"
OBJECT_PATH: Final = "ObjectPath"
ATTRIBUTE_NAME: Final = "AttributeName"

# reserved paths answered from metadata alone
FILES_CATALOG: Final = "sparky://files"
DATASETS_CATALOG: Final = "sparky://datasets"
ATTRIBUTES_CATALOG: Final = "sparky://attributes"
CATALOG_PATHS: Final = (FILES_CATALOG, DATASETS_CATALOG, ATTRIBUTES_CATALOG)

CatalogPath = Literal["sparky://files", "sparky://datasets", "sparky://attributes"]


def product(tup: tuple[int, ...]) -> int:
    return functools.reduce(operator.mul, tup, 1)


def is_integer(x: Any) -> bool:
    """True if x is an integer (both pure Python or NumPy)."""
    return isinstance(x, numbers.Integral) and not isinstance(x, bool)


def parse_shapelike(data: ShapeLike) -> tuple[int, ...]:
    if is_integer(data):
        if data < 0:  # type: ignore[operator]
            raise ValueError(f"Expected a non-negative integer. Got {data} instead")
        return (int(data),)  # type: ignore[arg-type]
    try:
        data_tuple = tuple(data)  # type: ignore[arg-type]
    except TypeError as e:
        msg = f"Expected an integer or an iterable of integers. Got {data} instead."
        raise TypeError(msg) from e

    if not all(is_integer(v) for v in data_tuple):
        msg = f"Expected an iterable of integers. Got {data} instead."
        raise TypeError(msg)
    if not all(v > -1 for v in data_tuple):
        msg = f"Expected all values to be non-negative. Got {data} instead."
        raise ValueError(msg)
    return tuple(int(v) for v in data_tuple)


def parse_columns(data: Iterable[str] | str | None) -> tuple[str, ...]:
    if data is None:
        return ()
    if isinstance(data, str):
        return (data,)
    columns = tuple(data)
    if not all(isinstance(c, str) for c in columns):
        msg = f"Expected an iterable of column names. Got {data!r} instead."
        raise TypeError(msg)
    return columns
