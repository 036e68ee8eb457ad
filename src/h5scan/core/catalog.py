"""
Rows for the virtual catalog paths.

A catalog scan never touches array data. It returns exactly one row built from the
dataset descriptor, listing a file, a dataset or an attribute.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from h5scan.core.common import (
    ATTRIBUTE_NAME,
    ATTRIBUTES_CATALOG,
    CATALOG_PATHS,
    DATASET_PATH,
    DATASETS_CATALOG,
    DIMENSIONS,
    ELEMENT_COUNT,
    ELEMENT_TYPE,
    FILE_ID,
    FILE_PATH,
    FILE_SIZE,
    FILES_CATALOG,
    OBJECT_PATH,
    parse_columns,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from h5scan.core.common import Row
    from h5scan.core.descriptor import DatasetDescriptor

logger = logging.getLogger(__name__)


def element_type_name(label: str) -> str:
    """
    Strip the size suffix from a type label, e.g. ``INTEGER(1)`` -> ``INTEGER``.

    A label without a parenthesis is returned unchanged.
    """
    end = label.find("(")
    if end == -1:
        return label
    return label[:end]


# field producers per catalog, in default output order
_CATALOG_FIELDS: dict[str, dict[str, Callable[[DatasetDescriptor], Any]]] = {
    FILES_CATALOG: {
        FILE_ID: lambda d: d.file_id,
        FILE_PATH: lambda d: d.file_name,
        FILE_SIZE: lambda d: d.file_size,
    },
    DATASETS_CATALOG: {
        FILE_ID: lambda d: d.file_id,
        DATASET_PATH: lambda d: d.real_path,
        ELEMENT_TYPE: lambda d: element_type_name(d.element_type),
        DIMENSIONS: lambda d: d.dimensions,
        ELEMENT_COUNT: lambda d: d.size,
    },
    ATTRIBUTES_CATALOG: {
        FILE_ID: lambda d: d.file_id,
        OBJECT_PATH: lambda d: d.real_path,
        ATTRIBUTE_NAME: lambda d: d.attribute,
        ELEMENT_TYPE: lambda d: element_type_name(d.element_type),
        DIMENSIONS: lambda d: d.dimensions,
    },
}


def is_catalog_path(path: str) -> bool:
    return path in CATALOG_PATHS


def catalog_fields(path: str) -> tuple[str, ...]:
    """The fields of the catalog at ``path``, in default order."""
    try:
        return tuple(_CATALOG_FIELDS[path])
    except KeyError:
        raise ValueError(f"{path!r} is not a catalog path") from None


def catalog_row(dataset: DatasetDescriptor, columns: Iterable[str] | None = None) -> Row:
    """
    Build the single row describing ``dataset``.

    Parameters
    ----------
    dataset : DatasetDescriptor
        A descriptor whose ``path`` is one of the catalog paths.
    columns : iterable of str, optional
        Fields to emit, in order. Unknown names are skipped. When empty, every field of
        the catalog is emitted in its default order.

    Returns
    -------
    tuple
        One row.
    """
    try:
        producers = _CATALOG_FIELDS[dataset.path]
    except KeyError:
        raise ValueError(f"{dataset.path!r} is not a catalog path") from None

    requested = parse_columns(columns) or tuple(producers)
    unknown = [name for name in requested if name not in producers]
    if unknown:
        logger.debug("Dropping unknown %s fields %s", dataset.path, unknown)
    return tuple(producers[name](dataset) for name in requested if name in producers)
