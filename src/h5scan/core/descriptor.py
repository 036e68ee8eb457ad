from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from h5scan.core.common import (
    ATTRIBUTES_CATALOG,
    CATALOG_PATHS,
    DATASETS_CATALOG,
    FILES_CATALOG,
    is_integer,
    parse_shapelike,
    product,
)
from h5scan.errors import MetadataValidationError

if TYPE_CHECKING:
    from typing import Self

    from h5scan.core.common import ChunkCoords, ShapeLike


def parse_size(data: object, name: str = "size") -> int:
    if is_integer(data) and data >= 0:  # type: ignore[operator]
        return int(data)  # type: ignore[call-overload]
    raise MetadataValidationError(name, "a non-negative integer", data)


def parse_file_id(data: object) -> int:
    if is_integer(data):
        return int(data)  # type: ignore[call-overload]
    raise MetadataValidationError("file_id", "an integer", data)


@dataclass(frozen=True)
class DatasetDescriptor:
    """
    Static metadata about one array-like object inside a file.

    Descriptors are produced by schema discovery and are only read here.

    Parameters
    ----------
    file_id : int
        Identifier of the file the dataset lives in. Emitted in the ``FileID`` column.
    file_name : str
        Path of the file on disk.
    real_path : str
        Logical path of the object inside the file, e.g. ``/datatypes/int8``.
    element_type : str
        Label of the element type, e.g. ``INTEGER(1)``.
    dimensions : tuple of int
        Length of each axis, outermost first.
    size : int
        Total number of elements. Must equal the product of ``dimensions`` when
        ``dimensions`` is non-empty.
    attribute : str, optional
        Name of the attribute, for attribute catalog entries.
    path : str, optional
        The scan target. Defaults to ``real_path``; one of the virtual catalog
        paths for catalog entries.
    file_size : int
        Size of the file in bytes, for file catalog entries.
    """

    file_id: int
    file_name: str
    real_path: str
    element_type: str
    dimensions: ChunkCoords
    size: int
    attribute: str | None
    path: str
    file_size: int

    def __init__(
        self,
        file_id: int,
        file_name: str,
        real_path: str,
        element_type: str,
        dimensions: ShapeLike,
        size: int,
        attribute: str | None = None,
        path: str | None = None,
        file_size: int = 0,
    ) -> None:
        file_id_parsed = parse_file_id(file_id)
        dimensions_parsed = parse_shapelike(dimensions)
        size_parsed = parse_size(size)
        file_size_parsed = parse_size(file_size, "file_size")

        if dimensions_parsed and product(dimensions_parsed) != size_parsed:
            raise MetadataValidationError(
                "size", f"product of dimensions {dimensions_parsed}", size_parsed
            )

        object.__setattr__(self, "file_id", file_id_parsed)
        object.__setattr__(self, "file_name", str(file_name))
        object.__setattr__(self, "real_path", real_path)
        object.__setattr__(self, "element_type", element_type)
        object.__setattr__(self, "dimensions", dimensions_parsed)
        object.__setattr__(self, "size", size_parsed)
        object.__setattr__(self, "attribute", attribute)
        object.__setattr__(self, "path", real_path if path is None else path)
        object.__setattr__(self, "file_size", file_size_parsed)

    @property
    def ndim(self) -> int:
        return len(self.dimensions)

    @property
    def is_virtual(self) -> bool:
        """True if this descriptor addresses a catalog rather than array data."""
        return self.path in CATALOG_PATHS

    @classmethod
    def files_catalog(cls, file_id: int, file_name: str, file_size: int) -> Self:
        """Descriptor for the row describing one file."""
        return cls(
            file_id=file_id,
            file_name=file_name,
            real_path="/",
            element_type="",
            dimensions=(),
            size=0,
            path=FILES_CATALOG,
            file_size=file_size,
        )

    @classmethod
    def datasets_catalog(
        cls,
        file_id: int,
        file_name: str,
        real_path: str,
        element_type: str,
        dimensions: ShapeLike,
        size: int,
    ) -> Self:
        """Descriptor for the row describing one dataset."""
        return cls(
            file_id=file_id,
            file_name=file_name,
            real_path=real_path,
            element_type=element_type,
            dimensions=dimensions,
            size=size,
            path=DATASETS_CATALOG,
        )

    @classmethod
    def attributes_catalog(
        cls,
        file_id: int,
        file_name: str,
        real_path: str,
        attribute: str,
        element_type: str,
        dimensions: ShapeLike,
        size: int,
    ) -> Self:
        """Descriptor for the row describing one attribute attached to ``real_path``."""
        return cls(
            file_id=file_id,
            file_name=file_name,
            real_path=real_path,
            element_type=element_type,
            dimensions=dimensions,
            size=size,
            attribute=attribute,
            path=ATTRIBUTES_CATALOG,
        )
