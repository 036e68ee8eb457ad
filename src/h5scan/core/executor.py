from __future__ import annotations

import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from h5scan.core.catalog import catalog_row, is_catalog_path
from h5scan.core.config import config
from h5scan.core.indexing import BlockIndexer, run_indices
from h5scan.core.projection import resolve_projection
from h5scan.core.scan_item import BoundedMDScan, BoundedScan, UnboundedScan
from h5scan.errors import UnsupportedScanError
from h5scan.readers._hdf5 import HDF5Reader

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    import numpy.typing as npt

    from h5scan.abc.reader import DatasetOpener, DatasetReader
    from h5scan.core.common import Row
    from h5scan.core.descriptor import DatasetDescriptor
    from h5scan.core.scan_item import ScanItem

logger = logging.getLogger(__name__)

__all__ = ["ScanExecutor"]


class ScanExecutor:
    """
    Turns scan items into rows.

    Every call to :meth:`execute` opens its own reader, reads, and closes the reader
    before returning, also when the read fails. Executors hold no other state, so one
    executor may run many scan items concurrently.

    Parameters
    ----------
    opener : callable, optional
        Called with a :class:`~h5scan.core.descriptor.DatasetDescriptor`, returns an open
        :class:`~h5scan.abc.reader.DatasetReader`. Defaults to :meth:`HDF5Reader.open`.
    """

    def __init__(self, opener: DatasetOpener | None = None) -> None:
        self._opener: DatasetOpener = HDF5Reader.open if opener is None else opener

    def __repr__(self) -> str:
        return f"ScanExecutor(opener={self._opener!r})"

    def execute(self, scan_item: ScanItem) -> list[Row]:
        """
        Run one scan item.

        Parameters
        ----------
        scan_item : UnboundedScan, BoundedScan or BoundedMDScan

        Returns
        -------
        list of tuple
            The rows, in index order of the reader's delivery. Data rows hold the
            requested subset of ``(FileID, Index, Value)``; catalog scans return one row.

        Raises
        ------
        UnsupportedScanError
            If a bounded or block scan targets a catalog path.
        TypeError
            If ``scan_item`` is not a scan item.
        """
        logger.debug("Executing %s", scan_item)

        if isinstance(scan_item, UnboundedScan):
            if is_catalog_path(scan_item.dataset.path):
                return [catalog_row(scan_item.dataset, scan_item.columns)]
            return self._scan_unbounded(scan_item)
        elif isinstance(scan_item, BoundedScan):
            self._check_data_path(scan_item)
            return self._scan_bounded(scan_item)
        elif isinstance(scan_item, BoundedMDScan):
            self._check_data_path(scan_item)
            return self._scan_block(scan_item)
        else:
            raise TypeError(f"Unexpected scan item. Got {type(scan_item)}.")

    def execute_many(self, scan_items: Iterable[ScanItem]) -> list[Row]:
        """
        Run several scan items on a thread pool and concatenate their rows in item order.

        The pool size is taken from the ``threading.max_workers`` config value. The first
        failing item's exception is raised.
        """
        max_workers = config.get("threading.max_workers", None)
        logger.debug("Creating scan ThreadPoolExecutor with max_workers=%s", max_workers)
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="h5scan") as pool:
            results = list(pool.map(self.execute, scan_items))
        return list(itertools.chain.from_iterable(results))

    def _check_data_path(self, scan_item: BoundedScan | BoundedMDScan) -> None:
        if is_catalog_path(scan_item.dataset.path):
            raise UnsupportedScanError(type(scan_item).__name__, scan_item.dataset.path)

    def _read(
        self, dataset: DatasetDescriptor, read: Callable[[DatasetReader], npt.NDArray[Any]]
    ) -> list[Any]:
        with self._opener(dataset) as reader:
            return read(reader).tolist()  # type: ignore[no-any-return]

    def _scan_unbounded(self, scan_item: UnboundedScan) -> list[Row]:
        dataset = scan_item.dataset
        projection = resolve_projection(scan_item.columns)
        if projection.wants_value:
            values = self._read(dataset, lambda reader: reader.read_all())
            return projection.build_rows(dataset.file_id, range(len(values)), values)
        return projection.build_rows(dataset.file_id, range(dataset.size))

    def _scan_bounded(self, scan_item: BoundedScan) -> list[Row]:
        dataset = scan_item.dataset
        offset, count = scan_item.offset, scan_item.io_size
        projection = resolve_projection(scan_item.columns)
        if projection.wants_value:
            values = self._read(dataset, lambda reader: reader.read_from(offset, count))
            return projection.build_rows(
                dataset.file_id, range(offset, offset + len(values)), values
            )
        indices: Sequence[int] = run_indices(offset, count, dataset.size).tolist()
        return projection.build_rows(dataset.file_id, indices)

    def _scan_block(self, scan_item: BoundedMDScan) -> list[Row]:
        dataset = scan_item.dataset
        indexer = BlockIndexer(dataset.dimensions, scan_item.block_shape, scan_item.block_offset)
        projection = resolve_projection(scan_item.columns)
        if projection.wants_value:
            values = self._read(
                dataset,
                lambda reader: reader.read_block(scan_item.block_shape, scan_item.block_offset),
            )
            indices = indexer.global_indices(len(values)).tolist()
            return projection.build_rows(dataset.file_id, indices, values)
        return projection.build_rows(dataset.file_id, indexer.global_indices().tolist())
