from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
import pytest

from h5scan import BoundedMDScan, BoundedScan, DatasetDescriptor, ScanExecutor, UnboundedScan
from h5scan.abc.reader import DatasetReader
from h5scan.core.config import config
from h5scan.errors import DatasetNotFoundError, UnsupportedScanError
from h5scan.readers import LoggingOpener, MemoryOpener

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    import numpy.typing as npt

INT8_VALUES = [-128, -2, -1, 0, 1, 2, 3, 4, 5, 127]


class FailingReader(DatasetReader):
    """Opens fine, fails on every read."""

    def __repr__(self) -> str:
        return "FailingReader()"

    def read_all(self) -> npt.NDArray[Any]:
        raise OSError("read failed")

    def read_from(self, offset: int, count: int) -> npt.NDArray[Any]:
        raise OSError("read failed")

    def read_block(self, shape: Sequence[int], offset: Sequence[int]) -> npt.NDArray[Any]:
        raise OSError("read failed")


def test_unbounded_default_columns(
    executor: ScanExecutor, int8_dataset: DatasetDescriptor
) -> None:
    rows = executor.execute(UnboundedScan(int8_dataset))
    assert rows == [(7, i, v) for i, v in enumerate(INT8_VALUES)]


def test_unbounded_multi_axis_is_row_major(
    executor: ScanExecutor, matrix_dataset: DatasetDescriptor
) -> None:
    rows = executor.execute(UnboundedScan(matrix_dataset, columns=["Index", "Value"]))
    assert rows == [(i, i) for i in range(30)]


@pytest.mark.parametrize("io_size", [3, 4, 5, 10, 11])
def test_bounded_runs_reproduce_unbounded(
    executor: ScanExecutor, int8_dataset: DatasetDescriptor, io_size: int
) -> None:
    expected = executor.execute(UnboundedScan(int8_dataset))
    rows = []
    for offset in range(0, int8_dataset.size, io_size):
        rows.extend(executor.execute(BoundedScan(int8_dataset, io_size=io_size, offset=offset)))
    assert rows == expected


def test_bounded_run(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    rows = executor.execute(BoundedScan(int8_dataset, io_size=5, offset=5))
    assert rows == [(7, 5, 2), (7, 6, 3), (7, 7, 4), (7, 8, 5), (7, 9, 127)]


def test_bounded_run_past_the_end(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    assert executor.execute(BoundedScan(int8_dataset, io_size=4, offset=8)) == [
        (7, 8, 5),
        (7, 9, 127),
    ]
    assert executor.execute(BoundedScan(int8_dataset, io_size=4, offset=12)) == []


def test_bounded_multi_axis_run(executor: ScanExecutor, matrix_dataset: DatasetDescriptor) -> None:
    rows = executor.execute(BoundedScan(matrix_dataset, io_size=4, offset=7, columns=["Value"]))
    assert rows == [(7,), (8,), (9,), (10,)]


def test_block_full(executor: ScanExecutor, matrix_dataset: DatasetDescriptor) -> None:
    item = BoundedMDScan(matrix_dataset, block_shape=(2, 3), block_offset=(2, 1))
    rows = executor.execute(item)
    assert rows == [(3, i, i) for i in [11, 12, 13, 16, 17, 18]]


@pytest.mark.parametrize(
    ("block_offset", "expected"),
    [
        ((0, 4), [4, 9, 14, 19]),
        ((4, 0), [20, 21, 22, 23, 25, 26, 27, 28]),
        ((4, 4), [24, 29]),
    ],
)
def test_block_edge(
    executor: ScanExecutor,
    matrix_dataset: DatasetDescriptor,
    block_offset: tuple[int, int],
    expected: list[int],
) -> None:
    item = BoundedMDScan(matrix_dataset, block_shape=(4, 4), block_offset=block_offset)
    assert executor.execute(item) == [(3, i, i) for i in expected]


def test_block_grid_covers_dataset(
    executor: ScanExecutor, matrix_dataset: DatasetDescriptor
) -> None:
    rows = []
    for block_offset in [(0, 0), (0, 4), (4, 0), (4, 4)]:
        item = BoundedMDScan(
            matrix_dataset, block_shape=(4, 4), block_offset=block_offset, columns=["Index"]
        )
        rows.extend(executor.execute(item))
    assert sorted(rows) == [(i,) for i in range(30)]


def test_block_off_the_grid() -> None:
    wide = DatasetDescriptor(4, "wide.h5", "/wide", "INTEGER(8)", (2, 10), 20)
    opener = LoggingOpener(MemoryOpener({("wide.h5", "/wide"): np.arange(20).reshape(2, 10)}))
    executor = ScanExecutor(opener=opener)

    item = BoundedMDScan(wide, block_shape=(2, 4), block_offset=(0, 7))
    assert executor.execute(item) == [(4, i, i) for i in [7, 8, 9, 17, 18, 19]]

    item = BoundedMDScan(wide, block_shape=(2, 4), block_offset=(0, 7), columns=["Index"])
    assert executor.execute(item) == [(i,) for i in [7, 8, 9, 17, 18, 19]]
    assert opener.counter["open"] == 1


def test_column_order_is_literal(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    forward = executor.execute(BoundedScan(int8_dataset, io_size=2, columns=["Index", "FileID"]))
    backward = executor.execute(BoundedScan(int8_dataset, io_size=2, columns=["FileID", "Index"]))
    assert forward == [(0, 7), (1, 7)]
    assert backward == [(7, 0), (7, 1)]

    rows = executor.execute(
        BoundedScan(int8_dataset, io_size=2, columns=["Value", "Index", "FileID"])
    )
    assert rows == [(-128, 0, 7), (-2, 1, 7)]


def test_unknown_columns_are_dropped(
    executor: ScanExecutor, int8_dataset: DatasetDescriptor
) -> None:
    rows = executor.execute(BoundedScan(int8_dataset, io_size=2, columns=["Bogus", "Value"]))
    assert rows == [(-128,), (-2,)]


@pytest.mark.parametrize(
    "item_factory",
    [
        lambda d, m: UnboundedScan(d, columns=["Index"]),
        lambda d, m: BoundedScan(d, io_size=4, offset=2, columns=["FileID", "Index"]),
        lambda d, m: BoundedMDScan(
            m, block_shape=(4, 4), block_offset=(4, 4), columns=["Index", "FileID"]
        ),
    ],
)
def test_index_only_scans_do_not_read(
    executor: ScanExecutor,
    memory_opener: LoggingOpener,
    int8_dataset: DatasetDescriptor,
    matrix_dataset: DatasetDescriptor,
    item_factory: Any,
) -> None:
    rows = executor.execute(item_factory(int8_dataset, matrix_dataset))
    assert rows
    assert memory_opener.counter["open"] == 0


def test_index_only_matches_full_scan(
    executor: ScanExecutor, matrix_dataset: DatasetDescriptor
) -> None:
    full = executor.execute(BoundedMDScan(matrix_dataset, block_shape=(4, 4), block_offset=(4, 0)))
    index_only = executor.execute(
        BoundedMDScan(matrix_dataset, block_shape=(4, 4), block_offset=(4, 0), columns=["Index"])
    )
    assert index_only == [(index,) for _, index, _ in full]


def test_index_only_bounded_is_clipped(
    executor: ScanExecutor, int8_dataset: DatasetDescriptor
) -> None:
    rows = executor.execute(BoundedScan(int8_dataset, io_size=4, offset=8, columns=["Index"]))
    assert rows == [(8,), (9,)]


def test_readers_are_closed(
    executor: ScanExecutor,
    memory_opener: LoggingOpener,
    int8_dataset: DatasetDescriptor,
    matrix_dataset: DatasetDescriptor,
) -> None:
    executor.execute(UnboundedScan(int8_dataset))
    executor.execute(BoundedScan(int8_dataset, io_size=3, offset=3))
    executor.execute(BoundedMDScan(matrix_dataset, block_shape=(4, 4), block_offset=(0, 0)))
    assert len(memory_opener.readers) == 3
    assert all(reader.closed for reader in memory_opener.readers)
    assert memory_opener.counter["open"] == 3
    assert memory_opener.counter["close"] == 3


def test_reader_is_closed_when_read_fails(matrix_dataset: DatasetDescriptor) -> None:
    readers: list[FailingReader] = []

    def opener(descriptor: DatasetDescriptor) -> FailingReader:
        reader = FailingReader()
        readers.append(reader)
        return reader

    executor = ScanExecutor(opener=opener)
    item = BoundedMDScan(matrix_dataset, block_shape=(2, 2), block_offset=(0, 0))
    with pytest.raises(OSError, match="read failed"):
        executor.execute(item)
    assert len(readers) == 1
    assert readers[0].closed


def test_open_failure_propagates(executor: ScanExecutor) -> None:
    missing = DatasetDescriptor(
        file_id=1,
        file_name="test1.h5",
        real_path="/missing",
        element_type="FLOAT(8)",
        dimensions=(4,),
        size=4,
    )
    with pytest.raises(DatasetNotFoundError, match="/missing"):
        executor.execute(UnboundedScan(missing))


def test_files_catalog(executor: ScanExecutor, memory_opener: LoggingOpener) -> None:
    dataset = DatasetDescriptor.files_catalog(7, "test1.h5", 2048)
    assert executor.execute(UnboundedScan(dataset)) == [(7, "test1.h5", 2048)]
    assert executor.execute(UnboundedScan(dataset, columns=["FileSize"])) == [(2048,)]
    assert memory_opener.counter["open"] == 0


def test_datasets_catalog(executor: ScanExecutor) -> None:
    dataset = DatasetDescriptor.datasets_catalog(3, "test1.h5", "/matrix", "INTEGER(4)", (6, 5), 30)
    assert executor.execute(UnboundedScan(dataset)) == [(3, "/matrix", "INTEGER", (6, 5), 30)]
    rows = executor.execute(
        UnboundedScan(dataset, columns=["ElementCount", "Bogus", "DatasetPath"])
    )
    assert rows == [(30, "/matrix")]


def test_attributes_catalog(executor: ScanExecutor) -> None:
    dataset = DatasetDescriptor.attributes_catalog(
        3, "test1.h5", "/matrix", "units", "STRING(1)", (1,), 1
    )
    assert executor.execute(UnboundedScan(dataset)) == [
        (3, "/matrix", "units", "STRING", (1,))
    ]


def test_catalog_rejects_bounded_scans(executor: ScanExecutor) -> None:
    dataset = DatasetDescriptor.datasets_catalog(3, "test1.h5", "/matrix", "INTEGER(4)", (6, 5), 30)
    with pytest.raises(UnsupportedScanError, match="BoundedScan is not supported"):
        executor.execute(BoundedScan(dataset, io_size=4))
    with pytest.raises(UnsupportedScanError, match="BoundedMDScan is not supported"):
        executor.execute(BoundedMDScan(dataset, block_shape=(2, 2), block_offset=(0, 0)))


def test_execute_rejects_unknown_items(executor: ScanExecutor) -> None:
    with pytest.raises(TypeError, match="Unexpected scan item"):
        executor.execute("not a scan item")  # type: ignore[arg-type]


@pytest.mark.parametrize("max_workers", [None, 1, 3])
def test_execute_many(
    executor: ScanExecutor, int8_dataset: DatasetDescriptor, max_workers: int | None
) -> None:
    items = [BoundedScan(int8_dataset, io_size=3, offset=offset) for offset in range(0, 10, 3)]
    with config.set({"threading.max_workers": max_workers}):
        rows = executor.execute_many(items)
    assert rows == executor.execute(UnboundedScan(int8_dataset))


def test_execute_many_raises(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    catalog = DatasetDescriptor.files_catalog(7, "test1.h5", 2048)
    with pytest.raises(UnsupportedScanError):
        executor.execute_many([UnboundedScan(int8_dataset), BoundedScan(catalog)])


def test_config_io_size(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    with config.set({"scan.io_size": 3}):
        item = BoundedScan(int8_dataset, offset=2)
    assert item.io_size == 3
    assert executor.execute(item) == [(7, 2, -1), (7, 3, 0), (7, 4, 1)]


def test_hdf5_end_to_end(h5_file: Path, int8_dataset: DatasetDescriptor) -> None:
    executor = ScanExecutor()
    int8 = DatasetDescriptor(
        file_id=int8_dataset.file_id,
        file_name=str(h5_file),
        real_path=int8_dataset.real_path,
        element_type=int8_dataset.element_type,
        dimensions=int8_dataset.dimensions,
        size=int8_dataset.size,
    )
    assert executor.execute(UnboundedScan(int8)) == [(7, i, v) for i, v in enumerate(INT8_VALUES)]
    assert executor.execute(BoundedScan(int8, io_size=3, offset=8)) == [(7, 8, 5), (7, 9, 127)]

    matrix = DatasetDescriptor(3, str(h5_file), "/matrix", "INTEGER(4)", (6, 5), 30)
    rows = executor.execute(BoundedMDScan(matrix, block_shape=(4, 4), block_offset=(4, 4)))
    assert rows == [(3, 24, 24), (3, 29, 29)]
    rows = executor.execute(BoundedScan(matrix, io_size=4, offset=13, columns=["Value"]))
    assert rows == [(13,), (14,), (15,), (16,)]


def test_values_are_python_scalars(executor: ScanExecutor, int8_dataset: DatasetDescriptor) -> None:
    rows = executor.execute(UnboundedScan(int8_dataset, columns=["Value"]))
    assert all(type(value) is int for (value,) in rows)
    assert not any(isinstance(value, np.generic) for (value,) in rows)
