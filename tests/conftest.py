from __future__ import annotations

from typing import TYPE_CHECKING

import h5py
import numpy as np
import pytest

from h5scan import DatasetDescriptor, ScanExecutor
from h5scan.core.config import config
from h5scan.readers import LoggingOpener, MemoryOpener

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

    import numpy.typing as npt

INT8_VALUES = [-128, -2, -1, 0, 1, 2, 3, 4, 5, 127]


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    config.reset()
    yield
    config.reset()


@pytest.fixture
def int8_array() -> npt.NDArray[np.int8]:
    return np.array(INT8_VALUES, dtype="i1")


@pytest.fixture
def matrix() -> npt.NDArray[np.int32]:
    # 6 x 5, values equal to their row-major index
    return np.arange(30, dtype="i4").reshape(6, 5)


@pytest.fixture
def int8_dataset() -> DatasetDescriptor:
    return DatasetDescriptor(
        file_id=7,
        file_name="test1.h5",
        real_path="/datatypes/int8",
        element_type="INTEGER(1)",
        dimensions=(10,),
        size=10,
    )


@pytest.fixture
def matrix_dataset() -> DatasetDescriptor:
    return DatasetDescriptor(
        file_id=3,
        file_name="test1.h5",
        real_path="/matrix",
        element_type="INTEGER(4)",
        dimensions=(6, 5),
        size=30,
    )


@pytest.fixture
def memory_opener(
    int8_array: npt.NDArray[np.int8], matrix: npt.NDArray[np.int32]
) -> LoggingOpener:
    opener = MemoryOpener(
        {
            ("test1.h5", "/datatypes/int8"): int8_array,
            ("test1.h5", "/matrix"): matrix,
        }
    )
    return LoggingOpener(opener)


@pytest.fixture
def executor(memory_opener: LoggingOpener) -> ScanExecutor:
    return ScanExecutor(opener=memory_opener)


@pytest.fixture
def h5_file(
    tmp_path: Path, int8_array: npt.NDArray[np.int8], matrix: npt.NDArray[np.int32]
) -> Path:
    path = tmp_path / "test1.h5"
    with h5py.File(path, "w") as f:
        f.create_dataset("datatypes/int8", data=int8_array)
        f.create_dataset("matrix", data=matrix, chunks=(4, 4))
        f.create_dataset("multi", data=np.arange(10, dtype="i4"))
        f["matrix"].attrs["units"] = "m"
    return path
