import os
from typing import Any
from unittest import mock

import pytest

from h5scan.core.config import BadConfigError, config, default_io_size, parse_io_size


def test_config_defaults_set() -> None:
    # regression test for available defaults
    assert config.defaults == [
        {
            "scan": {"io_size": 10000},
            "threading": {"max_workers": None},
        }
    ]
    assert config.get("scan.io_size") == 10000
    assert config.get("threading.max_workers") is None


@pytest.mark.parametrize(
    ("key", "old_val", "new_val"),
    [("scan.io_size", 10000, 5), ("threading.max_workers", None, 4)],
)
def test_config_defaults_can_be_overridden(key: str, old_val: Any, new_val: Any) -> None:
    assert config.get(key) == old_val
    with config.set({key: new_val}):
        assert config.get(key) == new_val
    assert config.get(key) == old_val


def test_config_from_environment() -> None:
    with mock.patch.dict(os.environ, {"H5SCAN_SCAN__IO_SIZE": "5"}):
        config.refresh()
        assert default_io_size() == 5
    config.reset()
    assert default_io_size() == 10000


@pytest.mark.parametrize("value", [0, -1, "5", 2.0, None, True])
def test_bad_io_size(value: Any) -> None:
    with pytest.raises(BadConfigError, match="positive integer io size"):
        parse_io_size(value)
    with config.set({"scan.io_size": value}), pytest.raises(BadConfigError):
        default_io_size()
