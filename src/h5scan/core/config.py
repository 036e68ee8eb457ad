"""
The config module is responsible for managing the configuration of h5scan and is based on the
Donfig python library.

Example:
    The default number of elements read by a bounded scan is ``scan.io_size``. It can be changed
    programmatically:

    ```python
    from h5scan.core.config import config

    config.set({"scan.io_size": 5})
    ```

    Instead of setting the value programmatically with ``config.set``, you can also set the value
    with an environment variable. The environment variable ``H5SCAN_SCAN__IO_SIZE`` can be set to
    ``5``. The double underscore ``__`` is used to indicate nested access.

    ```bash
    export H5SCAN_SCAN__IO_SIZE=5
    ```

For more information, see the Donfig documentation at https://github.com/pytroll/donfig.
"""

from __future__ import annotations

from typing import Any

from donfig import Config as DConfig


class BadConfigError(ValueError):
    _msg = "bad Config: %r"


class Config(DConfig):  # type: ignore[misc]
    """The Config will collect configuration from config files and environment variables

    Example environment variables:
    Grabs environment variables of the form "H5SCAN_FOO__BAR_BAZ=123" and
    turns these into config variables of the form ``{"foo": {"bar-baz": 123}}``
    It transforms the key and value in the following way:

    -  Lower-cases the key text
    -  Treats ``__`` (double-underscore) as nested access
    -  Calls ``ast.literal_eval`` on the value

    """

    def reset(self) -> None:
        self.clear()
        self.refresh()


# The default configuration for h5scan
config = Config(
    "h5scan",
    defaults=[
        {
            "scan": {"io_size": 10000},
            "threading": {"max_workers": None},
        }
    ],
)


def parse_io_size(data: Any) -> int:
    if isinstance(data, int) and not isinstance(data, bool) and data > 0:
        return data
    msg = f"Expected a positive integer io size, got {data!r} instead."
    raise BadConfigError(msg)


def default_io_size() -> int:
    return parse_io_size(config.get("scan.io_size"))
