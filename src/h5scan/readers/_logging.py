from __future__ import annotations

import inspect
import logging
import sys
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from h5scan.abc.reader import DatasetReader

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence

    import numpy.typing as npt

    from h5scan.abc.reader import DatasetOpener
    from h5scan.core.descriptor import DatasetDescriptor


class LoggingReader(DatasetReader):
    """
    Reader wrapper that logs all calls to the wrapped reader.

    Parameters
    ----------
    reader : DatasetReader
        Reader to wrap
    log_level : str
        Log level
    log_handler : logging.Handler
        Log handler

    Attributes
    ----------
    counter : dict
        Counter of number of times each method has been called
    """

    counter: defaultdict[str, int]

    def __init__(
        self,
        reader: DatasetReader,
        log_level: str = "DEBUG",
        log_handler: logging.Handler | None = None,
    ) -> None:
        super().__init__()
        self._reader = reader
        self.counter = defaultdict(int)
        self.log_level = log_level
        self.log_handler = log_handler
        self._configure_logger(log_level, log_handler)

    def _configure_logger(
        self, log_level: str = "DEBUG", log_handler: logging.Handler | None = None
    ) -> None:
        self.log_level = log_level
        self.logger = logging.getLogger(f"LoggingReader({self._reader!r})")
        self.logger.setLevel(log_level)

        if not self.logger.hasHandlers():
            if not log_handler:
                log_handler = self._default_handler()
            # Add handler to logger
            self.logger.addHandler(log_handler)

    def _default_handler(self) -> logging.Handler:
        """Define a default log handler"""
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setLevel(self.log_level)
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        return handler

    @contextmanager
    def log(self, hint: Any = "") -> Generator[None, None, None]:
        """Context manager to log method calls

        Each call to the wrapped reader is logged to the configured logger and added to
        the counter dict.
        """
        method = inspect.stack()[2].function
        op = f"{type(self._reader).__name__}.{method}"
        if hint:
            op = f"{op}({hint})"
        self.logger.info(" Calling %s", op)
        start_time = time.time()
        try:
            self.counter[method] += 1
            yield
        finally:
            end_time = time.time()
            self.logger.info("Finished %s [%.2f s]", op, end_time - start_time)

    def __repr__(self) -> str:
        return f"LoggingReader({self._reader!r})"

    @property
    def closed(self) -> bool:
        return self._reader.closed

    def close(self) -> None:
        with self.log():
            self._reader.close()

    def read_all(self) -> npt.NDArray[Any]:
        # docstring inherited
        with self.log():
            return self._reader.read_all()

    def read_from(self, offset: int, count: int) -> npt.NDArray[Any]:
        # docstring inherited
        with self.log(f"{offset}, {count}"):
            return self._reader.read_from(offset, count)

    def read_block(self, shape: Sequence[int], offset: Sequence[int]) -> npt.NDArray[Any]:
        # docstring inherited
        with self.log(f"{tuple(shape)}, {tuple(offset)}"):
            return self._reader.read_block(shape, offset)


class LoggingOpener:
    """
    Opener wrapper that wraps every reader it opens in a :class:`LoggingReader`.

    The readers opened so far are kept in ``readers``, and ``counter`` sums the calls
    made on all of them, including ``open``. Every opened reader stays referenced for
    the lifetime of the opener, so this is meant for tests and short debugging
    sessions, not for long-running scans.
    """

    def __init__(
        self,
        opener: DatasetOpener,
        log_level: str = "DEBUG",
        log_handler: logging.Handler | None = None,
    ) -> None:
        self._opener = opener
        self.log_level = log_level
        self.log_handler = log_handler
        self.readers: list[LoggingReader] = []
        self._opened = 0
        self._lock = threading.Lock()

    @property
    def counter(self) -> defaultdict[str, int]:
        total: defaultdict[str, int] = defaultdict(int)
        total["open"] = self._opened
        for reader in self.readers:
            for method, count in reader.counter.items():
                total[method] += count
        return total

    def __call__(self, descriptor: DatasetDescriptor) -> LoggingReader:
        with self._lock:
            self._opened += 1
        reader = LoggingReader(
            self._opener(descriptor), log_level=self.log_level, log_handler=self.log_handler
        )
        with self._lock:
            self.readers.append(reader)
        return reader
