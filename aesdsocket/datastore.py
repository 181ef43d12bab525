"""Shared append-only data file used by the socket server."""

from __future__ import annotations

import os
import threading
from datetime import datetime
from typing import Iterator, Optional, Union

DEFAULT_PATH = "/var/tmp/aesdsocketdata"
CHAR_DEVICE_PATH = "/dev/aesdchar"
CHUNK_SIZE = 1024
TIMESTAMP_FORMAT = "timestamp:%a, %d %b %Y %H:%M:%S %z\n"


def format_timestamp(when: Optional[datetime] = None) -> str:
    """Render a timestamp line in local time; naive datetimes count as local."""
    moment = datetime.now() if when is None else when
    return moment.astimezone().strftime(TIMESTAMP_FORMAT) if moment.tzinfo is None \
        else moment.strftime(TIMESTAMP_FORMAT)


class DataStore:
    """A file that clients append to and read back, guarded by one lock.

    Every operation opens the file afresh, so the path may be a regular
    file or a character device.
    """

    def __init__(self, path: Union[str, os.PathLike] = DEFAULT_PATH) -> None:
        self.path = os.fspath(path)
        self.lock = threading.RLock()

    def append(self, data: Union[bytes, str]) -> int:
        """Append ``data`` up to its first NUL byte; return the bytes written."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        data = bytes(data).split(b"\0", 1)[0]
        with self.lock:
            with open(self.path, "ab") as fh:
                fh.write(data)
                fh.flush()
        return len(data)

    def contents(self) -> bytes:
        """Return the whole file."""
        with self.lock:
            with open(self.path, "rb") as fh:
                return fh.read()

    def chunks(self, size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the file in pieces of at most ``size`` bytes, holding the lock."""
        if size <= 0:
            raise ValueError("chunk size must be positive")
        with self.lock:
            with open(self.path, "rb") as fh:
                while True:
                    block = fh.read(size)
                    if not block:
                        return
                    yield block

    def append_timestamp(self, when: Optional[datetime] = None) -> str:
        """Append a timestamp line and return it."""
        line = format_timestamp(when)
        self.append(line)
        return line

    def remove(self) -> None:
        """Delete the file; a missing file is not an error."""
        with self.lock:
            try:
                os.remove(self.path)
            except FileNotFoundError:
                pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"