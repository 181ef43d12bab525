"""Threaded TCP server that appends client packets to a shared file.

Each connection gets its own thread. Every chunk received is appended to
the data store and the whole store is sent back; a connection ends once a
chunk carrying a newline has been handled. In regular-file mode a
background thread also appends a timestamp line at a fixed interval, and
the file is removed on shutdown.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import signal
import socket
import sys
import threading
from contextlib import closing
from dataclasses import dataclass
from typing import Optional, Sequence

from .datastore import CHAR_DEVICE_PATH, CHUNK_SIZE, DEFAULT_PATH, DataStore

PORT = 9000
BACKLOG = 10
RECV_SIZE = 1023
TIMESTAMP_INTERVAL = 10.0
_POLL = 0.2

logger = logging.getLogger(__name__)


class ThreadRegistry:
    """Thread-safe record of worker threads, joined together at shutdown."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def add(self, thread: threading.Thread) -> None:
        """Record ``thread`` so it is joined by :meth:`join_all`."""
        with self._lock:
            logger.debug("Adding thread %s to list", thread.name)
            self._threads.append(thread)

    def join_all(self) -> None:
        """Join every recorded thread, then forget them all."""
        with self._lock:
            for thread in self._threads:
                logger.debug("Joining thread %s", thread.name)
                thread.join()
            self._threads.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._threads)


class AesdSocketServer:
    """Listening socket plus per-client and timestamp threads.

    ``timestamps`` selects regular-file mode: a timestamp thread runs and
    the data file is deleted on shutdown. Without it the store is left in
    place, as suits a character device.
    """

    def __init__(
        self,
        store: Optional[DataStore] = None,
        host: Optional[str] = None,
        port: int = PORT,
        timestamps: bool = True,
        interval: float = TIMESTAMP_INTERVAL,
    ) -> None:
        self.store = store if store is not None else DataStore()
        self.host = host
        self.port = port
        self.timestamps = timestamps
        self.interval = interval
        self.threads = ThreadRegistry()
        self._stop = threading.Event()
        self._sock: Optional[socket.socket] = None
        self._closed = False

    def start(self) -> None:
        """Bind, listen, and start the timestamp thread when enabled."""
        infos = socket.getaddrinfo(
            self.host, self.port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0,
            socket.AI_PASSIVE,
        )
        sock = None
        for family, socktype, proto, _, sockaddr in infos:
            logger.debug("Attempting socket creation for family %s", family)
            try:
                candidate = socket.socket(family, socktype, proto)
            except OSError as exc:
                logger.error("Socket creation failed: %s", exc)
                continue
            try:
                candidate.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                candidate.bind(sockaddr)
            except OSError as exc:
                logger.error("Bind failed: %s", exc)
                candidate.close()
                continue
            sock = candidate
            break
        if sock is None:
            raise OSError("failed to bind to any address")
        try:
            sock.listen(BACKLOG)
        except OSError:
            sock.close()
            raise
        sock.settimeout(_POLL)
        self._sock = sock
        logger.info("Server listening on port %s", self.address()[1])

        if self.timestamps:
            stamper = threading.Thread(
                target=self._timestamp_loop, name="timestamp", daemon=True
            )
            stamper.start()
            self.threads.add(stamper)
        else:
            logger.debug("Timestamps disabled")

    def _timestamp_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self.store.append_timestamp()
            except OSError as exc:
                logger.error("Timestamp thread failed to write %s: %s",
                             self.store.path, exc)
            self._stop.wait(self.interval)
        logger.debug("Timestamp thread exiting")

    def serve_forever(self) -> None:
        """Accept connections until a stop is requested."""
        if self._sock is None:
            raise RuntimeError("server has not been started")
        while not self._stop.is_set():
            try:
                conn, peer = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop.is_set():
                    break
                logger.error("Accept failed: %s", exc)
                self._stop.wait(1.0)
                continue
            logger.info("Accepted connection from %s", peer[0])
            worker = threading.Thread(
                target=self.handle_client, args=(conn,), daemon=True
            )
            try:
                worker.start()
            except RuntimeError as exc:
                logger.error("Failed to create client thread: %s", exc)
                conn.close()
                continue
            self.threads.add(worker)

    def handle_client(self, conn: socket.socket) -> None:
        """Serve one connection: append each chunk, echo the whole store."""
        conn.settimeout(_POLL)
        with conn:
            while not self._stop.is_set():
                try:
                    received = conn.recv(RECV_SIZE)
                except socket.timeout:
                    continue
                except OSError as exc:
                    logger.error("Receive error: %s", exc)
                    break
                if not received:
                    logger.info("Client disconnected")
                    break
                packet = received.split(b"\0", 1)[0]
                try:
                    self.store.append(packet)
                except OSError as exc:
                    logger.error("Client thread failed to open %s: %s",
                                 self.store.path, exc)
                try:
                    with closing(self.store.chunks(CHUNK_SIZE)) as blocks:
                        for block in blocks:
                            conn.sendall(block)
                except OSError as exc:
                    logger.error("Send or read error: %s", exc)
                if b"\n" in packet:
                    logger.debug("Newline received, closing")
                    break

    def shutdown(self) -> None:
        """Stop, join every thread, close the socket and tidy the file."""
        if self._closed:
            return
        self._closed = True
        logger.info("Shutting down...")
        self._stop.set()
        self.threads.join_all()
        if self._sock is not None:
            self._sock.close()
        if self.timestamps:
            try:
                self.store.remove()
            except OSError as exc:
                logger.error("Failed to remove %s: %s", self.store.path, exc)

    def address(self) -> tuple:
        """Return the (host, port) the server is bound to."""
        if self._sock is None:
            raise RuntimeError("server has not been started")
        return tuple(self._sock.getsockname()[:2])


@dataclass(frozen=True)
class Options:
    daemon: bool = False


def parse_args(argv: Optional[Sequence[str]] = None) -> Options:
    """Recognise ``-d`` anywhere in the arguments; ignore the rest."""
    args = sys.argv[1:] if argv is None else argv
    return Options(daemon="-d" in args)


def daemonize() -> None:
    """Detach from the terminal in place: new session, root cwd, null streams."""
    logger.debug("Daemonizing...")
    try:
        os.setsid()
    except OSError as exc:
        logger.debug("setsid not possible: %s", exc)
    os.umask(0)
    try:
        os.chdir("/")
    except OSError as exc:
        logger.error("chdir failed: %s", exc)
    try:
        dev_null = os.open(os.devnull, os.O_RDWR)
    except OSError as exc:
        logger.error("Failed to open %s: %s", os.devnull, exc)
        return
    for fd in (0, 1, 2):
        os.dup2(dev_null, fd)
    os.close(dev_null)


def _configure_logging() -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    try:
        handler: logging.Handler = logging.handlers.SysLogHandler(
            address="/dev/log",
            facility=logging.handlers.SysLogHandler.LOG_USER,
        )
    except OSError:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("aesdsocket: %(message)s"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server until SIGINT or SIGTERM; return the exit status."""
    options = parse_args(argv)
    _configure_logging()
    use_char_device = os.environ.get("USE_AESD_CHAR_DEVICE") == "1"
    logger.info("Starting aesdsocket%s",
                " in daemon mode" if options.daemon else "")

    if options.daemon:
        try:
            daemonize()
        except OSError as exc:
            logger.error("Daemonizing failed: %s", exc)
            return 1

    store = DataStore(CHAR_DEVICE_PATH if use_char_device else DEFAULT_PATH)
    server = AesdSocketServer(store, timestamps=not use_char_device)

    def _on_signal(signum, _frame):
        logger.info("Caught signal %d", signum)
        server._stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    try:
        server.start()
    except OSError as exc:
        logger.error("Failed to start: %s", exc)
        return 1
    try:
        server.serve_forever()
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())