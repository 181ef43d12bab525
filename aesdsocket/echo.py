"""Threaded echo server that logs client data and periodic dates.

Every connection is served by its own thread, which echoes each chunk it
receives and appends the text to a client log. A background thread appends
the current date, in ``ctime`` form, to a date log at a fixed interval.
Active client threads are tracked so shutdown can join them.
"""

from __future__ import annotations

import logging
import os
import signal
import socket
import sys
import threading
from datetime import datetime
from typing import Optional, Sequence, Union

from .slist import SList

PORT = 8080
BUFFER_SIZE = 1024
BACKLOG = 5
DATE_INTERVAL = 10.0
CLIENT_LOG = "client.txt"
DATE_LOG = "date.txt"
_POLL = 0.2

logger = logging.getLogger(__name__)


def format_ctime(when: Optional[datetime] = None) -> str:
    """Render ``when`` like ``Wed Jun 30 21:49:08 1993`` plus a newline."""
    moment = datetime.now() if when is None else when
    return moment.ctime() + "\n"


class EchoServer:
    """IPv4 listener with one echo thread per client and a date-writer thread."""

    def __init__(
        self,
        client_log: Union[str, os.PathLike] = CLIENT_LOG,
        date_log: Union[str, os.PathLike] = DATE_LOG,
        host: str = "",
        port: int = PORT,
        interval: float = DATE_INTERVAL,
    ) -> None:
        self.client_log = os.fspath(client_log)
        self.date_log = os.fspath(date_log)
        self.host = host
        self.port = port
        self.interval = interval
        self.clients = SList()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sock: Optional[socket.socket] = None
        self._date_thread: Optional[threading.Thread] = None
        self._closed = False

    def start(self) -> None:
        """Bind, listen and start the date-writer thread."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((self.host, self.port))
            sock.listen(BACKLOG)
        except OSError as exc:
            logger.error("Error binding socket: %s", exc)
            sock.close()
            raise
        sock.settimeout(_POLL)
        self._sock = sock
        self._date_thread = threading.Thread(
            target=self._date_loop, name="date", daemon=True
        )
        self._date_thread.start()

    def _date_loop(self) -> None:
        try:
            fh = open(self.date_log, "a", encoding="utf-8")
        except OSError as exc:
            logger.error("Error opening date file: %s", exc)
            return
        with fh:
            while not self._stop.is_set():
                with self._lock:
                    fh.write(format_ctime())
                    fh.flush()
                self._stop.wait(self.interval)

    def serve_forever(self) -> None:
        """Accept connections and hand each to a new thread until stopped."""
        if self._sock is None:
            raise RuntimeError("server has not been started")
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop.is_set():
                    break
                logger.error("Error accepting connection: %s", exc)
                continue
            worker = threading.Thread(
                target=self.handle_client, args=(conn,), daemon=True
            )
            with self._lock:
                self.clients.insert_head(worker)
            try:
                worker.start()
            except RuntimeError as exc:
                logger.error("Error creating client thread: %s", exc)
                with self._lock:
                    self.clients.remove(worker)
                conn.close()

    def handle_client(self, conn: socket.socket) -> None:
        """Echo every chunk back and append its text to the client log."""
        try:
            with conn:
                conn.settimeout(_POLL)
                try:
                    log = open(self.client_log, "ab")
                except OSError as exc:
                    logger.error("Error opening client file: %s", exc)
                    return
                with log:
                    while not self._stop.is_set():
                        try:
                            received = conn.recv(BUFFER_SIZE - 1)
                        except socket.timeout:
                            continue
                        except OSError:
                            break
                        if not received:
                            break
                        with self._lock:
                            log.write(received.split(b"\0", 1)[0])
                            log.flush()
                        try:
                            conn.sendall(received)
                        except OSError:
                            break
        finally:
            current = threading.current_thread()
            with self._lock:
                if current in self.clients:
                    self.clients.remove(current)

    def shutdown(self) -> None:
        """Stop accepting, join every client thread and the date writer."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        if self._sock is not None:
            self._sock.close()
        with self._lock:
            workers = list(self.clients)
        for worker in workers:
            if worker.is_alive() or worker.ident is not None:
                worker.join()
        if self._date_thread is not None:
            self._date_thread.join()

    def address(self) -> tuple:
        """Return the (host, port) the server is bound to."""
        if self._sock is None:
            raise RuntimeError("server has not been started")
        return tuple(self._sock.getsockname()[:2])


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the echo server until SIGINT; return the exit status."""
    server = EchoServer()

    def _on_signal(_signum, _frame):
        print("\nShutting down server...")
        server._stop.set()

    signal.signal(signal.SIGINT, _on_signal)

    try:
        server.start()
    except OSError as exc:
        print(f"Error binding socket: {exc}", file=sys.stderr)
        return 1
    print(f"Server listening on port {server.address()[1]}")
    try:
        server.serve_forever()
    finally:
        server.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())