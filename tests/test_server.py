import socket
import threading
import time

import pytest

from aesdsocket.datastore import DataStore
from aesdsocket.server import AesdSocketServer, ThreadRegistry, parse_args


def _read_until_closed(sock):
    parts = []
    while True:
        block = sock.recv(4096)
        if not block:
            break
        parts.append(block)
    return b"".join(parts)


def _read_exactly(sock, count):
    data = b""
    while len(data) < count:
        block = sock.recv(count - len(data))
        if not block:
            break
        data += block
    return data


@pytest.fixture
def running(tmp_path):
    servers = []

    def factory(timestamps=False, interval=10.0):
        store = DataStore(tmp_path / "data")
        server = AesdSocketServer(store, host="127.0.0.1", port=0,
                                  timestamps=timestamps, interval=interval)
        server.start()
        loop = threading.Thread(target=server.serve_forever, daemon=True)
        loop.start()
        servers.append((server, loop))
        return server

    yield factory
    for server, loop in servers:
        server.shutdown()
        loop.join(timeout=5)


def _exchange(address, payload):
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(payload)
        return _read_until_closed(client)


def test_registry_joins_and_empties():
    registry = ThreadRegistry()
    done = []
    threads = [threading.Thread(target=done.append, args=(i,)) for i in range(3)]
    for thread in threads:
        thread.start()
        registry.add(thread)
    assert len(registry) == 3
    registry.join_all()
    assert len(registry) == 0
    assert sorted(done) == [0, 1, 2]
    assert all(not thread.is_alive() for thread in threads)


def test_parse_args_daemon_flag():
    assert parse_args(["-d"]).daemon is True
    assert parse_args([]).daemon is False
    assert parse_args(["-x", "-d"]).daemon is True


def test_address_before_start_raises(tmp_path):
    server = AesdSocketServer(DataStore(tmp_path / "data"), host="127.0.0.1", port=0)
    with pytest.raises(RuntimeError):
        server.address()
    with pytest.raises(RuntimeError):
        server.serve_forever()


def test_handle_client_echoes_store(tmp_path):
    store = DataStore(tmp_path / "data")
    server = AesdSocketServer(store, timestamps=False)
    left, right = socket.socketpair()
    worker = threading.Thread(target=server.handle_client, args=(right,))
    worker.start()
    left.settimeout(5)
    left.sendall(b"hello\n")
    assert _read_until_closed(left) == b"hello\n"
    worker.join(timeout=5)
    left.close()
    assert store.contents() == b"hello\n"


def test_partial_packet_then_newline(tmp_path):
    store = DataStore(tmp_path / "data")
    server = AesdSocketServer(store, timestamps=False)
    left, right = socket.socketpair()
    worker = threading.Thread(target=server.handle_client, args=(right,))
    worker.start()
    left.settimeout(5)
    left.sendall(b"abc")
    assert _read_exactly(left, 3) == b"abc"
    left.sendall(b"def\n")
    assert _read_until_closed(left) == b"abcdef\n"
    worker.join(timeout=5)
    left.close()
    assert store.contents() == b"abcdef\n"


def test_connections_accumulate(running):
    server = running()
    host, port = server.address()
    assert port > 0
    first = _exchange((host, port), b"one\n")
    second = _exchange((host, port), b"two\n")
    assert first == b"one\n"
    assert second == b"one\ntwo\n"


def test_data_after_nul_is_dropped(running):
    server = running()
    reply = _exchange(server.address(), b"keep\n\0drop")
    assert reply == b"keep\n"


def test_timestamps_written_and_file_removed(running, tmp_path):
    server = running(timestamps=True, interval=0.05)
    path = tmp_path / "data"
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        if path.exists() and b"timestamp:" in path.read_bytes():
            break
        time.sleep(0.05)
    assert server.store.contents().startswith(b"timestamp:")
    server.shutdown()
    assert not path.exists()
    assert len(server.threads) == 0


def test_file_kept_without_timestamps(running):
    server = running()
    reply = _exchange(server.address(), b"stay\n")
    server.shutdown()
    assert reply == b"stay\n"
    assert server.store.contents() == b"stay\n"
    assert len(server.threads) == 0


def test_shutdown_is_idempotent(running):
    server = running()
    reply = _exchange(server.address(), b"x\n")
    server.shutdown()
    server.shutdown()
    assert reply == b"x\n"
    assert server.store.contents() == b"x\n"
    with pytest.raises(OSError):
        server.address()