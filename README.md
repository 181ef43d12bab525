# aesdsocket

A small threaded TCP server that listens on port 9000. Every chunk a client
sends is appended to a data file, and after each chunk the whole file is sent
back to the client. The connection closes once a chunk that contains a
newline has been handled. In regular-file mode, a background thread adds a
`timestamp:` line to the file every ten seconds.

## Install

    pip install .

## Running the server

    aesdsocket        # run in the foreground
    aesdsocket -d     # detach from the terminal and run as a daemon

By default the data file is `/var/tmp/aesdsocketdata`. If the environment
variable `USE_AESD_CHAR_DEVICE` is set to `1`, the server uses
`/dev/aesdchar` instead. In that mode it writes no timestamps and does not
delete the file when it stops.

SIGINT and SIGTERM stop the server cleanly. It joins its worker threads and,
in regular-file mode, removes the data file. Log messages go to syslog when
`/dev/log` is available and to stderr otherwise.

A second command runs an echo server:

    aesdsocket-echo

It listens on port 8080 over IPv4 and gives each client its own thread.
Every chunk it receives is echoed back and appended to `client.txt`. A
background thread appends the current date to `date.txt` every ten seconds.
SIGINT stops it.

## Library use

- `aesdsocket.server.AesdSocketServer` is the threaded server. Call `start()`
  and then `serve_forever()`, and stop it with `shutdown()`. `address()`
  returns the bound `(host, port)`. `ThreadRegistry` tracks worker threads,
  and `parse_args()` and `daemonize()` support the command.
- `aesdsocket.echo.EchoServer` is the echo server. It has the same
  `start()`, `serve_forever()`, `shutdown()` and `address()` methods.
  `format_ctime()` renders dates in `ctime` form.
- `aesdsocket.datastore.DataStore` guards the data file with a lock and
  handles appending, reading (`contents()`, `chunks()`), timestamps and
  removal. `format_timestamp()` renders a timestamp line.
- `aesdsocket.slist` and `aesdsocket.tailq` hold linked-list containers
  whose membership is by identity: `SList`, `STailQ`, `LinkedList` and
  `TailQueue`.
- `aesdsocket.shannon.ShannonRandom` is a simple seeded pseudo-random
  generator. `randshannon()` draws from a module-wide instance.

## What it does not do

The package has no server that handles each connection in a forked child
process. It also has no server that handles connections one at a time
without threads. Every server here uses threads.

## Tests

    pip install .[test]
    pytest