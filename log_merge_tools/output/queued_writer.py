"""
Queued Line Writer - print lines from a dedicated writer thread

The merge loop produces lines much faster than a console (or a slow disk)
accepts them. QueuedLineWriter decouples the two: the producer puts lines into
a bounded queue and a single writer thread takes them off and writes them to a
buffered text stream, without a flush per line.

The queue capacity is the only backpressure mechanism: when the writer falls
behind by ``capacity`` lines, enqueue() blocks the producer until there is room
again, so memory use stays bounded whatever the output speed.

Usage:

    with QueuedLineWriter(sys.stdout) as writer:
        for line in lines:
            writer.enqueue(line)
    # every enqueued line has been written and flushed here

Only one producer thread is supported.
"""

import queue
import sys
import threading
from typing import Optional, TextIO

# Maximum number of lines waiting to be written.
QUEUE_CAPACITY = 10_000

# Marks the end of the stream; compared by identity so no real line can match it.
_END_OF_STREAM = object()


class QueuedLineWriter:
    """
    Bounded single-producer/single-consumer line writer.

    Args:
        out: Text stream to write to (default: sys.stdout at start() time)
        capacity: Maximum number of lines held in the queue
    """

    def __init__(self, out: Optional[TextIO] = None, capacity: int = QUEUE_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.out = out
        self.capacity = capacity
        self.lines_written = 0
        self.error: Optional[BaseException] = None

        self._queue: "queue.Queue" = queue.Queue(maxsize=capacity)
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.shutdown()
        else:
            # Don't mask the original exception with a write error
            try:
                self.shutdown()
            except Exception:  # pylint: disable=broad-except
                pass

    def start(self):
        """Start the writer thread."""
        if self._thread is not None:
            raise RuntimeError("QueuedLineWriter already started")
        if self.out is None:
            self.out = sys.stdout
        self._thread = threading.Thread(target=self._run, name="queued-line-writer", daemon=True)
        self._thread.start()

    def pending(self) -> int:
        """Approximate number of lines waiting in the queue."""
        return self._queue.qsize()

    def enqueue(self, line: str):
        """
        Queue one line (without trailing newline) for output.

        Blocks while the queue is full.

        Raises:
            OSError: (or whatever the stream raised) once a write has failed,
                so the producer stops instead of reading the rest of its input.
        """
        if self._closed:
            raise RuntimeError("enqueue() called after shutdown()")
        if self.error is not None:
            raise self.error
        self._queue.put(line)

    def shutdown(self):
        """
        Signal end of stream and wait until everything queued so far is written.

        Raises:
            OSError: (or whatever the stream raised) if writing failed; lines
                queued after the failure were discarded.
        """
        if self._closed:
            return
        self._closed = True
        if self._thread is None:
            return
        self._queue.put(_END_OF_STREAM)
        self._thread.join()
        if self.error is not None:
            raise self.error

    def _run(self):
        out = self.out
        while True:
            line = self._queue.get()
            if line is _END_OF_STREAM:
                break
            if self.error is not None:
                # Keep draining so a producer blocked in put() wakes up
                continue
            try:
                out.write(line)
                out.write("\n")
                self.lines_written += 1
            except Exception as e:  # pylint: disable=broad-except
                self.error = e

        if self.error is None:
            try:
                out.flush()
            except Exception as e:  # pylint: disable=broad-except
                self.error = e
