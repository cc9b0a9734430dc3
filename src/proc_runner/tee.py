"""Pipe-backed stderr duplicator: forward live, keep a copy."""

import codecs
import io
import os
import sys
import threading

CHUNK_SIZE = 64 * 1024


class Tee:
    """Capture bytes written to ``fileno()`` while forwarding them to *sink*.

    The write end of an OS pipe is handed to a child process. A pump thread
    drains the read end into an unbounded buffer and echoes every chunk to
    *sink* (``sys.stderr`` at write time when not given), so the operator
    still sees the output live.
    """

    def __init__(self, sink=None) -> None:
        self._sink = sink
        self._forwarding = True
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = bytearray()
        self._lock = threading.Lock()
        self._read_fd, self._write_fd = os.pipe()
        self._output: bytes | None = None
        self._thread = threading.Thread(target=self._pump, name="stderr-tee", daemon=True)
        self._thread.start()

    def fileno(self) -> int:
        return self._write_fd

    def _pump(self) -> None:
        while True:
            chunk = os.read(self._read_fd, CHUNK_SIZE)
            if not chunk:
                if self._forwarding:
                    try:
                        self._flush_text()
                    except (OSError, ValueError):
                        self._forwarding = False
                return
            with self._lock:
                self._buffer.extend(chunk)
            if self._forwarding:
                try:
                    self._forward(chunk)
                except (OSError, ValueError):
                    # Sink is gone; keep draining so the child never blocks.
                    self._forwarding = False

    def _forward(self, chunk: bytes) -> None:
        sink = self._sink if self._sink is not None else sys.stderr
        if isinstance(sink, io.TextIOBase):
            binary = getattr(sink, "buffer", None)
            if binary is None:
                # Multibyte characters may straddle two reads
                sink.write(self._decoder.decode(chunk))
            else:
                sink.flush()
                binary.write(chunk)
                binary.flush()
        else:
            sink.write(chunk)
        sink.flush()

    def _flush_text(self) -> None:
        tail = self._decoder.decode(b"", final=True)
        if tail:
            sink = self._sink if self._sink is not None else sys.stderr
            sink.write(tail)
            sink.flush()

    def close_writer(self) -> None:
        """Close the parent's copy of the write end."""
        if self._write_fd != -1:
            os.close(self._write_fd)
            self._write_fd = -1

    def get_output(self) -> bytes:
        """Wait for every writer to close the pipe and return what was captured."""
        if self._output is None:
            self.close_writer()
            self._thread.join()
            os.close(self._read_fd)
            with self._lock:
                self._output = bytes(self._buffer)
        return self._output

    def __enter__(self) -> "Tee":
        return self

    def __exit__(self, *exc_info) -> None:
        self.get_output()
