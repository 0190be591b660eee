"""Bidirectional relay between the outer terminal and the PTY master.

Two pump threads move bytes in one direction each. Whichever pump sees end of
stream first writes to a stop pipe that is never drained, so every waiter
(the other pump and the main thread) wakes up and returns.
"""

import logging
import os
import queue
import selectors
import threading
from collections.abc import Callable, Sequence

from ptyscribe.constants import READ_CHUNK_SIZE
from ptyscribe.fdio import read_chunk, write_exact
from ptyscribe.models import PtySession
from ptyscribe.session.resize import ResizePropagator
from ptyscribe.session.transcript import Transcript

log = logging.getLogger(__name__)

INPUT_PUMP = "input"
OUTPUT_PUMP = "output"

Sink = Callable[[bytes], None]


def _select(selector: selectors.BaseSelector) -> list:
    """Wait for readiness, re-issuing the wait if a signal interrupts it."""
    while True:
        try:
            return selector.select()
        except InterruptedError:
            continue


class Multiplexer:
    """Relay stdin to the PTY and PTY output to stdout plus the transcript."""

    def __init__(
        self,
        stdin_fd: int,
        stdout_fd: int,
        session: PtySession,
        transcript: Transcript,
        chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.session = session
        self.transcript = transcript
        self.chunk_size = chunk_size
        self._finished: queue.Queue[tuple[str, BaseException | None]] = queue.Queue()

    def _input_sinks(self) -> list[Sink]:
        master_fd = self.session.master_fd
        return [lambda data: write_exact(master_fd, data, "master pty")]

    def _output_sinks(self) -> list[Sink]:
        # Terminal first, then transcript.
        stdout_fd = self.stdout_fd
        return [
            lambda data: write_exact(stdout_fd, data, "stdout"),
            self.transcript.write,
        ]

    def _pump(
        self, name: str, source_fd: int, sinks: Sequence[Sink], stop_r: int, stop_w: int
    ) -> None:
        error: BaseException | None = None
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(source_fd, selectors.EVENT_READ, "source")
                selector.register(stop_r, selectors.EVENT_READ, "stop")
                while True:
                    ready = {key.data for key, _ in _select(selector)}
                    if "stop" in ready:
                        log.debug("%s pump stopped", name)
                        break
                    data = read_chunk(source_fd, self.chunk_size)
                    if not data:
                        log.debug("%s pump reached end of stream", name)
                        break
                    for sink in sinks:
                        sink(data)
        except BaseException as e:
            error = e
        finally:
            self._finished.put((name, error))
            os.write(stop_w, b"\x00")

    def run(self, resize: ResizePropagator | None = None) -> str:
        """Relay until either direction ends; return the pump that ended first.

        Must be called from the main thread when ``resize`` is given, since
        resize notifications are serviced here.
        """
        stop_r, stop_w = os.pipe()
        pumps = [
            threading.Thread(
                target=self._pump,
                args=(INPUT_PUMP, self.stdin_fd, self._input_sinks(), stop_r, stop_w),
                name="ptyscribe-input",
                daemon=True,
            ),
            threading.Thread(
                target=self._pump,
                args=(OUTPUT_PUMP, self.session.master_fd, self._output_sinks(), stop_r, stop_w),
                name="ptyscribe-output",
                daemon=True,
            ),
        ]
        try:
            for pump in pumps:
                pump.start()
            with selectors.DefaultSelector() as selector:
                selector.register(stop_r, selectors.EVENT_READ, "stop")
                if resize is not None:
                    selector.register(resize.fileno(), selectors.EVENT_READ, "resize")
                while True:
                    ready = {key.data for key, _ in _select(selector)}
                    if "resize" in ready:
                        resize.handle_pending()
                    if "stop" in ready:
                        break
        finally:
            os.write(stop_w, b"\x00")
            for pump in pumps:
                if pump.ident is not None:
                    pump.join()
            os.close(stop_r)
            os.close(stop_w)

        return self._first_finished()

    def _first_finished(self) -> str:
        results = []
        while True:
            try:
                results.append(self._finished.get_nowait())
            except queue.Empty:
                break
        for name, error in results:
            if error is not None:
                log.critical("%s pump failed: %s", name, error)
                raise error
        first = results[0][0]
        log.debug("session ended by %s pump", first)
        return first
