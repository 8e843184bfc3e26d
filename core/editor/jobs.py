"""
Background Job Runner
Heavy segmentation/reconstruction work off the interactive thread.

Each submit on a channel (usually a source id) gets a new generation
number. Only the latest generation of a channel may publish its result;
older results are discarded rather than merged.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from core.exceptions import StaleJobError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobTicket:
    channel: str
    generation: int
    future: Future


class GenerationJobRunner:
    """Thread pool with per-channel generation tokens."""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cat-job"
        )
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {}
        self._pending: Dict[str, Future] = {}

    def submit(self, channel: str, fn: Callable[..., Any], *args, **kwargs) -> JobTicket:
        """Dispatch a job, superseding any earlier job on the same channel."""
        with self._lock:
            generation = self._generations.get(channel, 0) + 1
            self._generations[channel] = generation
            previous = self._pending.get(channel)
            if previous is not None and previous.cancel():
                logger.debug(f"Cancelled superseded job on {channel}")
            future = self._executor.submit(fn, *args, **kwargs)
            self._pending[channel] = future
        return JobTicket(channel=channel, generation=generation, future=future)

    def supersede(self, channel: str) -> int:
        """Advance a channel's generation without a job, so pending results go stale."""
        with self._lock:
            generation = self._generations.get(channel, 0) + 1
            self._generations[channel] = generation
            previous = self._pending.pop(channel, None)
            if previous is not None and previous.cancel():
                logger.debug(f"Cancelled superseded job on {channel}")
        return generation

    def current_generation(self, channel: str) -> int:
        with self._lock:
            return self._generations.get(channel, 0)

    def is_current(self, ticket: JobTicket) -> bool:
        return self.current_generation(ticket.channel) == ticket.generation

    def wait(self, ticket: JobTicket, timeout: Optional[float] = None) -> Any:
        """
        Block for a job's result.

        Raises:
            StaleJobError: if a newer job was submitted on the channel
            TimeoutError: if the job does not finish in time
        """
        if not self.is_current(ticket):
            raise StaleJobError(f"Job {ticket.generation} on {ticket.channel} was superseded")
        try:
            value = ticket.future.result(timeout=timeout)
        except FutureTimeoutError as e:
            raise TimeoutError(f"Job on {ticket.channel} did not finish in {timeout}s") from e
        if not self.is_current(ticket):
            raise StaleJobError(f"Job {ticket.generation} on {ticket.channel} was superseded")
        return value

    def on_result(self, ticket: JobTicket, callback: Callable[[Any], None]) -> None:
        """Call ``callback(result)`` when the job finishes, unless it was superseded."""

        def _deliver(future: Future) -> None:
            if future.cancelled():
                return
            if not self.is_current(ticket):
                logger.info(
                    f"Discarding stale result for {ticket.channel} (generation {ticket.generation})"
                )
                return
            error = future.exception()
            if error is not None:
                logger.error(f"Background job on {ticket.channel} failed: {error}")
                return
            callback(future.result())

        ticket.future.add_done_callback(_deliver)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
