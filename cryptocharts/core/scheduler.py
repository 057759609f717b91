from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import CancelledError, Future

from apscheduler.schedulers.background import BackgroundScheduler

from cryptocharts.core.errors import SchedulerStopped
from cryptocharts.core.outcome import FetchOutcome

logger = logging.getLogger(__name__)

_Job = tuple[Future, Callable[[], FetchOutcome]]


class RefreshScheduler:
    """
    Runs fetch cycles on one background worker and keeps a handle to the latest one.

    Submitting never blocks: cycles queue behind each other on the single worker,
    so two cycles never run at the same time. `current_outcome()` waits on the
    most recently submitted cycle. The worker is a daemon thread, so process exit
    never waits for an in-flight cycle.
    """

    def __init__(self, run_cycle: Callable[[], FetchOutcome], interval_seconds: float = 600.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")  # noqa: TRY003
        self.run_cycle = run_cycle
        self.interval_seconds = interval_seconds

        self._jobs: queue.SimpleQueue[_Job | None] = queue.SimpleQueue()
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()
        self._latest: Future[FetchOutcome] | None = None
        self._stopped = False
        self._timer: BackgroundScheduler | None = None

    # --- worker -----------------------------------------------------------------

    def _work(self) -> None:
        while True:
            job = self._jobs.get()
            if job is None:
                return
            future, fn = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn())
            except BaseException as e:  # noqa: BLE001
                future.set_exception(e)

    # --- submission -----------------------------------------------------------

    def _submit_locked(self) -> Future[FetchOutcome] | None:
        # Caller holds self._lock
        if self._stopped:
            logger.debug("Scheduler stopped; ignoring refresh request")
            return self._latest
        if self._worker is None:
            self._worker = threading.Thread(target=self._work, name="fetch-cycle", daemon=True)
            self._worker.start()
        future: Future[FetchOutcome] = Future()
        self._jobs.put((future, self.run_cycle))
        self._latest = future
        return future

    def _latest_or_submit(self) -> Future[FetchOutcome] | None:
        with self._lock:
            if self._latest is not None:
                return self._latest
            return self._submit_locked()

    def trigger_now(self) -> None:
        with self._lock:
            self._submit_locked()

    def start(self) -> None:
        with self._lock:
            if self._timer is not None or self._stopped:
                return
            self._submit_locked()
            self._timer = BackgroundScheduler(daemon=True)
            self._timer.add_job(
                self.trigger_now,
                "interval",
                seconds=self.interval_seconds,
                id="refresh",
                coalesce=True,
                max_instances=1,
            )
            self._timer.start()
        logger.info("Refresh scheduler started, interval %.0fs", self.interval_seconds)

    # --- consumer side ----------------------------------------------------------

    def current_outcome(self) -> FetchOutcome:
        future = self._latest_or_submit()
        if future is None:
            return FetchOutcome.failure(SchedulerStopped("No fetch cycle was ever submitted"))
        # Waiting happens outside the lock so new submissions are never held up
        try:
            return future.result()
        except CancelledError:
            return FetchOutcome.failure(SchedulerStopped("Fetch cycle abandoned at shutdown"))

    # --- shutdown ---------------------------------------------------------------

    def shutdown(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.shutdown(wait=False)
        # Drop queued cycles; the in-flight one is left to the daemon worker
        while True:
            try:
                job = self._jobs.get_nowait()
            except queue.Empty:
                break
            if job is not None:
                job[0].cancel()
        self._jobs.put(None)
        logger.info("Refresh scheduler stopped")

    def __enter__(self) -> RefreshScheduler:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.shutdown()
