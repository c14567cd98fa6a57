from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from .service import MaintenanceService

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    run: Callable[[], object]
    initial_delay: float
    interval: float = DAY_SECONDS


class MaintenanceScheduler:
    """Runs maintenance jobs on daemon threads: initial delay, then a fixed interval.

    A failing run is logged and the loop keeps going. A run in progress is
    not interrupted by stop().
    """

    def __init__(
        self,
        service: MaintenanceService,
        *,
        missing_checkout_delay: float = 5 * 60,
        retention_delay: float = 6 * 60,
        promotion_delay: float = 0,
        interval: float = DAY_SECONDS,
    ):
        self._jobs = [
            ScheduledJob("grade-promotion", service.promote_grades, promotion_delay, interval),
            ScheduledJob("missing-checkouts", service.mark_missing_checkouts, missing_checkout_delay, interval),
            ScheduledJob("retention", service.prune_retention, retention_delay, interval),
        ]
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    @property
    def jobs(self) -> list[ScheduledJob]:
        return list(self._jobs)

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        if self._threads:
            return
        self._stop.clear()
        for job in self._jobs:
            t = threading.Thread(target=self._loop, args=(job,), name=f"maintenance-{job.name}", daemon=True)
            t.start()
            self._threads.append(t)
        logger.info("Maintenance scheduler started (%d jobs)", len(self._jobs))

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads.clear()

    def run_once(self, job: ScheduledJob) -> bool:
        try:
            job.run()
            return True
        except Exception:
            logger.exception("Maintenance job %s failed", job.name)
            return False

    def _loop(self, job: ScheduledJob) -> None:
        if self._stop.wait(job.initial_delay):
            return
        while True:
            self.run_once(job)
            if self._stop.wait(job.interval):
                return
