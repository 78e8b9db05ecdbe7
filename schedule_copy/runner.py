"""Run copies once or every time a cron schedule fires."""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from .config import CopyConfig
from .copy_manager import CopyManager, CopyResult, format_duration
from .schedule_checker import ScheduleChecker

logger = logging.getLogger(__name__)


class CopyScheduler:
    """Drives CopyManager.try_copy from a cron schedule."""

    def __init__(
        self,
        config: CopyConfig,
        manager: Optional[CopyManager] = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
        output: Callable[[str], None] = print,
    ):
        self.config = config
        self.manager = manager or CopyManager(config)
        self.sleep = sleep
        self.now = now
        self.output = output
        self.results: List[CopyResult] = []

    def run(self) -> List[CopyResult]:
        """Copy once, or loop over the schedule when a cron expression is set."""
        if not self.config.is_scheduled:
            self.results.append(self.manager.try_copy())
            return self.results

        logger.debug(f"parsing cron expression: {self.config.cron_expr}")
        for run_count, fire_time in enumerate(
            ScheduleChecker.upcoming(self.config.cron_expr, self.now()), start=1
        ):
            self.wait_until(fire_time)
            self.run_once()
            if self.config.max_runs is not None and run_count >= self.config.max_runs:
                logger.info(f"reached {self.config.max_runs} scheduled runs, stopping")
                break

        return self.results

    def wait_until(self, fire_time: datetime) -> None:
        """Sleep until fire_time; return at once if it has already passed."""
        now = self.now()
        if fire_time <= now:
            return

        duration = (fire_time - now).total_seconds()
        logger.info(
            f"waiting {format_duration(duration)} for next date time: {fire_time}"
        )
        self.output(f"Waiting {int(duration)} seconds until {fire_time} to start")
        self.sleep(duration)

    def run_once(self) -> CopyResult:
        start = self.now()
        sources = ",".join(str(p) for p in self.config.source_paths)
        self.output(f"Copying from {sources} to {self.config.destination_path}")

        result = self.manager.try_copy()
        self.results.append(result)

        elapsed = (self.now() - start).total_seconds()
        self.output(f"Copy finished in {format_duration(elapsed)}")
        return result
