"""Schedule checking logic for cron-based copy scheduling."""

from datetime import datetime
from typing import Iterator

from croniter import croniter


class ScheduleChecker:
    """Handles evaluation of cron schedules."""

    @staticmethod
    def create_iterator(schedule: str, start_time: datetime = None) -> croniter:
        """
        Build a croniter for a schedule.

        Six-field expressions carry a leading seconds field
        ('second minute hour day-of-month month day-of-week'). Numeric
        weekdays always use the standard cron numbering: 0 or 7 is Sunday,
        1 is Monday, up to 6 for Saturday. Names such as 'mon' are accepted.

        Args:
            schedule: Cron schedule string
            start_time: Time to iterate from (defaults to now)

        Returns:
            The croniter instance
        """
        if start_time is None:
            start_time = datetime.now()

        schedule = schedule.strip()
        if len(schedule.split()) == 6:
            return croniter(schedule, start_time, second_at_beginning=True)
        return croniter(schedule, start_time)

    @staticmethod
    def next_run_time(schedule: str, current_time: datetime = None) -> datetime:
        """
        Get the next time the schedule fires.

        Args:
            schedule: Cron schedule string
            current_time: Current time (defaults to now)

        Returns:
            Next scheduled run time
        """
        try:
            cron = ScheduleChecker.create_iterator(schedule, current_time)
            return cron.get_next(datetime)
        except Exception as e:
            raise ValueError(f"Error calculating next run time for '{schedule}': {e}")

    @staticmethod
    def upcoming(schedule: str, start_time: datetime = None) -> Iterator[datetime]:
        """
        Yield every fire time after start_time, in order, forever.

        All values come from a single iterator, so a slow consumer does not
        shift later fire times.
        """
        try:
            cron = ScheduleChecker.create_iterator(schedule, start_time)
        except Exception as e:
            raise ValueError(f"Error evaluating schedule '{schedule}': {e}")

        while True:
            yield cron.get_next(datetime)

    @staticmethod
    def validate_schedule_format(schedule: str) -> bool:
        """
        Validate that a schedule string is a valid cron expression.

        Args:
            schedule: Cron schedule string

        Returns:
            True if valid, False otherwise
        """
        if len(schedule.split()) not in (5, 6):
            return False
        try:
            ScheduleChecker.create_iterator(schedule)
            return True
        except Exception:
            return False
