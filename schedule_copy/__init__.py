"""
schedule-copy: Copy missing files between directory trees on a cron schedule.

This package walks one or more source directories, works out which files are
not yet present at the destination and copies them in parallel, either once
or every time a cron expression fires.
"""

__version__ = "0.1.0"
