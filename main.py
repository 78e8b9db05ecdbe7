#!/usr/bin/env python3
"""
schedule-copy: Copy missing files between directory trees on a cron schedule.

Main entry point for running from a checkout.
"""

import sys

from schedule_copy.cli import main

if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
