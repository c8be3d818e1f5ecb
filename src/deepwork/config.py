"""File locations and display settings for deepwork."""

from pathlib import Path

DEEPWORK_LOG = ".dw.csv"
DEEPWORK_TMP = ".dw.tmp"

# Completed sessions, one CSV record per line
LOG_PATH = Path.home() / DEEPWORK_LOG
# Present only while a session is running
ACTIVE_PATH = Path.home() / DEEPWORK_TMP

TIME_FMT = "%H:%M:%S"
