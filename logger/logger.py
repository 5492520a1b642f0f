import json
import logging
import os
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level="INFO", console=None):
    """Route library log records through rich on the root logger."""
    handler = RichHandler(console=console or Console(stderr=True), rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing, RichHandler):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    return handler


def _utc_now():
    return datetime.now(timezone.utc)


class JSONLogger:
    """Appends run records as JSON lines.

    The main log and the summary log carry `log_file_prefix`; halting and
    non-halting machine dumps get their own files. All names end in the UTC day.
    """

    def __init__(self, output_directory="logs/", log_file_prefix="busybeaver_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(output_directory, exist_ok=True)
        self.rotate()

    def _path(self, stem):
        return os.path.join(self.output_directory, f"{stem}{self.today}.jsonl")

    @staticmethod
    def _append(path, entries):
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                if "timestamp" not in entry:
                    entry = {**entry, "timestamp": _utc_now().isoformat()}
                f.write(json.dumps(entry, default=str, ensure_ascii=False) + "\n")

    def rotate(self):
        """Pick up the current day; later writes go to that day's files."""
        self.today = _utc_now().strftime("%Y-%m-%d")
        self.current_log = self._path(self.log_file_prefix)

    def log(self, entry: dict):
        self._append(self.current_log, [entry])

    def log_batch(self, entries: list):
        self._append(self.current_log, entries)

    def log_summary(self, entries: list):
        """Per-machine results: steps, score, halted."""
        self._append(self._path(f"{self.log_file_prefix}summary_"), entries)

    def log_halting(self, entries: list):
        self._append(self._path("halting_"), entries)

    def log_non_halting(self, entries: list):
        """Machines cut off by the step ceiling, with their full records."""
        self._append(self._path("non_halting_"), entries)
