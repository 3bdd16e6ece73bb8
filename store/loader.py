"""
Line-by-line reader run on the store's load worker.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from tqdm import tqdm

from records import ParseError, Record

from .outcome import LoadReport
from .persistence import ENCODING


logger = logging.getLogger(__name__)


def read_records(
    path: str | Path,
    insert: Callable[[Record], None],
    stop_event: threading.Event,
    show_progress: bool = False,
) -> LoadReport:
    """
    Decode every line of *path* and hand valid records to *insert*.

    Loading is best-effort: undecodable, malformed and invalid lines are
    counted as skipped and never abort the read. *stop_event* is checked
    between lines; once set the read stops and the report is marked
    cancelled.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    report = LoadReport(completed=False)
    with open(path, "rb") as handle:
        lines = tqdm(
            handle,
            desc="Loading records",
            unit="line",
            leave=False,
            disable=not show_progress,
        )
        for line_number, raw in enumerate(lines, start=1):
            if stop_event.is_set():
                report.cancelled = True
                logger.info(f"Load of {path} cancelled after {report.loaded} records")
                return report
            try:
                text = raw.decode(ENCODING)
            except UnicodeDecodeError:
                report.skipped += 1
                logger.debug(f"{path}:{line_number}: not valid {ENCODING}, skipped")
                continue
            if not text.strip():
                continue

            decoded = Record.decode(text)
            if isinstance(decoded, ParseError):
                report.skipped += 1
                logger.debug(f"{path}:{line_number}: {decoded}, skipped")
                continue
            problem = decoded.validate()
            if problem is not None:
                report.skipped += 1
                logger.debug(f"{path}:{line_number}: {problem}, skipped")
                continue

            insert(decoded.normalized())
            report.loaded += 1

    report.completed = True
    logger.info(f"Loaded {report.loaded} records from {path} ({report.skipped} skipped)")
    return report
