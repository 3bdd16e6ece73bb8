"""
File-backed record repository.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures import wait
from pathlib import Path
from types import TracebackType

from records import Record

from .loader import read_records
from .outcome import ErrorKind, LoadReport, StoreResult
from .persistence import ensure_file, write_lines_atomic


logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT_S = 5.0


class RecordStore:
    """
    Authoritative keyed collection of Records backed by a delimited text file.

    The map is shared between the caller's thread and a single load worker and
    is guarded by one lock; every read, insert and remove is a single critical
    section. ``load`` runs on the worker with a bounded wait, ``save`` runs on
    the caller.
    """

    path: Path
    load_timeout_s: float
    show_progress: bool

    def __init__(
        self,
        path: str | Path,
        load_timeout_s: float = DEFAULT_LOAD_TIMEOUT_S,
        show_progress: bool = False,
    ) -> None:
        self.path = Path(path)
        self.load_timeout_s = load_timeout_s
        self.show_progress = show_progress
        self._records: dict[int, Record] = {}
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="record-loader")
        self._load_future: Future[LoadReport] | None = None
        self._stop_event = threading.Event()
        self._closed = False

    def __enter__(self) -> RecordStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    # ------------------------------------------------------------------
    # Interactive operations
    # ------------------------------------------------------------------

    def _validate(self, record: object, check_duplicate: bool) -> str | None:
        if not isinstance(record, Record):
            return "A Record is required"
        problem = record.validate()
        if problem is not None:
            return problem
        if check_duplicate and record.id in self._records:
            return f"Duplicate record ID: {record.id}"
        return None

    def add(self, record: Record) -> StoreResult[Record]:
        with self._lock:
            problem = self._validate(record, check_duplicate=True)
            if problem is not None:
                return StoreResult.fail(ErrorKind.VALIDATION, problem)
            stored = record.normalized()
            self._records[stored.id] = stored
        logger.debug(f"Added record {stored.id}")
        return StoreResult.ok(stored)

    def update(self, record: Record) -> StoreResult[Record]:
        """Replace the stored record with the same id. Fields are not merged."""
        if not isinstance(record, Record):
            return StoreResult.fail(ErrorKind.VALIDATION, "A Record is required")
        with self._lock:
            if record.id not in self._records:
                return StoreResult.fail(
                    ErrorKind.NOT_FOUND, f"Record not found with ID: {record.id}"
                )
            problem = self._validate(record, check_duplicate=False)
            if problem is not None:
                return StoreResult.fail(ErrorKind.VALIDATION, problem)
            stored = record.normalized()
            self._records[stored.id] = stored
        logger.debug(f"Updated record {stored.id}")
        return StoreResult.ok(stored)

    def delete(self, record_id: int) -> StoreResult[None]:
        with self._lock:
            if self._records.pop(record_id, None) is None:
                return StoreResult.fail(
                    ErrorKind.NOT_FOUND, f"Record not found with ID: {record_id}"
                )
        logger.debug(f"Deleted record {record_id}")
        return StoreResult.ok()

    def find_by_id(self, record_id: int) -> StoreResult[Record]:
        with self._lock:
            record = self._records.get(record_id)
        if record is None:
            return StoreResult.fail(ErrorKind.NOT_FOUND, f"Record not found with ID: {record_id}")
        return StoreResult.ok(record)

    def list_all(self) -> list[Record]:
        """Snapshot of all resident records in no particular order."""
        with self._lock:
            return list(self._records.values())

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        future = self._load_future
        return future is not None and not future.done()

    def _run_load(self) -> LoadReport:
        inserted: dict[int, Record] = {}

        def insert(record: Record) -> None:
            with self._lock:
                self._records[record.id] = record
                inserted[record.id] = record

        try:
            return read_records(self.path, insert, self._stop_event, self.show_progress)
        except OSError as exc:
            # Drop only what this load put in; records written by callers since stay.
            with self._lock:
                for record_id, record in inserted.items():
                    if self._records.get(record_id) is record:
                        del self._records[record_id]
            logger.warning(f"Cannot read {self.path}: {exc}; discarding the partial load")
            raise

    def load(self) -> StoreResult[LoadReport]:
        """
        Replace the store's contents with the records in the backing file.

        A missing file is created empty. Otherwise the file is read on the
        load worker and the caller waits at most ``load_timeout_s``. A load
        that outlives the wait keeps running and the report comes back with
        ``completed=False``; use ``wait_for_load`` for the completion notice.
        A call made while a load is in flight re-joins that load.
        """
        if self._closed:
            return StoreResult.fail(ErrorKind.IO, "Store is closed")

        with self._lock:
            future = self._load_future
            if future is not None and not future.done():
                logger.info(f"Load of {self.path} already in progress; waiting on it")
            else:
                self._records.clear()
                try:
                    created = ensure_file(self.path)
                except OSError as exc:
                    logger.warning(f"Cannot create {self.path}: {exc}")
                    return StoreResult.fail(ErrorKind.IO, f"Cannot create {self.path}: {exc}")
                if created:
                    logger.info(f"Created empty data file {self.path}")
                    return StoreResult.ok(LoadReport(created=True))
                future = self._executor.submit(self._run_load)
                self._load_future = future

        return self._await_load(future)

    def _await_load(self, future: Future[LoadReport]) -> StoreResult[LoadReport]:
        try:
            report = future.result(timeout=self.load_timeout_s)
        except FutureTimeoutError:
            logger.warning(
                f"Loading {self.path} is taking longer than {self.load_timeout_s:g}s; "
                "continuing while it finishes in the background"
            )
            return StoreResult.ok(LoadReport(completed=False))
        except CancelledError:
            return StoreResult.fail(ErrorKind.IO, f"Load of {self.path} was cancelled")
        except OSError as exc:
            return StoreResult.fail(ErrorKind.IO, f"Cannot read {self.path}: {exc}")
        return StoreResult.ok(report)

    def wait_for_load(self, timeout: float | None = None) -> bool:
        """Block until the in-flight load finishes. Returns False on timeout."""
        future = self._load_future
        if future is None:
            return True
        done, _ = wait([future], timeout=timeout)
        return future in done

    def save(self) -> StoreResult[int]:
        """
        Write every resident record to the backing file, replacing it in full.

        Returns the number of records written. The write goes through a
        temporary file and an atomic rename; see ``write_lines_atomic`` for
        the weaker copy fallback.
        """
        if self.is_loading:
            return StoreResult.fail(
                ErrorKind.IO, f"Load of {self.path} still in progress; not saving"
            )

        with self._lock:
            records = sorted(self._records.values(), key=lambda record: record.id)

        for record in records:
            if record.has_lossy_name():
                logger.warning(
                    f"Record {record.id} has a name with a delimiter or line break "
                    "and will be dropped on the next load"
                )

        try:
            used_fallback = write_lines_atomic(self.path, (record.encode() for record in records))
        except OSError as exc:
            logger.warning(f"Failed writing {self.path}: {exc}")
            return StoreResult.fail(ErrorKind.IO, f"Failed writing {self.path}: {exc}")

        if used_fallback:
            logger.info(f"Saved (fallback copy) {len(records)} records to {self.path}")
        else:
            logger.info(f"Saved {len(records)} records to {self.path}")
        return StoreResult.ok(len(records))

    def close(self) -> None:
        """Stop any in-flight load and release the load worker."""
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()
        self._executor.shutdown(wait=False, cancel_futures=True)
