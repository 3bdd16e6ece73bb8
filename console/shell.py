"""Interactive menu shell around a RecordStore."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import typer

from records import Record
from store import RecordStore, StoreResult


logger = logging.getLogger(__name__)

MENU = """
=== MENU ===
1. Add Record
2. Update Record
3. Delete Record
4. Search Record by ID
5. View All Records
6. View Records Sorted by Score
7. Save Now
0. Exit and Save"""


def by_id(records: Iterable[Record]) -> list[Record]:
    return sorted(records, key=lambda record: record.id)


def ranked(records: Iterable[Record]) -> list[Record]:
    """Highest score first; equal scores keep their incoming order."""
    return sorted(records, key=lambda record: record.score, reverse=True)


def _error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)


def _report_failure(result: StoreResult[object]) -> None:
    if result.is_validation_error:
        _error(f"Validation failed: {result.error}")
    else:
        _error(str(result.error))


class RecordShell:
    """Menu loop: one command token per turn, one store call per command."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self._load_failed = False
        self._handlers: dict[str, Callable[[], object]] = {
            "1": self.handle_add,
            "2": self.handle_update,
            "3": self.handle_delete,
            "4": self.handle_search,
            "5": self.handle_view_all,
            "6": self.handle_sort_by_score,
            "7": self.handle_save,
        }

    # ------------------------------------------------------------------
    # Input helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _ask(text: str) -> str:
        return str(typer.prompt(text, default="", show_default=False)).strip()

    def _ask_int(self, text: str) -> int | None:
        raw = self._ask(text)
        try:
            return int(raw)
        except ValueError:
            _error("Invalid numeric input.")
            return None

    def _ask_float(self, text: str) -> float | None:
        raw = self._ask(text)
        try:
            return float(raw)
        except ValueError:
            _error("Invalid numeric input.")
            return None

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def start(self) -> None:
        result = self.store.load()
        if not result:
            logger.error(f"Initial load failed: {result.error}")
            self._load_failed = True
            _error(f"Error during initial load: {result.error}")
            return
        report = result.value
        if report is not None and not report.completed:
            typer.secho(
                "Loading is taking longer than expected; continuing...",
                fg=typer.colors.YELLOW,
            )
        elif report is not None and report.created:
            typer.echo(f"Created new data file {self.store.path}")
        elif report is not None:
            typer.echo(f"Loaded {report.loaded} records from {self.store.path}")
            if report.skipped:
                typer.secho(f"Skipped {report.skipped} malformed lines", fg=typer.colors.YELLOW)

    def run(self) -> bool:
        """Run until exit. Returns False if the final save failed."""
        self.start()
        while True:
            typer.echo(MENU)
            try:
                choice = self._ask("Choose")
                if choice == "0":
                    break
                handler = self._handlers.get(choice)
                if handler is None:
                    typer.echo("Invalid option. Try again.")
                    continue
                handler()
            except typer.Abort:
                # End of input behaves like choosing exit.
                typer.echo()
                break
        return self.handle_exit()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def handle_add(self) -> None:
        record_id = self._ask_int("Enter ID")
        if record_id is None:
            return
        name = self._ask("Enter name")
        score = self._ask_float("Enter score (0-100)")
        if score is None:
            return
        result = self.store.add(Record(id=record_id, name=name, score=score))
        if result and result.value is not None:
            typer.echo(f"Record added: {result.value.describe()}")
        else:
            _report_failure(result)

    def handle_update(self) -> None:
        record_id = self._ask_int("Enter ID to update")
        if record_id is None:
            return
        found = self.store.find_by_id(record_id)
        if not found or found.value is None:
            _report_failure(found)
            return
        existing = found.value
        typer.echo(f"Existing: {existing.describe()}")

        name = self._ask("New name (leave blank to keep)") or existing.name
        raw_score = self._ask("New score (leave blank to keep)")
        if raw_score:
            try:
                score = float(raw_score)
            except ValueError:
                _error("Invalid numeric input.")
                return
        else:
            score = existing.score

        result = self.store.update(Record(id=existing.id, name=name, score=score))
        if result and result.value is not None:
            typer.echo(f"Record updated: {result.value.describe()}")
        else:
            _report_failure(result)

    def handle_delete(self) -> None:
        record_id = self._ask_int("Enter ID to delete")
        if record_id is None:
            return
        result = self.store.delete(record_id)
        if result:
            typer.echo(f"Record deleted: ID={record_id}")
        else:
            _report_failure(result)

    def handle_search(self) -> None:
        record_id = self._ask_int("Enter ID to search")
        if record_id is None:
            return
        result = self.store.find_by_id(record_id)
        if result and result.value is not None:
            typer.echo(f"Found: {result.value.describe()}")
        else:
            _report_failure(result)

    def handle_view_all(self) -> None:
        records = self.store.list_all()
        if not records:
            typer.echo("No records available.")
            return
        typer.echo("\n--- All Records ---")
        for record in by_id(records):
            typer.echo(record.describe())

    def handle_sort_by_score(self) -> None:
        records = self.store.list_all()
        if not records:
            typer.echo("No records available.")
            return
        typer.echo("\n--- Records Sorted by Score (High -> Low) ---")
        for record in ranked(records):
            typer.echo(record.describe())

    def handle_save(self) -> bool:
        if self._load_failed:
            # The file was never read; writing the store would replace it with nothing.
            _error(f"Initial load failed; not saving to avoid overwriting {self.store.path}")
            return False
        result = self.store.save()
        if result:
            typer.echo(f"Saved {result.value} records to {self.store.path}")
            return True
        logger.error(f"Save failed: {result.error}")
        _error(f"Failed to save data: {result.error}")
        return False

    def handle_exit(self) -> bool:
        if self.store.is_loading:
            typer.echo("Waiting for loading to finish...")
            self.store.wait_for_load(self.store.load_timeout_s)
        typer.echo("Saving data before exit...")
        saved = self.handle_save()
        typer.echo("Goodbye.")
        return saved
