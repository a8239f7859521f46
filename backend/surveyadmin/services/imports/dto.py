"""DTOs for CsvBatchImporter."""

from __future__ import annotations

from dataclasses import dataclass, field

from surveyadmin.services.registration.dto import RegisteredSubject, SubjectStatus


@dataclass(frozen=True, slots=True)
class ImportLineResult:
    """
    Outcome of one CSV data row.

    :param line: 1-based physical line number (skipped lines count).
    :param subject: Registered subject on success.
    :param error: ``"Line {n}: {message}"`` on failure.
    """

    line: int
    subject: RegisteredSubject | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> SubjectStatus | None:
        return self.subject.status if self.subject is not None else None

    @classmethod
    def failed(cls, line: int, message: str) -> ImportLineResult:
        return cls(line=line, error=f"Line {line}: {message}")


@dataclass(slots=True)
class BulkImportResult:
    """Ordered per-line outcomes of one import, one entry per data row."""

    lines: list[ImportLineResult] = field(default_factory=list)

    def add(self, outcome: ImportLineResult) -> None:
        self.lines.append(outcome)

    @property
    def processed(self) -> int:
        return len(self.lines)

    @property
    def imported(self) -> int:
        return sum(1 for line in self.lines if line.ok)

    @property
    def statuses(self) -> list[RegisteredSubject]:
        return [line.subject for line in self.lines if line.subject is not None]

    @property
    def errors(self) -> list[str]:
        return [line.error for line in self.lines if line.error is not None]

    @property
    def message(self) -> str:
        errors = len(self.errors)
        noun = "line error" if errors == 1 else "line errors"
        return f"Imported {self.imported} of {self.processed} rows; {errors} {noun}"
