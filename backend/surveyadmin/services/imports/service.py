"""
CsvBatchImporter
================

Registers every data row of a CSV upload through :class:`SubjectRegistrar`.

- The whole stream is decoded first; an unreadable stream fails the call.
- Blank lines and ``#`` comments are skipped but still counted for line numbers.
- Each row commits (or fails) on its own; failures are reported per line.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import IO, Union

from surveyadmin.services._shared.errors import InvalidImportError
from surveyadmin.services.imports.dto import BulkImportResult, ImportLineResult
from surveyadmin.services.imports.parser import RowError, parse_row
from surveyadmin.services.registration.service import SubjectRegistrar

log = logging.getLogger(__name__)

ImportSource = Union[bytes, str, IO[bytes], IO[str], Iterable[str], Iterable[bytes]]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def read_text(stream: ImportSource) -> str:
    """
    Decode ``stream`` to text (UTF-8, BOM tolerated).

    :raises InvalidImportError: On undecodable bytes or I/O failure.
    """
    try:
        if isinstance(stream, (bytes, bytearray, str)):
            data = stream
        elif hasattr(stream, "read"):
            data = stream.read()
        else:
            data = "".join(_as_line(part) for part in stream)
        text = data.decode("utf-8-sig") if isinstance(data, (bytes, bytearray)) else data
    except UnicodeDecodeError as exc:
        raise InvalidImportError("CSV file is not valid UTF-8") from exc
    except OSError as exc:
        raise InvalidImportError(f"Unable to read CSV stream: {exc}") from exc
    return text.removeprefix("\ufeff")


def _as_line(part: str | bytes) -> str:
    text = part.decode("utf-8-sig") if isinstance(part, (bytes, bytearray)) else part
    return text if text.endswith(("\n", "\r")) else text + "\n"


class CsvBatchImporter:
    """
    Bulk CSV registration with per-line error isolation.

    :param registrar: Registrar used for every row; a default one is built when omitted.
    """

    def __init__(self, registrar: SubjectRegistrar | None = None) -> None:
        self.registrar = registrar or SubjectRegistrar()

    def import_batch(self, stream: ImportSource, *, survey_id: int) -> BulkImportResult:
        """
        Import every data row of ``stream`` into ``survey_id``.

        :returns: One :class:`ImportLineResult` per data row, in input order.
        :raises InvalidImportError: When the stream cannot be read.
        """
        text = read_text(stream)
        result = BulkImportResult()

        for number, line in enumerate(_LINE_BREAK.split(text), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            try:
                request = parse_row(line, survey_id=survey_id)
            except RowError as exc:
                self._reject(result, number, str(exc))
                continue

            outcome = self.registrar.register(request)
            if outcome.ok:
                result.add(ImportLineResult(line=number, subject=outcome.subject))
            else:
                self._reject(result, number, outcome.error or "Registration failed")

        log.info(result.message, extra={"survey_id": survey_id})
        return result

    @staticmethod
    def _reject(result: BulkImportResult, number: int, message: str) -> None:
        log.warning("CSV row rejected: %s", message, extra={"line": number})
        result.add(ImportLineResult.failed(number, message))
