"""Flask CLI command importing subjects from a CSV file."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from surveyadmin.services._shared.errors import InvalidImportError
from surveyadmin.services.imports.service import CsvBatchImporter


@click.group("subjects")
def subjects_cli() -> None:
    """Subject registration commands."""


@subjects_cli.command("import-csv")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--survey-id", type=int, default=None, help="Survey to register into.")
@with_appcontext
def import_csv_command(path: str, survey_id: int | None) -> None:
    """Register every row of the CSV at PATH.

    Columns: departmentId,firstName,lastName,middleName,dob,email,phone,xid
    """
    survey = survey_id or int(current_app.config.get("DEFAULT_SURVEY_ID", 1))
    try:
        with open(path, "rb") as fh:
            result = CsvBatchImporter().import_batch(fh, survey_id=survey)
    except InvalidImportError as exc:
        raise click.ClickException(str(exc)) from exc

    for status in result.statuses:
        click.echo(f"{status.status.label}: {status.xid or ''} token={status.token or '-'}")
    for error in result.errors:
        click.echo(error, err=True)
    click.echo(result.message)
