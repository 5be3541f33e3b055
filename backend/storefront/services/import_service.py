# Overview: Service-layer operations for dataset imports; loads the CSV exports table by table.

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from decimal import InvalidOperation
from pathlib import Path

from flask import current_app

from ..extensions import db
from .import_schemas import SCHEMAS, BaseImportSchema


class DatasetImportError(ValueError):
    """Raised when a dataset load is rejected; nothing is written."""

    def __init__(self, message: str, report: "ImportReport"):
        super().__init__(message)
        self.report = report


@dataclass
class TableReport:
    table: str
    filename: str
    found: bool = False
    rows: int = 0
    created: int = 0
    updated: int = 0
    errors: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "filename": self.filename,
            "found": self.found,
            "rows": self.rows,
            "created": self.created,
            "updated": self.updated,
            "errors": self.errors,
        }


@dataclass
class ImportReport:
    directory: str
    tables: list[TableReport] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(len(t.errors) for t in self.tables)

    def to_dict(self) -> dict:
        return {
            "directory": self.directory,
            "error_count": self.error_count,
            "tables": [t.to_dict() for t in self.tables],
        }


def _load_table(schema: BaseImportSchema, path: Path, report: TableReport) -> None:
    with path.open(newline="", encoding="utf-8-sig") as stream:
        reader = csv.DictReader(stream)
        seen: set[int] = set()
        # Row 1 is the header
        for row_number, raw_row in enumerate(reader, start=2):
            report.rows += 1
            try:
                normalized = schema.normalize_row(raw_row)
            except (ValueError, InvalidOperation) as exc:
                report.errors.append({"row": row_number, "errors": [str(exc)]})
                continue

            errors = schema.validate_row(normalized)
            key = normalized.get(schema.primary_key)
            if key is not None and key in seen:
                errors.append(f"duplicate {schema.primary_key} {key} in {schema.filename}")
            if errors:
                report.errors.append({"row": row_number, "errors": errors})
                continue

            seen.add(key)
            if schema.post_row(normalized):
                report.created += 1
            else:
                report.updated += 1

    # Children validate against parents through the identity map / flushed rows
    db.session.flush()


def load_dataset(directory: str | Path, *, strict: bool = True) -> ImportReport:
    """
    Load every known CSV file found in `directory`, parents before children.

    The load is one transaction. With strict=True any invalid row rejects
    the whole load (DatasetImportError carries the report); otherwise valid
    rows are committed and the invalid ones are listed in the report.
    """
    base = Path(directory)
    if not base.is_dir():
        raise FileNotFoundError(f"dataset directory not found: {base}")

    report = ImportReport(directory=str(base))
    try:
        for schema in SCHEMAS:
            table_report = TableReport(table=schema.model.__tablename__, filename=schema.filename)
            report.tables.append(table_report)

            path = base / schema.filename
            if not path.is_file():
                continue
            table_report.found = True
            _load_table(schema, path, table_report)
            current_app.logger.info(
                "Loaded %s: %d rows (%d created, %d updated, %d errors)",
                schema.filename,
                table_report.rows,
                table_report.created,
                table_report.updated,
                len(table_report.errors),
            )

        if strict and report.error_count:
            raise DatasetImportError(
                f"{report.error_count} invalid rows, nothing was imported", report
            )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return report
