"""CSV import/export for batch image generation.

A batch CSV is an ordinary spreadsheet in which every column whose header
contains ``img`` (any case) asks for one generated image per row::

    name,description,img_hero
    Widget,"A small, blue widget",

For each (row, image column) pair a :class:`CSVTask` is created.  Its
*context* is the non-empty values of the columns to the left of the image
column, one ``header: value`` per line; a text model turns that context into
an image subject.

The export reproduces the original columns and appends ``<col>_url`` and
``<col>_prompt`` for every image column.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from enum import Enum

from artdirector.core.errors import CSVParseError, InvalidTransitionError

logger = logging.getLogger(__name__)

IMAGE_COLUMN_MARKER = "img"


class TaskStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    GENERATED = "generated"
    ERROR = "error"


_ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.READY, TaskStatus.ERROR},
    TaskStatus.READY: {TaskStatus.GENERATED, TaskStatus.ERROR},
    TaskStatus.GENERATED: set(),
    TaskStatus.ERROR: set(),
}


@dataclass
class ImageColumn:
    header: str
    index: int

    def to_dict(self) -> dict:
        return {"header": self.header, "index": self.index}


@dataclass
class ParsedCSV:
    headers: list[str]
    data: list[dict[str, str]]
    image_columns: list[ImageColumn]

    def to_dict(self) -> dict:
        return {
            "headers": self.headers,
            "data": self.data,
            "imageColumns": [column.to_dict() for column in self.image_columns],
        }


@dataclass
class CSVTask:
    """One image to produce for one row and one image column.

    Status only moves forward: ``pending -> ready -> generated``, with
    ``error`` reachable from ``pending`` or ``ready``.
    """

    row_index: int
    row: dict[str, str]
    image_column: str
    subject: str = ""
    context: str = ""
    status: TaskStatus = TaskStatus.PENDING
    image_url: str = ""
    prompt: str = ""
    error: str = ""
    extra: dict = field(default_factory=dict)

    def _move_to(self, status: TaskStatus) -> None:
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Task for row {self.row_index} cannot go from "
                f"{self.status.value} to {status.value}"
            )
        self.status = status

    def mark_ready(self, subject: str, context: str) -> None:
        self._move_to(TaskStatus.READY)
        self.subject = subject
        self.context = context

    def mark_generated(self, image_url: str, prompt: str) -> None:
        self._move_to(TaskStatus.GENERATED)
        self.image_url = image_url
        self.prompt = prompt

    def mark_error(self, message: str) -> None:
        self._move_to(TaskStatus.ERROR)
        self.error = message

    def to_dict(self) -> dict:
        return {
            "rowIndex": self.row_index,
            "row": self.row,
            "imageColumn": self.image_column,
            "subject": self.subject,
            "context": self.context,
            "status": self.status.value,
            "imageUrl": self.image_url,
            "prompt": self.prompt,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CSVTask:
        return cls(
            row_index=int(data["rowIndex"]),
            row=dict(data.get("row") or {}),
            image_column=data["imageColumn"],
            subject=data.get("subject") or "",
            context=data.get("context") or "",
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            image_url=data.get("imageUrl") or "",
            prompt=data.get("prompt") or "",
            error=data.get("error") or "",
        )


def _is_blank_record(record: list[str]) -> bool:
    return not record or (len(record) == 1 and not record[0].strip())


def detect_image_columns(headers: list[str]) -> list[ImageColumn]:
    return [
        ImageColumn(header=header, index=index)
        for index, header in enumerate(headers)
        if IMAGE_COLUMN_MARKER in header.lower()
    ]


class CSVParser:
    """Parse, describe and export one batch CSV.

    The parser keeps the parsed headers and rows so that
    :meth:`export_results` can rebuild the file with the generated results.
    """

    def __init__(self) -> None:
        self.headers: list[str] = []
        self.data: list[dict[str, str]] = []
        self.image_columns: list[ImageColumn] = []

    def parse(self, csv_text: str) -> ParsedCSV:
        """Parse *csv_text*.

        Quoted fields may contain commas, escaped quotes and line breaks.
        Blank lines are skipped; a line of empty cells (``,,``) is a row.

        Raises:
            CSVParseError: Malformed CSV, fewer than two records, or no
                ``img`` column.
        """
        try:
            records = [
                record
                for record in csv.reader(io.StringIO(csv_text.strip()))
                if not _is_blank_record(record)
            ]
        except csv.Error as e:
            raise CSVParseError(f"The CSV could not be read: {e}") from e
        if len(records) < 2:
            raise CSVParseError("The CSV needs a header line and at least one data line")

        headers = [header.strip() for header in records[0]]
        image_columns = detect_image_columns(headers)
        if not image_columns:
            raise CSVParseError(
                'No "img" column found in the CSV. Name image columns with "img" '
                '(e.g. "img_product", "img1")'
            )

        data: list[dict[str, str]] = []
        for record in records[1:]:
            values = [value.strip() for value in record]
            data.append(
                {header: values[index] if index < len(values) else "" for index, header in enumerate(headers)}
            )

        self.headers = headers
        self.data = data
        self.image_columns = image_columns

        logger.info(
            f"Parsed CSV: {len(data)} row(s), {len(headers)} column(s), "
            f"{len(image_columns)} image column(s)"
        )
        return ParsedCSV(headers=headers, data=data, image_columns=image_columns)

    def row_context(self, row: dict[str, str], image_column: str) -> str:
        """Describe *row* for one image column.

        Returns:
            ``header: value`` lines for the non-empty cells left of the
            image column.  Empty when there is nothing to describe.
        """
        column = next((c for c in self.image_columns if c.header == image_column), None)
        if column is None:
            raise CSVParseError(f"Unknown image column: {image_column}")

        return "\n".join(
            f"{header}: {row[header]}"
            for header in self.headers[: column.index]
            if row.get(header)
        )

    def build_tasks(self) -> list[CSVTask]:
        """Create one pending task per row and image column, rows first."""
        tasks = [
            CSVTask(
                row_index=row_index,
                row=row,
                image_column=column.header,
                context=self.row_context(row, column.header),
            )
            for row_index, row in enumerate(self.data)
            for column in self.image_columns
        ]
        logger.info(f"{len(tasks)} image(s) to generate")
        return tasks

    def export_results(self, tasks: list[CSVTask]) -> str:
        """Rebuild the CSV with ``<col>_url`` and ``<col>_prompt`` columns.

        Values containing a comma, a quote or a line break are quoted, with
        inner quotes doubled.  Lines end with ``\\n``.
        """
        headers = list(self.headers)
        for column in self.image_columns:
            headers.append(f"{column.header}_url")
            headers.append(f"{column.header}_prompt")

        by_row: dict[int, dict[str, CSVTask]] = {}
        for task in tasks:
            by_row.setdefault(task.row_index, {})[task.image_column] = task

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        for row_index, row in enumerate(self.data):
            values = [row.get(header, "") for header in self.headers]
            for column in self.image_columns:
                task = by_row.get(row_index, {}).get(column.header)
                values.append(task.image_url if task else "")
                values.append(task.prompt if task else "")
            writer.writerow(values)
        return buffer.getvalue()
