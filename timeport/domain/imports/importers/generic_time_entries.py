import logging
from typing import Any, List, Mapping, Optional

from timeport.utils.date import parse_iso_utc
from ..exceptions import ParseError
from ..processors.csv_processor import decode_payload, read_csv_header, stream_csv_records, validate_header
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "description",
    "billable",
    "client",
    "project",
    "tags",
    "start",
    "end",
    "task",
    "user_name",
    "user_email",
]


def split_tags(value: str) -> List[str]:
    """Comma separated, surrounding whitespace ignored."""
    if value.strip() == "":
        return []
    return [tag.strip() for tag in value.split(",")]


class GenericTimeEntriesImporter(DefaultImporter):
    name = "Generic Time Entries"
    description = (
        "CSV with one time entry per row. Required columns: "
        + ", ".join(REQUIRED_FIELDS)
        + '. Timestamps are UTC in the form 2024-01-31T09:00:00Z; billable is "true" or "false".'
    )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        self.parse_options(options)
        text = decode_payload(data)
        validate_header(REQUIRED_FIELDS, read_csv_header(text))

        line_number = 1
        for records in stream_csv_records(text):
            for record in records:
                line_number += 1
                self._import_record(record, line_number)
        logger.info(f"Imported {self.time_entries_created} time entries from generic CSV")

    def _import_record(self, record: dict, line_number: int) -> None:
        user_id = self.resolve_user(record["user_email"], record["user_name"])
        member_id = self.resolve_member(user_id)
        client_id = self.resolve_client(record["client"])
        project_id = self.resolve_project(record["project"], client_id)
        task_id = self.resolve_task(record["task"], project_id, line_number)

        if record["billable"] not in ("true", "false"):
            raise ParseError("Invalid billable value", line_number)

        start = parse_iso_utc(record["start"], field="start", line_number=line_number)
        end = None
        if record["end"] != "":
            end = parse_iso_utc(record["end"], field="end", line_number=line_number)

        self.create_time_entry(
            {
                "user_id": user_id,
                "member_id": member_id,
                "client_id": client_id,
                "project_id": project_id,
                "task_id": task_id,
                "description": record["description"],
                "billable": record["billable"] == "true",
                "tags": self.resolve_tags(split_tags(record["tags"])),
                "start": start,
                "end": end,
            },
            line_number,
        )
