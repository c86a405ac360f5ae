import logging
from typing import Any, List, Mapping, Optional

from timeport.utils.date import parse_slash_datetime
from ..exceptions import ParseError
from ..processors.csv_processor import decode_payload, read_csv_header, stream_csv_records, validate_header
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "Project",
    "Client",
    "Description",
    "Task",
    "User",
    "Group",
    "Email",
    "Tags",
    "Billable",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
]


def split_tags(value: str) -> List[str]:
    if value.strip() == "":
        return []
    return value.split(", ")


class ClockifyTimeEntriesImporter(DefaultImporter):
    name = "Clockify Time Entries"
    description = (
        'Detailed time report CSV from Clockify (REPORTS -> TIME -> Detailed -> Export -> Save as CSV). '
        'Set the date format to "MM/DD/YYYY" and the time format to "12-hour" before exporting, '
        "and pass the Clockify timezone with the import options."
    )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        import_options = self.parse_options(options)
        zone = import_options.zone
        day_first = import_options.date_format == "DD/MM/YYYY"
        text = decode_payload(data)
        validate_header(REQUIRED_FIELDS, read_csv_header(text))

        line_number = 1
        for records in stream_csv_records(text):
            for record in records:
                line_number += 1
                user_id = self.resolve_user(record["Email"], record["User"])
                member_id = self.resolve_member(user_id)
                client_id = self.resolve_client(record["Client"])
                project_id = self.resolve_project(record["Project"], client_id)
                task_id = self.resolve_task(record["Task"], project_id, line_number)

                if record["Billable"] not in ("Yes", "No"):
                    raise ParseError("Invalid billable value", line_number)

                start = parse_slash_datetime(
                    record["Start Date"],
                    record["Start Time"],
                    zone,
                    field="Start",
                    day_first=day_first,
                    line_number=line_number,
                )
                end = parse_slash_datetime(
                    record["End Date"],
                    record["End Time"],
                    zone,
                    field="End",
                    day_first=day_first,
                    line_number=line_number,
                )
                self.create_time_entry(
                    {
                        "user_id": user_id,
                        "member_id": member_id,
                        "client_id": client_id,
                        "project_id": project_id,
                        "task_id": task_id,
                        "description": record["Description"],
                        "billable": record["Billable"] == "Yes",
                        "tags": self.resolve_tags(split_tags(record["Tags"])),
                        "start": start,
                        "end": end,
                    },
                    line_number,
                )
        logger.info(f"Imported {self.time_entries_created} Clockify time entries")
