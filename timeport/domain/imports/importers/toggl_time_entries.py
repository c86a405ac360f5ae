import logging
from typing import Any, List, Mapping, Optional

from timeport.utils.date import parse_local_datetime
from ..exceptions import ParseError
from ..processors.csv_processor import decode_payload, read_csv_header, stream_csv_records, validate_header
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "User",
    "Email",
    "Client",
    "Project",
    "Task",
    "Description",
    "Billable",
    "Start date",
    "Start time",
    "End date",
    "End time",
    "Tags",
]


def split_tags(value: str) -> List[str]:
    # Toggl joins tag names with ", " and keeps other whitespace as part of the name.
    if value.strip() == "":
        return []
    return value.split(", ")


class TogglTimeEntriesImporter(DefaultImporter):
    name = "Toggl Time Entries"
    description = (
        "Detailed time entry CSV from Toggl (Admin -> Settings -> Data export -> Time entries). "
        "Use the Toggl Data Importer first when migrating a whole workspace. "
        "Dates are read in the timezone passed with the import options."
    )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        import_options = self.parse_options(options)
        zone = import_options.zone
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

                start = parse_local_datetime(
                    record["Start date"], record["Start time"], zone, field="Start", line_number=line_number
                )
                end = parse_local_datetime(
                    record["End date"], record["End time"], zone, field="End", line_number=line_number
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
        logger.info(f"Imported {self.time_entries_created} Toggl time entries ({import_options.timezone})")
