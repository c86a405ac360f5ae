import logging
from typing import Any, Mapping, Optional

from ..processors.csv_processor import decode_payload, read_csv_header, stream_csv_records, validate_header
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["Name", "Client", "Status", "Visibility", "Billability", "Tasks"]


class ClockifyProjectsImporter(DefaultImporter):
    name = "Clockify Projects"
    description = (
        "Project list CSV from Clockify (PROJECTS -> Export -> Save as CSV). "
        "Tasks listed in the Tasks column are created under their project."
    )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        self.parse_options(options)
        text = decode_payload(data)
        validate_header(REQUIRED_FIELDS, read_csv_header(text))

        line_number = 1
        for records in stream_csv_records(text):
            for record in records:
                line_number += 1
                client_id = self.resolve_client(record["Client"])
                project_id = self.resolve_project(record["Name"], client_id)
                if project_id is None or record["Tasks"] == "":
                    continue
                for task_name in record["Tasks"].split(", "):
                    self.resolve_task(task_name, project_id, line_number)
        logger.info(f"Clockify projects import created {self.project_resolver.created_count()} projects")
