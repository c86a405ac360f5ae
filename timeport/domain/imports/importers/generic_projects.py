import logging
from typing import Any, Mapping, Optional

from timeport.utils.colors import get_random_color
from timeport.utils.date import parse_iso_utc
from ..exceptions import ParseError
from ..processors.csv_processor import decode_payload, read_csv_header, stream_csv_records, validate_header
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["name"]


def _optional_int(record: dict, field: str, line_number: int) -> Optional[int]:
    value = record.get(field, "")
    if value == "":
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ParseError(f'Value of {field} ("{value}") is not a whole number', line_number) from exc


class GenericProjectsImporter(DefaultImporter):
    name = "Generic Projects"
    description = (
        'CSV with one project per row. Only "name" is required; client, color, billable_rate (cents), '
        "is_public, billable_default, estimated_time (seconds) and archived_at are optional."
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
        logger.info(f"Generic projects import created {self.project_resolver.created_count()} projects")

    def _import_record(self, record: dict, line_number: int) -> None:
        client_id = self.resolve_client(record.get("client", ""))
        if record["name"] == "":
            return

        archived_at = None
        if record.get("archived_at", "") != "":
            archived_at = parse_iso_utc(record["archived_at"], field="archived_at", line_number=line_number)

        estimated_time = _optional_int(record, "estimated_time", line_number)
        self.project_resolver.resolve(
            {"name": record["name"], "organization_id": self.organization_id},
            {
                "client_id": client_id,
                "color": record.get("color") or get_random_color(),
                "billable_rate": _optional_int(record, "billable_rate", line_number),
                "is_public": record.get("is_public") == "true",
                "is_billable": record.get("billable_default") == "true",
                "estimated_time": estimated_time if estimated_time else None,
                "archived_at": archived_at,
            },
        )
