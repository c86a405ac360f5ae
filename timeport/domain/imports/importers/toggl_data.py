"""
Toggl workspace export: a ZIP of per-entity CSV files.

clients.csv, projects.csv, tags.csv and users.csv are required; tasks.csv
is optional. Files reference each other by Toggl ids (``client_id``,
``project_id``), which are mapped to local ids through the resolvers'
external identifiers. Time entries are not part of this export.
"""
import logging
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Dict, Iterator, Mapping, Optional

from ..exceptions import ParseError
from ..processors.csv_processor import read_csv_header, stream_csv_records, validate_header
from ..processors.zip_processor import index_members, open_archive, read_member_text
from .base import DefaultImporter, RawData

logger = logging.getLogger(__name__)

CLIENT_FIELDS = ["id", "name"]
PROJECT_FIELDS = ["id", "name", "client_id", "color", "rate"]
TAG_FIELDS = ["id", "name"]
USER_FIELDS = ["uid", "name", "email", "timezone"]
TASK_FIELDS = ["id", "name", "project_id"]


def _iter_rows(file_name: str, text: str, required_fields) -> Iterator[tuple]:
    """Yield (line_number, record) pairs of one archive member."""
    try:
        validate_header(required_fields, read_csv_header(text))
    except ParseError as exc:
        raise ParseError(f'File "{file_name}": {exc.message}') from exc
    line_number = 1
    for records in stream_csv_records(text):
        for record in records:
            line_number += 1
            yield line_number, record


def rate_to_cents(value: str, line_number: int) -> Optional[int]:
    """Hourly rate to whole cents, fractions of a cent dropped."""
    if value == "":
        return None
    try:
        rate = Decimal(value)
    except InvalidOperation as exc:
        raise ParseError(f'File "projects.csv": rate ("{value}") is not a number', line_number) from exc
    if not rate.is_finite():
        raise ParseError(f'File "projects.csv": rate ("{value}") is not a number', line_number)
    return int((rate * 100).to_integral_value(rounding=ROUND_DOWN))


class TogglDataImporter(DefaultImporter):
    name = "Toggl Data Importer"
    description = (
        "ZIP archive from Toggl (Admin -> Settings -> Data export) containing clients, projects, "
        "tasks, tags and users. Time entries are imported separately with the Toggl Time Entries importer."
    )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        self.parse_options(options)
        archive = open_archive(data)
        with archive:
            members = index_members(archive)
            texts: Dict[str, Optional[str]] = {
                "clients.csv": read_member_text(archive, members, "clients.csv"),
                "projects.csv": read_member_text(archive, members, "projects.csv"),
                "tags.csv": read_member_text(archive, members, "tags.csv"),
                "users.csv": read_member_text(archive, members, "users.csv"),
                "tasks.csv": read_member_text(archive, members, "tasks.csv", required=False),
            }

        self._import_clients(texts["clients.csv"])
        self._import_tags(texts["tags.csv"])
        self._import_users(texts["users.csv"])
        self._import_projects(texts["projects.csv"])
        if texts["tasks.csv"] is not None:
            self._import_tasks(texts["tasks.csv"])

        logger.info(f"Toggl data import finished: {self.get_report().to_dict()}")

    def _import_clients(self, text: str) -> None:
        for _, record in _iter_rows("clients.csv", text, CLIENT_FIELDS):
            self.client_resolver.resolve(
                {"name": record["name"], "organization_id": self.organization_id},
                external_id=record["id"],
            )

    def _import_tags(self, text: str) -> None:
        for _, record in _iter_rows("tags.csv", text, TAG_FIELDS):
            self.tag_resolver.resolve(
                {"name": record["name"], "organization_id": self.organization_id},
                external_id=record["id"],
            )

    def _import_users(self, text: str) -> None:
        for _, record in _iter_rows("users.csv", text, USER_FIELDS):
            self.user_resolver.resolve(
                {"email": record["email"]},
                {
                    "name": record["name"],
                    "timezone": record["timezone"] or "UTC",
                    "is_placeholder": True,
                },
                external_id=record["uid"],
            )

    def _import_projects(self, text: str) -> None:
        for line_number, record in _iter_rows("projects.csv", text, PROJECT_FIELDS):
            client_id = None
            if record["client_id"] != "":
                client_id = self.client_resolver.key_by_external_id(record["client_id"])
                if client_id is None:
                    raise ParseError(
                        f'File "projects.csv": client "{record["client_id"]}" does not exist', line_number
                    )

            self.project_resolver.resolve(
                {"name": record["name"], "organization_id": self.organization_id},
                {
                    "client_id": client_id,
                    "color": record["color"],
                    "billable_rate": rate_to_cents(record["rate"], line_number),
                },
                external_id=record["id"],
            )

    def _import_tasks(self, text: str) -> None:
        for line_number, record in _iter_rows("tasks.csv", text, TASK_FIELDS):
            project_id = self.project_resolver.key_by_external_id(record["project_id"])
            if project_id is None:
                raise ParseError(
                    f'File "tasks.csv": project "{record["project_id"]}" does not exist', line_number
                )
            self.task_resolver.resolve(
                {"name": record["name"], "project_id": project_id, "organization_id": self.organization_id},
                external_id=record["id"],
            )
