"""
Importer contract and the shared resolver setup every format builds on.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from timeport.core.config import settings
from timeport.db.models import (
    PLACEHOLDER_ROLE,
    Client,
    Member,
    Organization,
    Project,
    Tag,
    Task,
    TimeEntry,
    User,
)
from timeport.utils.colors import get_random_color
from ..exceptions import ParseError
from ..options import ImportOptions
from ..report import ImportReport
from ..resolver import EntityResolver
from ..schemas import ClientCreate, MemberCreate, ProjectCreate, TagCreate, TaskCreate, UserCreate
from ..scopes import OrganizationMemberScope, OrganizationScope
from ..store import EntityStore

logger = logging.getLogger(__name__)

RawData = Union[bytes, str]


class Importer(Protocol):
    name: str
    description: str

    def init(self, organization: Organization, store: EntityStore) -> None:
        ...

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        ...

    def get_report(self) -> ImportReport:
        ...


class DefaultImporter:
    """
    Holds one resolver per entity type, bound to one organization.

    ``init`` only wires objects; nothing touches the database until the
    first resolve inside ``import_data``.
    """
    name = ""
    description = ""

    def init(self, organization: Organization, store: EntityStore) -> None:
        self.organization_id = organization.id
        self.store = store
        scope = OrganizationScope(self.organization_id)

        self.member_resolver = EntityResolver(
            store, Member, ["user_id", "organization_id"], True, scope, schema=MemberCreate
        )
        self.user_resolver = EntityResolver(
            store,
            User,
            ["email"],
            True,
            OrganizationMemberScope(self.organization_id),
            after_create=self._attach_placeholder_member,
            schema=UserCreate,
        )
        self.client_resolver = EntityResolver(store, Client, ["name", "organization_id"], True, scope, schema=ClientCreate)
        self.project_resolver = EntityResolver(
            store, Project, ["name", "organization_id"], True, scope, schema=ProjectCreate
        )
        self.task_resolver = EntityResolver(
            store, Task, ["name", "project_id", "organization_id"], True, scope, schema=TaskCreate
        )
        self.tag_resolver = EntityResolver(store, Tag, ["name", "organization_id"], True, scope, schema=TagCreate)
        self.time_entries_created = 0

    def _attach_placeholder_member(self, user: User) -> None:
        self.member_resolver.resolve(
            {"user_id": user.id, "organization_id": self.organization_id},
            {"role": PLACEHOLDER_ROLE},
        )

    def import_data(self, data: RawData, options: Optional[Mapping[str, Any]] = None) -> None:
        raise NotImplementedError

    def get_report(self) -> ImportReport:
        return ImportReport(
            users_created=self.user_resolver.created_count(),
            clients_created=self.client_resolver.created_count(),
            projects_created=self.project_resolver.created_count(),
            tasks_created=self.task_resolver.created_count(),
            tags_created=self.tag_resolver.created_count(),
            time_entries_created=self.time_entries_created,
        )

    # Shared resolution helpers used by the row-based formats.

    def resolve_user(self, email: str, name: str, timezone: str = "UTC") -> str:
        return self.user_resolver.resolve(
            {"email": email},
            {"name": name, "timezone": timezone, "is_placeholder": True},
        )

    def resolve_member(self, user_id: str) -> str:
        return self.member_resolver.resolve(
            {"user_id": user_id, "organization_id": self.organization_id},
            {"role": PLACEHOLDER_ROLE},
        )

    def resolve_client(self, name: str) -> Optional[str]:
        if name == "":
            return None
        return self.client_resolver.resolve({"name": name, "organization_id": self.organization_id})

    def resolve_project(self, name: str, client_id: Optional[str], **create_values) -> Optional[str]:
        if name == "":
            return None
        values = {"client_id": client_id, "color": get_random_color(), "is_billable": False}
        values.update(create_values)
        return self.project_resolver.resolve({"name": name, "organization_id": self.organization_id}, values)

    def resolve_task(self, name: str, project_id: Optional[str], line_number: Optional[int] = None) -> Optional[str]:
        if name == "":
            return None
        if project_id is None:
            raise ParseError(f'Task "{name}" has no project', line_number)
        return self.task_resolver.resolve(
            {"name": name, "project_id": project_id, "organization_id": self.organization_id}
        )

    def resolve_tags(self, names: List[str]) -> List[str]:
        return [
            self.tag_resolver.resolve({"name": name, "organization_id": self.organization_id})
            for name in names
            if name != ""
        ]

    def create_time_entry(self, fields: Dict[str, Any], line_number: Optional[int] = None) -> str:
        description = fields.get("description") or ""
        if len(description) > settings.import_max_description_length:
            raise ParseError("Time entry description is too long", line_number)
        entity = self.store.create(
            TimeEntry,
            {
                "organization_id": self.organization_id,
                "is_imported": True,
                **fields,
                "description": description,
            },
        )
        self.time_entries_created += 1
        return entity.id

    @staticmethod
    def parse_options(options: Optional[Mapping[str, Any]]) -> ImportOptions:
        return ImportOptions.parse(options)
