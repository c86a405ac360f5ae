from dataclasses import dataclass, fields
from typing import Dict


@dataclass(frozen=True)
class ImportReport:
    """Counts of entities created by one import call. Never persisted."""
    users_created: int = 0
    clients_created: int = 0
    projects_created: int = 0
    tasks_created: int = 0
    tags_created: int = 0
    time_entries_created: int = 0

    def __post_init__(self):
        for field in fields(self):
            if getattr(self, field.name) < 0:
                raise ValueError(f"{field.name} must be non-negative")

    @property
    def total_created(self) -> int:
        return sum(getattr(self, field.name) for field in fields(self))

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """API payload shape: one ``{"created": n}`` block per entity type."""
        return {
            "clients": {"created": self.clients_created},
            "projects": {"created": self.projects_created},
            "tasks": {"created": self.tasks_created},
            "time-entries": {"created": self.time_entries_created},
            "tags": {"created": self.tags_created},
            "users": {"created": self.users_created},
        }
