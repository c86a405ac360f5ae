import logging
from typing import Callable, Dict, List, Optional

from .exceptions import UnknownImporterType
from .importers import (
    ClockifyProjectsImporter,
    ClockifyTimeEntriesImporter,
    GenericProjectsImporter,
    GenericTimeEntriesImporter,
    Importer,
    TogglDataImporter,
    TogglTimeEntriesImporter,
)

logger = logging.getLogger(__name__)

ImporterFactory = Callable[[], Importer]

DEFAULT_IMPORTERS: Dict[str, ImporterFactory] = {
    "toggl_time_entries": TogglTimeEntriesImporter,
    "toggl_data_importer": TogglDataImporter,
    "clockify_time_entries": ClockifyTimeEntriesImporter,
    "clockify_projects": ClockifyProjectsImporter,
    "generic_projects": GenericProjectsImporter,
    "generic_time_entries": GenericTimeEntriesImporter,
}


class ImporterRegistry:
    """Maps format keys to importer factories. Populated at configuration time."""

    def __init__(self, importers: Optional[Dict[str, ImporterFactory]] = None):
        self._importers: Dict[str, ImporterFactory] = dict(DEFAULT_IMPORTERS if importers is None else importers)

    def register_importer(self, importer_type: str, factory: ImporterFactory) -> None:
        if importer_type in self._importers:
            logger.warning(f"Replacing importer registered for '{importer_type}'")
        self._importers[importer_type] = factory

    def importer_keys(self) -> List[str]:
        return list(self._importers.keys())

    def get_importer(self, importer_type: str) -> Importer:
        """Return a fresh importer instance for ``importer_type``."""
        factory = self._importers.get(importer_type)
        if factory is None:
            raise UnknownImporterType(importer_type)
        return factory()

    def describe(self) -> Dict[str, Dict[str, str]]:
        descriptions = {}
        for importer_type, factory in self._importers.items():
            importer = factory()
            descriptions[importer_type] = {"name": importer.name, "description": importer.description}
        return descriptions
