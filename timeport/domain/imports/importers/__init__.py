"""
Format-specific importers, one class per supported export.
"""
from .base import DefaultImporter, Importer
from .clockify_projects import ClockifyProjectsImporter
from .clockify_time_entries import ClockifyTimeEntriesImporter
from .generic_projects import GenericProjectsImporter
from .generic_time_entries import GenericTimeEntriesImporter
from .toggl_data import TogglDataImporter
from .toggl_time_entries import TogglTimeEntriesImporter

__all__ = [
    "ClockifyProjectsImporter",
    "ClockifyTimeEntriesImporter",
    "DefaultImporter",
    "GenericProjectsImporter",
    "GenericTimeEntriesImporter",
    "Importer",
    "TogglDataImporter",
    "TogglTimeEntriesImporter",
]
