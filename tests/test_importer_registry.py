"""
Tests for importer lookup by format key.
"""
import pytest

from timeport.domain.imports.exceptions import UnknownImporterType
from timeport.domain.imports.importers import (
    ClockifyProjectsImporter,
    GenericTimeEntriesImporter,
    TogglDataImporter,
)
from timeport.domain.imports.importers.base import DefaultImporter
from timeport.domain.imports.registry import ImporterRegistry


class NoopImporter(DefaultImporter):
    name = "Noop"
    description = "Imports nothing."

    def import_data(self, data, options=None):
        return None


def test_default_keys_are_registered(registry):
    assert set(registry.importer_keys()) == {
        "toggl_time_entries",
        "toggl_data_importer",
        "clockify_time_entries",
        "clockify_projects",
        "generic_projects",
        "generic_time_entries",
    }


def test_lookup_returns_matching_importer(registry):
    assert isinstance(registry.get_importer("generic_time_entries"), GenericTimeEntriesImporter)
    assert isinstance(registry.get_importer("toggl_data_importer"), TogglDataImporter)
    assert isinstance(registry.get_importer("clockify_projects"), ClockifyProjectsImporter)


def test_each_lookup_returns_a_fresh_instance(registry):
    first = registry.get_importer("generic_time_entries")
    second = registry.get_importer("generic_time_entries")

    assert first is not second


def test_unknown_key_is_rejected(registry):
    with pytest.raises(UnknownImporterType) as exc_info:
        registry.get_importer("harvest_time_entries")

    assert exc_info.value.importer_type == "harvest_time_entries"
    assert exc_info.value.message == "Invalid importer type 'harvest_time_entries'"


def test_lookup_is_case_sensitive(registry):
    with pytest.raises(UnknownImporterType):
        registry.get_importer("Generic_Time_Entries")


def test_register_additional_importer(registry):
    registry.register_importer("noop", NoopImporter)

    assert "noop" in registry.importer_keys()
    assert isinstance(registry.get_importer("noop"), NoopImporter)


def test_register_replaces_existing_key(registry):
    registry.register_importer("generic_time_entries", NoopImporter)

    assert isinstance(registry.get_importer("generic_time_entries"), NoopImporter)


def test_registries_do_not_share_registrations():
    first = ImporterRegistry()
    first.register_importer("noop", NoopImporter)

    assert "noop" not in ImporterRegistry().importer_keys()


def test_explicit_importer_map():
    registry = ImporterRegistry({"noop": NoopImporter})

    assert registry.importer_keys() == ["noop"]


def test_describe_lists_name_and_description(registry):
    descriptions = registry.describe()

    assert descriptions["generic_time_entries"]["name"] == "Generic Time Entries"
    assert "user_email" in descriptions["generic_time_entries"]["description"]
    assert all(info["name"] and info["description"] for info in descriptions.values())
