"""
Tests for ImportService: per-organization locking and all-or-nothing writes.
"""
import threading

import pytest

from timeport.db.models import Client, Tag
from timeport.domain.imports.exceptions import ImportInProgress, ParseError, UnknownImporterType
from timeport.domain.imports.importers.base import DefaultImporter
from timeport.domain.imports.report import ImportReport
from timeport.domain.imports.service import build_import_service
from timeport.utils.locks import ImportLockManager

VALID_ENTRIES = (
    "description,billable,client,project,tags,start,end,task,user_name,user_email\n"
    "Work,true,Acme,Website,Design,2024-01-01T09:00:00Z,2024-01-01T10:00:00Z,,Alice,a@x.com\n"
)


class FailingImporter(DefaultImporter):
    """Creates entities and then fails with an unexpected error."""
    name = "Failing"
    description = "Fails after writing."

    def import_data(self, data, options=None):
        self.resolve_client("Acme")
        self.resolve_tags(["Design", "Review"])
        raise RuntimeError("storage went away")


class BlockingImporter(DefaultImporter):
    name = "Blocking"
    description = "Waits until released."

    def __init__(self, started, release):
        self.started = started
        self.release = release

    def import_data(self, data, options=None):
        self.started.set()
        self.release.wait(timeout=5)


def test_unknown_type_writes_nothing_and_releases_lock(import_service, organization, lock_manager, count_rows):
    with pytest.raises(UnknownImporterType):
        import_service.execute_import(organization, "nope", VALID_ENTRIES)

    assert not lock_manager.is_locked(organization.id)
    assert count_rows(Client) == 0


def test_unexpected_error_rolls_back_everything(import_service, registry, organization, lock_manager, count_rows):
    registry.register_importer("failing", FailingImporter)

    with pytest.raises(RuntimeError, match="storage went away"):
        import_service.execute_import(organization, "failing", b"")

    assert count_rows(Client) == 0
    assert count_rows(Tag) == 0
    assert not lock_manager.is_locked(organization.id)


def test_parse_error_releases_lock(import_service, organization, lock_manager):
    with pytest.raises(ParseError):
        import_service.execute_import(organization, "generic_time_entries", "only,two\n")

    assert not lock_manager.is_locked(organization.id)

    report = import_service.execute_import(organization, "generic_time_entries", VALID_ENTRIES)
    assert report.time_entries_created == 1


def test_held_lock_rejects_import_without_writing(import_service, organization, lock_manager, count_rows):
    with lock_manager.hold(organization.id):
        with pytest.raises(ImportInProgress) as exc_info:
            import_service.execute_import(organization, "generic_time_entries", VALID_ENTRIES)

    assert exc_info.value.organization_id == organization.id
    assert count_rows(Client) == 0


def test_other_organization_is_not_blocked(import_service, organization, other_organization, lock_manager):
    with lock_manager.hold(organization.id):
        report = import_service.execute_import(other_organization, "generic_time_entries", VALID_ENTRIES)

    assert report.time_entries_created == 1


def test_concurrent_import_for_same_organization_fails_fast(import_service, registry, organization, lock_manager):
    started = threading.Event()
    release = threading.Event()
    registry.register_importer("blocking", lambda: BlockingImporter(started, release))
    errors = []

    def run():
        try:
            import_service.execute_import(organization, "blocking", b"")
        except Exception as exc:
            errors.append(exc)

    worker = threading.Thread(target=run)
    worker.start()
    try:
        assert started.wait(timeout=5)
        with pytest.raises(ImportInProgress):
            import_service.execute_import(organization, "generic_time_entries", VALID_ENTRIES)
    finally:
        release.set()
        worker.join(timeout=5)

    assert errors == []
    assert not lock_manager.is_locked(organization.id)


def test_lock_wait_allows_short_contention():
    manager = ImportLockManager(wait_seconds=0.05)
    manager.get_lock("org-1").acquire()

    assert manager.try_acquire("org-1") is False

    manager.release("org-1")
    assert manager.try_acquire("org-1") is True
    manager.release("org-1")


def test_build_import_service_uses_given_dependencies(session_factory, organization):
    manager = ImportLockManager(wait_seconds=0)
    service = build_import_service(session_factory, manager)

    report = service.execute_import(organization, "generic_time_entries", VALID_ENTRIES)

    assert report.users_created == 1
    assert service.lock_manager is manager


def test_report_serialization():
    report = ImportReport(
        users_created=1,
        clients_created=2,
        projects_created=3,
        tasks_created=4,
        tags_created=5,
        time_entries_created=6,
    )

    assert report.to_dict() == {
        "clients": {"created": 2},
        "projects": {"created": 3},
        "tasks": {"created": 4},
        "time-entries": {"created": 6},
        "tags": {"created": 5},
        "users": {"created": 1},
    }
    assert report.total_created == 21


def test_report_rejects_negative_counts():
    with pytest.raises(ValueError):
        ImportReport(tags_created=-1)
