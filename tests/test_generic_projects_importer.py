"""
Tests for the generic project CSV format.
"""
from datetime import datetime

import pytest
from sqlalchemy import select

from timeport.db.models import Client, Project
from timeport.domain.imports.exceptions import EntityCreationError, ParseError

HEADER = "name,client,color,billable_rate,is_public,billable_default,estimated_time,archived_at\n"


def _projects(session_factory, organization):
    with session_factory() as session:
        return {
            project.name: project
            for project in session.scalars(select(Project).where(Project.organization_id == organization.id))
        }


def test_optional_columns_are_applied(import_service, organization, session_factory):
    payload = HEADER + (
        "Website,Acme,#ef5350,10050,true,true,3600,2024-02-01T00:00:00Z\n"
        "Internal,,,,false,false,0,\n"
    )

    report = import_service.execute_import(organization, "generic_projects", payload)

    assert report.projects_created == 2
    assert report.clients_created == 1
    assert report.time_entries_created == 0

    projects = _projects(session_factory, organization)
    website = projects["Website"]
    assert website.color == "#ef5350"
    assert website.billable_rate == 10050
    assert website.is_public is True
    assert website.is_billable is True
    assert website.estimated_time == 3600
    assert website.archived_at == datetime(2024, 2, 1)
    assert website.client_id is not None

    internal = projects["Internal"]
    assert internal.client_id is None
    assert internal.billable_rate is None
    assert internal.is_public is False
    assert internal.is_billable is False
    assert internal.estimated_time is None
    assert internal.archived_at is None
    assert internal.color.startswith("#")


def test_name_only_header_is_enough(import_service, organization, session_factory):
    report = import_service.execute_import(organization, "generic_projects", "name\nSolo\n")

    assert report.projects_created == 1
    assert _projects(session_factory, organization)["Solo"].client_id is None


def test_rows_without_name_are_skipped(import_service, organization, count_rows):
    report = import_service.execute_import(organization, "generic_projects", "name,client\n,Acme\nReal,\n")

    assert report.projects_created == 1
    assert count_rows(Project) == 1
    # The client of a nameless row is still resolved.
    assert count_rows(Client) == 1


def test_existing_project_is_attached_not_updated(import_service, organization, session_factory):
    import_service.execute_import(organization, "generic_projects", HEADER + "Website,,#ef5350,100,,,,\n")

    report = import_service.execute_import(organization, "generic_projects", HEADER + "Website,,#42a5f5,999,,,,\n")

    assert report.projects_created == 0
    website = _projects(session_factory, organization)["Website"]
    assert website.color == "#ef5350"
    assert website.billable_rate == 100


def test_non_numeric_rate_is_rejected(import_service, organization, count_rows):
    payload = HEADER + "Website,,,12.5,,,,\n"

    with pytest.raises(ParseError, match=r'Value of billable_rate \("12.5"\) is not a whole number \(line 2\)'):
        import_service.execute_import(organization, "generic_projects", payload)

    assert count_rows(Project) == 0


def test_invalid_color_is_rejected(import_service, organization):
    with pytest.raises(EntityCreationError, match="Invalid color"):
        import_service.execute_import(organization, "generic_projects", HEADER + "Website,,red,,,,,\n")


def test_missing_name_column(import_service, organization):
    with pytest.raises(ParseError, match="missing field: name"):
        import_service.execute_import(organization, "generic_projects", "client,color\nAcme,#ef5350\n")
