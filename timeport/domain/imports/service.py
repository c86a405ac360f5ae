"""
Import orchestration: tenant lock, importer selection, one transaction.
"""
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Mapping, Optional, TypeVar

from sqlalchemy.orm import Session

from timeport.db.models import Organization
from timeport.db.session import get_session_local
from timeport.utils.locks import ImportLockManager, import_locks
from .importers.base import RawData
from .registry import ImporterRegistry
from .report import ImportReport
from .store import EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionExecutor:
    """Opens sessions and runs work inside a single commit-or-rollback block."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    @contextmanager
    def session(self):
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    def run_in_transaction(self, session: Session, fn: Callable[[], T]) -> T:
        # session.begin() commits on normal exit and rolls back on any exception.
        with session.begin():
            return fn()


class ImportService:
    def __init__(
        self,
        registry: ImporterRegistry,
        executor: TransactionExecutor,
        lock_manager: ImportLockManager,
    ):
        self.registry = registry
        self.executor = executor
        self.lock_manager = lock_manager

    def execute_import(
        self,
        organization: Organization,
        importer_type: str,
        data: RawData,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ImportReport:
        """
        Import ``data`` into ``organization`` with the importer registered as
        ``importer_type``.

        Raises ImportInProgress when another import holds the organization's
        lock and UnknownImporterType for an unregistered key; neither writes
        anything. Any error raised by the importer rolls back every write of
        this call before it propagates.
        """
        organization_id = organization.id
        with self.lock_manager.hold(organization_id):
            importer = self.registry.get_importer(importer_type)
            logger.info(f"Starting '{importer_type}' import for organization '{organization_id}'")
            started = time.time()

            with self.executor.session() as session:
                importer.init(organization, EntityStore(session))
                try:
                    self.executor.run_in_transaction(session, lambda: importer.import_data(data, options))
                except Exception as exc:
                    logger.warning(
                        f"Import '{importer_type}' for organization '{organization_id}' rolled back: {exc}"
                    )
                    raise

            report = importer.get_report()
            logger.info(
                f"Committed '{importer_type}' import for organization '{organization_id}' "
                f"in {time.time() - started:.2f}s: {report.to_dict()}"
            )
            return report


def build_import_service(
    session_factory: Optional[Callable[[], Session]] = None,
    lock_manager: Optional[ImportLockManager] = None,
) -> ImportService:
    """Service wired with the default registry, database sessions and process-wide locks."""
    return ImportService(
        registry=ImporterRegistry(),
        executor=TransactionExecutor(session_factory or get_session_local()),
        lock_manager=lock_manager or import_locks,
    )
