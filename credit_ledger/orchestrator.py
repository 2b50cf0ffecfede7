"""
Main Orchestrator for Credit Ledger

This module ties the engine to storage, cloud backup and the audit trail
and defines the end-to-end flows for:
1. Editing (validate → apply → save → audit)
2. Portability (export, import → parse → merge → save → audit)
3. Cloud (backup, restore → parse → merge → save → audit)

DESIGN DECISION: One `LedgerBook` owns each ledger. It holds the current
snapshot and runs every change under a lock, so two edits can never
interleave their read-modify-write. The snapshot is only swapped after
the repository has accepted the new version: a failed save or a rejected
import leaves the ledger exactly as it was.
"""

import asyncio
import datetime as dt
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar, Union
from uuid import UUID

import structlog

from credit_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from credit_ledger.config import AppSettings, Settings, get_settings
from credit_ledger.engine import mutations
from credit_ledger.engine.errors import FormatError
from credit_ledger.engine.merge import MergeResult, reconcile
from credit_ledger.models.audit import AuditEventBuilder
from credit_ledger.models.ledger import (
    Creditor,
    Customer,
    Entity,
    EntityIdentity,
    LineItemInput,
    PaymentInput,
    utc_now,
)
from credit_ledger.notifications import (
    LoggingNotifier,
    NotifierInterface,
    dispatch,
    plan_reminders,
    weekly_report,
)
from credit_ledger.portability import (
    export_file_name,
    parse_collection,
    serialize_collection,
)
from credit_ledger.services.cloud import (
    CloudBackupError,
    CloudBackupInterface,
    CloudNotConnectedError,
    DirectoryCloudBackup,
    InMemoryCloudBackup,
)
from credit_ledger.services.storage import (
    InMemoryAuditStorage,
    InMemoryLedgerRepository,
    JsonFileLedgerRepository,
    JsonLinesAuditStorage,
    LedgerRepository,
    StorageError,
)

E = TypeVar("E", bound=Entity)

logger = structlog.get_logger(__name__)


class LedgerBook(Generic[E]):
    """
    Owning coordinator for one ledger (customers or creditors).

    Every change:
    1. Validates input and applies the engine operation to the snapshot
    2. Saves the new collection through the repository
    3. Swaps the snapshot in
    4. Records an audit event

    Readers get the snapshot as an immutable tuple and never see a
    half-applied change.
    """

    def __init__(
        self,
        entity_type: type[E],
        repository: LedgerRepository,
        audit_logger: Optional[AuditLogger] = None,
        cloud: Optional[CloudBackupInterface] = None,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], dt.datetime] = utc_now,
    ):
        self._entity_type = entity_type
        self._repository = repository
        self._audit_logger = audit_logger
        self._cloud = cloud
        self._settings = settings or AppSettings()
        self._clock = clock
        self._entities: list[E] = []
        self._lock = asyncio.Lock()

    @property
    def entity_type(self) -> type[E]:
        return self._entity_type

    @property
    def ledger_key(self) -> str:
        return self._repository.storage_key

    @property
    def entities(self) -> tuple[E, ...]:
        """Current snapshot."""
        return tuple(self._entities)

    def get(self, entity_id: str) -> E:
        """
        Raises:
            NotFoundError: If no party has this id
        """
        return mutations.find_entity(self._entities, entity_id)

    async def _audit(self, event) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)

    async def _commit(
        self,
        updated: list[E],
        correlation_id: Optional[UUID],
    ) -> None:
        """Persist `updated`, then make it the current snapshot."""
        try:
            await self._repository.save(updated)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="ledger_save_failed",
                    error_message=str(e),
                    details={"ledger": self.ledger_key},
                    correlation_id=correlation_id,
                )
            raise
        self._entities = updated
        await self._audit(AuditEventBuilder.ledger_saved(
            ledger=self.ledger_key,
            entity_count=len(updated),
            correlation_id=correlation_id,
        ))

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self) -> tuple[E, ...]:
        """
        Replace the snapshot with what the repository holds.

        Raises:
            StorageError: If the stored ledger can't be read
        """
        async with self._lock:
            self._entities = list(await self._repository.load())
        await self._audit(AuditEventBuilder.ledger_loaded(
            ledger=self.ledger_key,
            entity_count=len(self._entities),
        ))
        return self.entities

    # =========================================================================
    # EDITING
    # =========================================================================

    async def create_entity(
        self,
        identity: Union[EntityIdentity, dict[str, Any]],
        first_line_item: Union[LineItemInput, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> E:
        """
        Add a new party with its first line item.

        Raises:
            ValidationError: If the identity or line item is invalid
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            entity = mutations.create_entity(
                self._entity_type, identity, first_line_item, now=self._clock()
            )
            await self._commit(
                mutations.append_entity(self._entities, entity), correlation_id
            )

        await self._audit(AuditEventBuilder.entity_created(
            ledger=self.ledger_key,
            entity_type=self._entity_type.kind,
            entity_id=entity.id,
            name=entity.name,
            correlation_id=correlation_id,
        ))
        return entity

    async def add_line_item(
        self,
        entity_id: str,
        item: Union[LineItemInput, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> E:
        """
        Append a new unpaid line item to a party.

        Returns:
            The updated party
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            updated = mutations.add_line_item(
                self._entities, entity_id, item, now=self._clock()
            )
            await self._commit(updated, correlation_id)
            entity = mutations.find_entity(updated, entity_id)

        await self._audit(AuditEventBuilder.line_item_added(
            ledger=self.ledger_key,
            entity_id=entity_id,
            amount=str(entity.line_items[-1].amount),
            correlation_id=correlation_id,
        ))
        return entity

    async def delete_line_item(
        self,
        entity_id: str,
        item_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> E:
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            updated = mutations.delete_line_item(
                self._entities, entity_id, item_id, now=self._clock()
            )
            await self._commit(updated, correlation_id)

        await self._audit(AuditEventBuilder.line_item_deleted(
            ledger=self.ledger_key,
            entity_id=entity_id,
            item_id=item_id,
            correlation_id=correlation_id,
        ))
        return mutations.find_entity(updated, entity_id)

    async def add_payment(
        self,
        entity_id: str,
        item_id: str,
        payment: Union[PaymentInput, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> E:
        """
        Record a payment against a line item.

        Returns:
            The updated party
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            updated = mutations.add_payment(
                self._entities, entity_id, item_id, payment, now=self._clock()
            )
            await self._commit(updated, correlation_id)

        entity = mutations.find_entity(updated, entity_id)
        recorded = mutations.find_line_item(entity, item_id).payments[-1]
        await self._audit(AuditEventBuilder.payment_recorded(
            ledger=self.ledger_key,
            item_id=item_id,
            amount=str(recorded.amount),
            method=recorded.method.value,
            correlation_id=correlation_id,
        ))
        return entity

    async def mark_line_item_paid(
        self,
        entity_id: str,
        item_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> E:
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            updated = mutations.mark_line_item_paid(
                self._entities, entity_id, item_id, now=self._clock()
            )
            await self._commit(updated, correlation_id)

        await self._audit(AuditEventBuilder.line_item_marked_paid(
            ledger=self.ledger_key,
            item_id=item_id,
            correlation_id=correlation_id,
        ))
        return mutations.find_entity(updated, entity_id)

    async def delete_entity(
        self,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Remove a party with all its line items and payments."""
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            updated = mutations.delete_entity(self._entities, entity_id)
            await self._commit(updated, correlation_id)

        await self._audit(AuditEventBuilder.entity_deleted(
            ledger=self.ledger_key,
            entity_type=self._entity_type.kind,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    # =========================================================================
    # PORTABILITY
    # =========================================================================

    async def export_data(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, str]:
        """
        Serialize the current snapshot for download.

        Returns:
            (file_name, payload)
        """
        snapshot = self.entities
        file_name = export_file_name(self._entity_type, self._clock().date())
        payload = serialize_collection(snapshot)

        await self._audit(AuditEventBuilder.data_exported(
            ledger=self.ledger_key,
            file_name=file_name,
            entity_count=len(snapshot),
            correlation_id=correlation_id,
        ))
        return file_name, payload

    async def _merge_payload(
        self,
        data: Union[str, bytes],
        source: str,
        correlation_id: UUID,
    ) -> MergeResult:
        """Parse `data` and merge it into the ledger as one change."""
        size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)

        try:
            if size > self._settings.max_import_size_bytes:
                raise FormatError(
                    f"File too large: {size} bytes "
                    f"(limit {self._settings.max_import_size_mb} MB)"
                )
            incoming = parse_collection(data, self._entity_type)
        except FormatError as e:
            await self._audit(AuditEventBuilder.import_rejected(
                ledger=self.ledger_key,
                source=source,
                reason=str(e),
                correlation_id=correlation_id,
            ))
            raise

        async with self._lock:
            result = reconcile(self._entities, incoming, now=self._clock())
            await self._commit(result.entities, correlation_id)

        await self._audit(AuditEventBuilder.data_merged(
            ledger=self.ledger_key,
            source=source,
            matched=result.matched,
            added=result.added,
            line_items_added=result.line_items_added,
            correlation_id=correlation_id,
        ))
        logger.info(
            "ledger_merged",
            ledger=self.ledger_key,
            source=source,
            matched=result.matched,
            added=result.added,
        )
        return result

    async def import_data(
        self,
        data: Union[str, bytes],
        correlation_id: Optional[UUID] = None,
    ) -> MergeResult:
        """
        Merge an exported file into the ledger.

        Nothing is replaced: matching parties gain the line items they
        were missing and unknown parties are added.

        Raises:
            FormatError: If the file is too large or not a valid ledger;
                the ledger is left unchanged
        """
        correlation_id = correlation_id or create_correlation_id()
        return await self._merge_payload(data, "file", correlation_id)

    async def merge_cloud_data(
        self,
        data: Union[str, bytes],
        correlation_id: Optional[UUID] = None,
    ) -> MergeResult:
        """Merge a payload fetched from the cloud; same rules as an import."""
        correlation_id = correlation_id or create_correlation_id()
        return await self._merge_payload(data, "cloud", correlation_id)

    # =========================================================================
    # CLOUD
    # =========================================================================

    def _require_cloud(self) -> CloudBackupInterface:
        if self._cloud is None:
            raise CloudNotConnectedError("No cloud backup configured")
        return self._cloud

    async def backup(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Upload the current snapshot to the cloud.

        Raises:
            CloudBackupError: If the upload fails (also audited)
        """
        correlation_id = correlation_id or create_correlation_id()
        cloud = self._require_cloud()
        snapshot = self.entities

        try:
            await cloud.backup(self.ledger_key, serialize_collection(snapshot))
        except CloudBackupError as e:
            await self._audit(AuditEventBuilder.backup_failed(
                ledger=self.ledger_key,
                error_message=str(e),
                correlation_id=correlation_id,
            ))
            raise

        await self._audit(AuditEventBuilder.backup_completed(
            ledger=self.ledger_key,
            entity_count=len(snapshot),
            correlation_id=correlation_id,
        ))
        return True

    async def restore(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[MergeResult]:
        """
        Fetch the latest cloud backup and merge it in.

        Returns:
            The merge outcome, or None if there is no backup yet
        """
        correlation_id = correlation_id or create_correlation_id()
        payload = await self._require_cloud().restore(self.ledger_key)
        if payload is None:
            logger.info("cloud_restore_empty", ledger=self.ledger_key)
            return None
        return await self.merge_cloud_data(payload, correlation_id)


async def send_reminders(
    receivables: LedgerBook[Customer],
    payables: LedgerBook[Creditor],
    notifier: NotifierInterface,
    settings: Optional[Settings] = None,
    audit_logger: Optional[AuditLogger] = None,
    today: Optional[dt.date] = None,
    include_weekly_report: bool = False,
) -> int:
    """
    Plan today's reminders from both ledgers and deliver them.

    Returns:
        How many reminders were delivered
    """
    settings = settings or get_settings()
    app = settings.app
    preferences = settings.notifications
    today = today or utc_now().date()

    customers: Sequence[Customer] = receivables.entities
    creditors: Sequence[Creditor] = payables.entities

    reminders = plan_reminders(
        customers,
        creditors,
        preferences,
        today,
        overdue_days=app.receivable_overdue_days,
        currency=app.currency_symbol,
    )
    if include_weekly_report:
        report = weekly_report(customers, creditors, preferences, app.currency_symbol)
        if report:
            reminders.append(report)

    return await dispatch(reminders, notifier, audit_logger)


def create_app_components(
    settings: Optional[Settings] = None,
    persist: bool = True,
) -> tuple[LedgerBook[Customer], LedgerBook[Creditor], CloudBackupInterface, NotifierInterface]:
    """
    Factory function to create all application components.

    Args:
        settings: Configuration; defaults to the cached environment settings
        persist: Whether to keep ledgers and audit log on disk.
                 Set to False for testing without a data folder.

    Returns:
        (receivables_book, payables_book, cloud_backup, notifier)
    """
    settings = settings or get_settings()
    app = settings.app
    configure_logging(debug=app.debug_mode)

    if persist:
        receivables_repo = JsonFileLedgerRepository(
            Customer, app.data_dir, app.receivables_storage_key
        )
        payables_repo = JsonFileLedgerRepository(
            Creditor, app.data_dir, app.payables_storage_key
        )
        audit_logger = AuditLogger(JsonLinesAuditStorage(app.data_dir / "audit.jsonl"))
        cloud: CloudBackupInterface = DirectoryCloudBackup(settings.cloud)
    else:
        receivables_repo = InMemoryLedgerRepository(Customer, app.receivables_storage_key)
        payables_repo = InMemoryLedgerRepository(Creditor, app.payables_storage_key)
        audit_logger = AuditLogger(InMemoryAuditStorage())
        cloud = InMemoryCloudBackup()

    receivables = LedgerBook(
        Customer, receivables_repo, audit_logger, cloud=cloud, settings=app
    )
    payables = LedgerBook(
        Creditor, payables_repo, audit_logger, cloud=cloud, settings=app
    )

    return receivables, payables, cloud, LoggingNotifier()
