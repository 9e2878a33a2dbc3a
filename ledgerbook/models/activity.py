"""
Activity Models for ledgerbook

Notable actions (a debtor added, a transaction recorded or rejected,
a backup restored, a corrupted key cleared) are described by an
ActivityEvent and written to the structured log.

Events are log output only. They are not stored and do not form an
audit trail of the ledger.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Debt ledger
    DEBTOR_ADDED = "debtor_added"
    DEBTOR_REJECTED = "debtor_rejected"
    TRANSACTION_RECORDED = "transaction_recorded"
    TRANSACTION_REJECTED = "transaction_rejected"

    # Inventory and sales
    PRODUCT_ADDED = "product_added"
    PRODUCT_UPDATED = "product_updated"
    PRODUCT_DELETED = "product_deleted"
    PRODUCT_REJECTED = "product_rejected"
    INVOICE_FINALIZED = "invoice_finalized"
    INVOICE_REJECTED = "invoice_rejected"

    # Reports
    REPORT_GENERATED = "report_generated"
    REPORT_FAILED = "report_failed"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_RESTORED = "backup_restored"
    BACKUP_FAILED = "backup_failed"

    # Storage
    STORAGE_CORRUPTION_CLEARED = "storage_corruption_cleared"
    STORAGE_SAVE_FAILED = "storage_save_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'debtor', 'transaction', 'invoice')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.debtor_added(debtor_id, name, "customer")
        event = ActivityEventBuilder.transaction_rejected(debtor_id, issues)
    """

    @staticmethod
    def debtor_added(
        debtor_id: str,
        name: str,
        debtor_type: str,
        imported: bool = False,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DEBTOR_ADDED,
            entity_type="debtor",
            entity_id=debtor_id,
            description=f"Debtor added: {name}",
            details={
                "debtor_type": debtor_type,
                "imported_from_contacts": imported,
            },
            is_user_action=True,
        )

    @staticmethod
    def debtor_rejected(
        name: str,
        issues: list[dict],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DEBTOR_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="debtor",
            description=f"Debtor rejected with {len(issues)} issues",
            details={
                "name": name,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        debtor_id: str,
        polarity: str,
        amount: float,
        balance: float,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Recorded {polarity} of {amount:.2f}",
            details={
                "debtor_id": debtor_id,
                "polarity": polarity,
                "amount": amount,
                "balance_after": balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        debtor_id: str,
        issues: list[dict],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="debtor",
            entity_id=debtor_id,
            description=f"Transaction rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def product_changed(
        event_type: ActivityEventType,
        product_id: str,
        name: str,
    ) -> ActivityEvent:
        verb = event_type.value.split("_", 1)[1]
        return ActivityEvent(
            event_type=event_type,
            entity_type="product",
            entity_id=product_id,
            description=f"Product {verb}: {name}",
            is_user_action=True,
        )

    @staticmethod
    def product_rejected(issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PRODUCT_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="product",
            description=f"Product change rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def invoice_finalized(
        invoice_id: str,
        total: float,
        item_count: int,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INVOICE_FINALIZED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_id} finalized: {total:.2f}",
            details={
                "total": total,
                "item_count": item_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def invoice_rejected(issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INVOICE_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="invoice",
            description="Invoice could not be finalized",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def report_generated(
        date_range: str,
        invoice_count: int,
        transaction_count: int,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REPORT_GENERATED,
            entity_type="report",
            description=f"Report generated for {date_range}",
            details={
                "date_range": date_range,
                "invoice_count": invoice_count,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def report_failed(date_range: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REPORT_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="report",
            description=f"Report failed for {date_range}",
            error_message=error_message,
        )

    @staticmethod
    def backup_exported(keys: list[str], path: Optional[str] = None) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BACKUP_EXPORTED,
            entity_type="backup",
            description=f"Backup exported with {len(keys)} keys",
            details={
                "keys": keys,
                "path": path,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_restored(restored: list[str], skipped: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BACKUP_RESTORED,
            entity_type="backup",
            description=f"Backup restored: {len(restored)} keys",
            details={
                "restored": restored,
                "skipped": skipped,
            },
            is_user_action=True,
        )

    @staticmethod
    def backup_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BACKUP_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="backup",
            description="Backup restore failed",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def storage_corruption_cleared(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_CORRUPTION_CLEARED,
            severity=ActivitySeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            description=f"Corrupted value under '{key}' discarded",
            error_message=error_message,
        )

    @staticmethod
    def storage_save_failed(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            description=f"Could not save '{key}'",
            error_message=error_message,
        )
