"""
Audit Models for Payment Tracker

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every change to the payments document
2. Debugging information when a save or load goes wrong
3. A record of when the app ran on fallback data or fallback rates

DESIGN DECISION: Audit events are immutable once created.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from payment_tracker.models.payment import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    DATA_LOADED = "data_loaded"
    DATA_FALLBACK_LOADED = "data_fallback_loaded"
    DATA_LOAD_FAILED = "data_load_failed"

    # Mutations
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_DELETED = "payment_deleted"

    # Persistence
    DATA_SAVED = "data_saved"
    SAVE_FAILED = "save_failed"

    # Exchange rates
    RATES_FETCHED = "rates_fetched"
    RATES_FALLBACK_USED = "rates_fallback_used"

    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Export
    EXPORT_GENERATED = "export_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'payment', 'document', 'rates')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_created(payment_id, item_name)
        event = AuditEventBuilder.save_failed(path, error_message)
    """

    @staticmethod
    def data_loaded(path: str, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            entity_type="document",
            entity_id=path,
            description=f"Loaded {payment_count} payments from remote store",
            details={"payment_count": payment_count},
        )

    @staticmethod
    def data_fallback_loaded(
        path: str,
        payment_count: int,
        remote_error: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_FALLBACK_LOADED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            entity_id=path,
            description=(
                f"Remote store unavailable, loaded {payment_count} payments "
                "from local copy (saves will be rejected)"
            ),
            details={"payment_count": payment_count},
            error_message=remote_error,
        )

    @staticmethod
    def data_load_failed(path: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            entity_id=path,
            description="Payments could not be loaded from remote or local source",
            error_message=error_message,
        )

    @staticmethod
    def payment_created(
        payment_id: int,
        item_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id=str(payment_id),
            correlation_id=correlation_id,
            description=f"Payment created: {item_name}",
            details={"item_name": item_name},
            is_user_action=True,
        )

    @staticmethod
    def payment_updated(
        payment_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_UPDATED,
            entity_type="payment",
            entity_id=str(payment_id),
            correlation_id=correlation_id,
            description=f"Payment {payment_id} updated",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def payment_deleted(
        payment_id: int,
        existed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_DELETED,
            entity_type="payment",
            entity_id=str(payment_id),
            correlation_id=correlation_id,
            description=(
                f"Payment {payment_id} deleted"
                if existed
                else f"Payment {payment_id} not found, nothing deleted"
            ),
            details={"existed": existed},
            is_user_action=True,
        )

    @staticmethod
    def data_saved(path: str, payment_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_SAVED,
            entity_type="document",
            entity_id=path,
            description=f"Saved {payment_count} payments",
            details={"payment_count": payment_count},
        )

    @staticmethod
    def save_failed(path: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="document",
            entity_id=path,
            description="Save rejected, local changes are not persisted",
            error_message=error_message,
        )

    @staticmethod
    def rates_fetched(rates: dict[str, float], rate_date: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_FETCHED,
            entity_type="rates",
            description=f"Exchange rates fetched for {rate_date or 'latest'}",
            details={"rates": rates, "rate_date": rate_date},
        )

    @staticmethod
    def rates_fallback_used(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATES_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="rates",
            description="Exchange rate source unavailable, using fallback rates",
            error_message=error_message,
        )

    @staticmethod
    def login_succeeded(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="session",
            entity_id=username,
            description=f"User logged in: {username}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            entity_id=username,
            description=f"Failed login attempt for: {username}",
            is_user_action=True,
        )

    @staticmethod
    def logout(username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            entity_type="session",
            entity_id=username,
            description=f"User logged out: {username}",
            is_user_action=True,
        )

    @staticmethod
    def export_generated(row_count: int, filename: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            entity_type="export",
            entity_id=filename,
            description=f"CSV export generated with {row_count} rows",
            details={"row_count": row_count},
            is_user_action=True,
        )
