"""
Audit Logger

DESIGN DECISION: Every load, save and mutation is logged.
This provides:
1. Traceability of who changed what
2. A visible trail when the app is running on fallback data or rates
3. Debugging capability for failed saves

The audit logger:
- Is async so it can sit on the same call paths as the store
- Never raises; a logging failure must not break a save
- Keeps a bounded in-memory history for the dashboard
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from payment_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs every event to the structured local log and keeps the most recent
    events in memory.
    """

    def __init__(self, history_size: int = 500):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("payment_tracker.audit")

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recorded events, newest first."""
        return list(reversed(self._history))

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    async def log_data_loaded(self, path: str, payment_count: int) -> None:
        await self.log(AuditEventBuilder.data_loaded(path, payment_count))

    async def log_data_fallback_loaded(
        self,
        path: str,
        payment_count: int,
        remote_error: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.data_fallback_loaded(path, payment_count, remote_error)
        )

    async def log_data_load_failed(self, path: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.data_load_failed(path, error_message))

    async def log_payment_created(
        self,
        payment_id: int,
        item_name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.payment_created(payment_id, item_name, correlation_id)
        )

    async def log_payment_updated(
        self,
        payment_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.payment_updated(payment_id, changed_fields, correlation_id)
        )

    async def log_payment_deleted(
        self,
        payment_id: int,
        existed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.payment_deleted(payment_id, existed, correlation_id)
        )

    async def log_data_saved(self, path: str, payment_count: int) -> None:
        await self.log(AuditEventBuilder.data_saved(path, payment_count))

    async def log_save_failed(self, path: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.save_failed(path, error_message))

    async def log_rates_fetched(
        self,
        rates: dict[str, float],
        rate_date: Optional[str],
    ) -> None:
        await self.log(AuditEventBuilder.rates_fetched(rates, rate_date))

    async def log_rates_fallback_used(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.rates_fallback_used(error_message))

    async def log_login_succeeded(self, username: str) -> None:
        await self.log(AuditEventBuilder.login_succeeded(username))

    async def log_login_failed(self, username: str) -> None:
        await self.log(AuditEventBuilder.login_failed(username))

    async def log_logout(self, username: str) -> None:
        await self.log(AuditEventBuilder.logout(username))

    async def log_export_generated(self, row_count: int, filename: str) -> None:
        await self.log(AuditEventBuilder.export_generated(row_count, filename))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., a form submission).
    """
    return uuid4()
