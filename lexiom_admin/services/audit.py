"""Best-effort, append-only audit trail of administrative actions"""
from typing import Any, Dict, Optional

from lexiom_admin.middleware.monitoring import record_audit_failure
from lexiom_admin.models.audit_log import AuditLog
from lexiom_admin.repositories.audit_repository import AuditSink
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.utils.logger import logger

UNKNOWN = "unknown"


class AuditRecorder:
    """Appends one immutable event per state-changing operation.

    ``record`` must be called after the triggering change has been committed.
    It never raises: a failing sink is logged and swallowed, so audit
    completeness is best-effort rather than exactly-once.
    """

    def __init__(self, sink: AuditSink) -> None:
        self.sink = sink

    def record(
        self,
        actor_id: Optional[str],
        action: str,
        resource_type: str,
        resource_id: Optional[str],
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[AuditLog]:
        """Append an audit event. Returns the stored entry, or None if the sink failed."""
        entry = AuditLog(
            user_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id is not None else None,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip or UNKNOWN,
            user_agent=user_agent or UNKNOWN,
            created_at=utcnow(),
        )

        try:
            self.sink.append(entry)
        except Exception:
            record_audit_failure(action)
            logger.exception(
                f"Failed to write audit event: {action}",
                extra={
                    "admin_id": actor_id,
                    "action": action,
                    "resource_type": resource_type,
                    "resource_id": entry.resource_id,
                },
            )
            return None

        logger.info(
            f"Audit event recorded: {action}",
            extra={
                "admin_id": actor_id,
                "action": action,
                "resource_type": resource_type,
                "resource_id": entry.resource_id,
            },
        )
        return entry
