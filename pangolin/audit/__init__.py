"""Command history and audit logs."""

from .audit import AuditRecord, AuditStore, audit_time, new_audit_id
from .history import HistoryRow, HistoryStore

__all__ = [
    "AuditRecord",
    "AuditStore",
    "HistoryRow",
    "HistoryStore",
    "audit_time",
    "new_audit_id",
]
