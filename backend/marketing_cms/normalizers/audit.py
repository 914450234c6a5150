# marketing_cms/normalizers/audit.py
from __future__ import annotations

from typing import Dict, Any
from marketing_cms.models.audit_log import AuditLog


def normalize_audit_log(log: AuditLog) -> Dict[str, Any]:
    """
    Normalizes an AuditLog model into API-safe JSON.

    Notes:
    - resource_id is always serialized as string for consistency
    - details is assumed to be JSON-serializable
    """

    if not log:
        raise ValueError("AuditLog cannot be None")

    return {
        "id": log.id,
        "user_id": log.user_id,
        "action": log.action,
        "resource": log.resource,
        "resource_id": str(log.resource_id) if log.resource_id is not None else None,
        "details": log.details or {},
        "ip_address": log.ip_address,
        "user_agent": log.user_agent,
        "timestamp": log.created_at.isoformat(),
    }
