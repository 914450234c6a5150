from flask import has_request_context, request
from marketing_cms.extensions import db
from marketing_cms.models.audit_log import AuditLog
from typing import Optional

def log_action(
    *,
    user_id: Optional[str],
    action: str,
    resource: str,
    resource_id: Optional[str],
    details: dict | None = None
) -> AuditLog:
    """
    Append an audit record to the current session.

    The caller owns the transaction, so the record commits or rolls back
    together with the change it describes.
    """
    log = AuditLog()

    log.user_id = user_id
    log.action = action
    log.resource = resource
    log.resource_id = resource_id
    log.details = details or {}

    if has_request_context():
        log.ip_address = request.remote_addr
        log.user_agent = request.headers.get("User-Agent")

    db.session.add(log)
    return log
