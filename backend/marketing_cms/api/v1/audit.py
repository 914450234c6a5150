# marketing_cms/api/v1/audit.py
from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from marketing_cms.utils.decorators import permission_required
from marketing_cms.utils.pagination import paginate_cursor, parse_limit
from marketing_cms.models.audit_log import AuditLog
from marketing_cms.normalizers.audit import normalize_audit_log
from marketing_cms.normalizers.pagination import normalize_cursor_page

audit_bp = Blueprint("audit", __name__)

@audit_bp.route("", methods=["GET"])
@jwt_required()
@permission_required("audit_logs", "read")
def list_audit_logs():
    limit = parse_limit(
        request.args.get("limit"),
        default=20,
        maximum=current_app.config["API_PAGE_SIZE_MAX"],
    )

    query = AuditLog.query

    # Optional filters
    for field in ("action", "resource", "resource_id", "user_id"):
        if value := request.args.get(field):
            query = query.filter(getattr(AuditLog, field) == value)

    logs, meta = paginate_cursor(
        query,
        model=AuditLog,
        cursor=request.args.get("cursor"),
        limit=limit,
    )

    return jsonify(
        normalize_cursor_page(logs, normalize_audit_log, meta)
    ), 200
