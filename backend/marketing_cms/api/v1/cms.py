# marketing_cms/api/v1/cms.py
from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import BadRequest
from marketing_cms.application.cms import get_content_store, get_page_store
from marketing_cms.errors import ValidationError
from marketing_cms.normalizers.block import normalize_block
from marketing_cms.normalizers.page import normalize_page
from marketing_cms.normalizers.page_version import normalize_page_version, normalize_comparison
from marketing_cms.normalizers.pagination import normalize_offset_page
from marketing_cms.normalizers.section import normalize_section
from marketing_cms.utils.decorators import permission_required, current_user_id
from marketing_cms.utils.optimistic_lock import enforce_optimistic_lock

cms_bp = Blueprint("cms", __name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _bool_arg(name):
    raw = request.args.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in {"true", "1", "yes"}:
        return True
    if value in {"false", "0", "no"}:
        return False
    raise BadRequest(f"Invalid boolean for '{name}'")

# ------------------------
# Pages
# ------------------------

@cms_bp.route("/pages", methods=["GET"])
@jwt_required()
@permission_required("pages", "read")
def list_pages():
    page_num = max(request.args.get("page", 1, type=int), 1)
    per_page = min(
        max(request.args.get("per_page", 20, type=int), 1),
        current_app.config["API_PAGE_SIZE_MAX"],
    )

    items, total = get_page_store().list_pages(
        page_type=request.args.get("page_type"),
        is_published=_bool_arg("is_published"),
        page=page_num,
        per_page=per_page,
    )

    return jsonify(
        normalize_offset_page(
            items,
            lambda p: normalize_page(p, admin=True),
            page=page_num,
            per_page=per_page,
            total=total,
        )
    )

@cms_bp.route("/pages", methods=["POST"])
@jwt_required()
@permission_required("pages", "create")
def create_page():
    page = get_page_store().create_page(_json_body(), actor_id=current_user_id())
    return jsonify(normalize_page(page, admin=True)), 201

@cms_bp.route("/pages/<page_id>", methods=["GET"])
@jwt_required()
@permission_required("pages", "read")
def get_page(page_id):
    page = get_page_store().get_page(page_id)
    return jsonify(normalize_page(page, admin=True)), 200, NO_CACHE_HEADERS

@cms_bp.route("/pages/<page_id>", methods=["PUT"])
@jwt_required()
@permission_required("pages", "update")
def update_page(page_id):
    store = get_page_store()

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(store.get_page(page_id))

    page = store.update_page(page_id, _json_body(), actor_id=current_user_id())
    return jsonify(normalize_page(page, admin=True)), 200

@cms_bp.route("/pages/<page_id>", methods=["DELETE"])
@jwt_required()
@permission_required("pages", "delete")
def delete_page(page_id):
    result = get_page_store().delete_page(page_id, actor_id=current_user_id())
    return jsonify(result), 200

@cms_bp.route("/pages/<page_id>/publish", methods=["PATCH"])
@jwt_required()
@permission_required("pages", "publish")
def publish_page(page_id):
    page = get_page_store().publish_page(
        page_id,
        _json_body().get("is_published"),
        actor_id=current_user_id(),
    )
    return jsonify(normalize_page(page, admin=True)), 200

# ------------------------
# Versions
# ------------------------

@cms_bp.route("/pages/versions/compare", methods=["GET"])
@jwt_required()
@permission_required("pages", "read")
def compare_versions():
    version1 = request.args.get("version1")
    version2 = request.args.get("version2")

    if not version1 or not version2:
        raise ValidationError("Both version1 and version2 query parameters are required")

    comparison = get_page_store().compare_versions(version1, version2)
    return jsonify(normalize_comparison(comparison)), 200

@cms_bp.route("/pages/<page_id>/versions", methods=["GET"])
@jwt_required()
@permission_required("pages", "read")
def list_versions(page_id):
    store = get_page_store()
    store.get_page(page_id)

    return jsonify([
        normalize_page_version(v, include_snapshot=False)
        for v in store.get_page_versions(page_id)
    ]), 200

@cms_bp.route("/pages/<page_id>/versions/<version_id>", methods=["GET"])
@jwt_required()
@permission_required("pages", "read")
def get_version(page_id, version_id):
    version = get_page_store().get_page_version(page_id, version_id)
    return jsonify(normalize_page_version(version)), 200

@cms_bp.route("/pages/<page_id>/versions/<version_id>/restore", methods=["POST"])
@jwt_required()
@permission_required("pages", "update")
def restore_version(page_id, version_id):
    page = get_page_store().restore_version(page_id, version_id, current_user_id())
    return jsonify(normalize_page(page, admin=True)), 200

# ------------------------
# Sections
# ------------------------

@cms_bp.route("/pages/<page_id>/sections", methods=["GET"])
@jwt_required()
@permission_required("content", "read")
def list_sections(page_id):
    return jsonify([
        normalize_section(s, admin=True, blocks=s.blocks)
        for s in get_content_store().list_sections(page_id)
    ]), 200, NO_CACHE_HEADERS

@cms_bp.route("/pages/<page_id>/sections", methods=["POST"])
@jwt_required()
@permission_required("content", "create")
def create_section(page_id):
    section = get_content_store().create_section(page_id, _json_body(), actor_id=current_user_id())
    return jsonify(normalize_section(section, admin=True)), 201

@cms_bp.route("/pages/<page_id>/sections/reorder", methods=["PATCH"])
@jwt_required()
@permission_required("content", "update")
def reorder_sections(page_id):
    sections = get_content_store().reorder_sections(
        page_id,
        _json_body().get("section_orders"),
        actor_id=current_user_id(),
    )
    return jsonify([normalize_section(s, admin=True) for s in sections]), 200

@cms_bp.route("/sections/<section_id>", methods=["GET"])
@jwt_required()
@permission_required("content", "read")
def get_section(section_id):
    section = get_content_store().get_section(section_id)
    return jsonify(normalize_section(section, admin=True, blocks=section.blocks)), 200

@cms_bp.route("/sections/<section_id>", methods=["PUT"])
@jwt_required()
@permission_required("content", "update")
def update_section(section_id):
    store = get_content_store()

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(store.get_section(section_id))

    section = store.update_section(section_id, _json_body(), actor_id=current_user_id())
    return jsonify(normalize_section(section, admin=True)), 200

@cms_bp.route("/sections/<section_id>", methods=["DELETE"])
@jwt_required()
@permission_required("content", "delete")
def delete_section(section_id):
    result = get_content_store().delete_section(section_id, actor_id=current_user_id())
    return jsonify(result), 200

# ------------------------
# Blocks
# ------------------------

@cms_bp.route("/sections/<section_id>/blocks", methods=["GET"])
@jwt_required()
@permission_required("content", "read")
def list_blocks(section_id):
    return jsonify([
        normalize_block(b, admin=True)
        for b in get_content_store().list_blocks(section_id)
    ]), 200

@cms_bp.route("/sections/<section_id>/blocks", methods=["POST"])
@jwt_required()
@permission_required("content", "create")
def create_block(section_id):
    block = get_content_store().create_block(section_id, _json_body(), actor_id=current_user_id())
    return jsonify(normalize_block(block, admin=True)), 201

@cms_bp.route("/sections/<section_id>/blocks/reorder", methods=["PATCH"])
@jwt_required()
@permission_required("content", "update")
def reorder_blocks(section_id):
    blocks = get_content_store().reorder_blocks(
        section_id,
        _json_body().get("block_orders"),
        actor_id=current_user_id(),
    )
    return jsonify([normalize_block(b, admin=True) for b in blocks]), 200

@cms_bp.route("/blocks/<block_id>", methods=["GET"])
@jwt_required()
@permission_required("content", "read")
def get_block(block_id):
    return jsonify(normalize_block(get_content_store().get_block(block_id), admin=True)), 200

@cms_bp.route("/blocks/<block_id>", methods=["PUT"])
@jwt_required()
@permission_required("content", "update")
def update_block(block_id):
    store = get_content_store()

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(store.get_block(block_id))

    block = store.update_block(block_id, _json_body(), actor_id=current_user_id())
    return jsonify(normalize_block(block, admin=True)), 200

@cms_bp.route("/blocks/<block_id>", methods=["DELETE"])
@jwt_required()
@permission_required("content", "delete")
def delete_block(block_id):
    result = get_content_store().delete_block(block_id, actor_id=current_user_id())
    return jsonify(result), 200
