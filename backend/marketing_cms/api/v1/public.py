# marketing_cms/api/v1/public.py
from flask import current_app, jsonify, request
from marketing_cms.application.cms import get_content_store, get_page_store
from marketing_cms.normalizers.page import normalize_page
from marketing_cms.normalizers.pagination import normalize_offset_page
from marketing_cms.normalizers.section import normalize_section
from .cms import NO_CACHE_HEADERS
from . import v1_bp


@v1_bp.route("/public/pages", methods=["GET"])
def list_public_pages():
    page_num = max(request.args.get("page", 1, type=int), 1)
    per_page = min(
        max(request.args.get("per_page", 20, type=int), 1),
        current_app.config["API_PAGE_SIZE_MAX"],
    )

    items, total = get_page_store().list_pages(
        page_type=request.args.get("page_type"),
        is_published=True,
        page=page_num,
        per_page=per_page,
    )

    return jsonify(
        normalize_offset_page(
            items,
            normalize_page,
            page=page_num,
            per_page=per_page,
            total=total,
        )
    )


@v1_bp.route("/public/pages/<slug>", methods=["GET"])
def get_public_page(slug):
    page = get_page_store().get_page_by_slug(slug, published_only=True)
    return jsonify(normalize_page(page))


@v1_bp.route("/public/pages/<slug>/sections", methods=["GET"])
def get_public_page_sections(slug):
    page = get_page_store().get_page_by_slug(slug, published_only=True)
    tree = get_content_store().get_published_tree(page)

    return jsonify([
        normalize_section(node["section"], blocks=node["blocks"])
        for node in tree
    ]), 200, NO_CACHE_HEADERS
