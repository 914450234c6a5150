"""HTTP tests for the /api/v1 blueprint."""

import pytest

from marketing_cms.models.audit_log import AuditLog

PAGES = "/api/v1/cms/pages"


@pytest.fixture
def editor(auth_headers):
    return auth_headers("editor", "editor-1")


@pytest.fixture
def created(client, editor):
    response = client.post(PAGES, json={"slug": "home", "title": "Home"}, headers=editor)
    assert response.status_code == 201
    return response.get_json()


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok", "service": "marketing-cms"}

    def test_openapi_document(self, client):
        response = client.get("/openapi/cms.yaml")
        assert response.status_code == 200
        assert b"Marketing CMS API" in response.data


class TestAuth:

    def test_token_required(self, client):
        assert client.get(PAGES).status_code == 401

    def test_viewer_cannot_create(self, client, auth_headers):
        response = client.post(PAGES, json={"slug": "x", "title": "X"}, headers=auth_headers("viewer"))
        assert response.status_code == 403
        assert response.get_json()["error"] == "Forbidden"

    def test_viewer_can_read(self, client, auth_headers, created):
        response = client.get(f"{PAGES}/{created['id']}", headers=auth_headers("viewer"))
        assert response.status_code == 200
        assert response.headers["Cache-Control"].startswith("no-store")


class TestPagesApi:

    def test_create(self, created):
        assert created["slug"] == "home"
        assert created["is_published"] is False
        assert created["published_at"] is None
        assert created["status"] == "draft"
        assert created["created_by"] == "editor-1"

    def test_create_duplicate_slug(self, client, editor, created):
        response = client.post(PAGES, json={"slug": "home", "title": "Again"}, headers=editor)
        assert response.status_code == 409
        assert response.get_json()["error"] == "Conflict"

    def test_create_requires_json_object(self, client, editor):
        response = client.post(PAGES, json=["not", "an", "object"], headers=editor)
        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationError"

    def test_create_missing_title(self, client, editor):
        response = client.post(PAGES, json={"slug": "x"}, headers=editor)
        assert response.status_code == 400

    def test_get_missing(self, client, editor):
        response = client.get(f"{PAGES}/missing", headers=editor)
        assert response.status_code == 404
        body = response.get_json()
        assert body["error"] == "NotFound"
        assert body["details"] == {"resource": "Page", "id": "missing"}

    def test_update(self, client, editor, created):
        response = client.put(f"{PAGES}/{created['id']}", json={"title": "Welcome"}, headers=editor)
        assert response.status_code == 200
        assert response.get_json()["title"] == "Welcome"
        assert response.get_json()["slug"] == "home"

    def test_list(self, client, editor, created):
        client.post(PAGES, json={"slug": "blog-1", "title": "Post", "page_type": "blog"}, headers=editor)

        body = client.get(f"{PAGES}?per_page=1", headers=editor).get_json()
        assert len(body["items"]) == 1
        assert body["pagination"] == {"page": 1, "per_page": 1, "total": 2, "total_pages": 2}

        blogs = client.get(f"{PAGES}?page_type=blog", headers=editor).get_json()
        assert [p["slug"] for p in blogs["items"]] == ["blog-1"]

    def test_list_rejects_bad_boolean(self, client, editor):
        response = client.get(f"{PAGES}?is_published=maybe", headers=editor)
        assert response.status_code == 400

    def test_publish_and_public_access(self, client, editor, created):
        assert client.get("/api/v1/public/pages/home").status_code == 404

        response = client.patch(
            f"{PAGES}/{created['id']}/publish",
            json={"is_published": True},
            headers=editor,
        )
        assert response.status_code == 200
        assert response.get_json()["published_at"] is not None

        public = client.get("/api/v1/public/pages/home")
        assert public.status_code == 200
        assert "created_by" not in public.get_json()

        listing = client.get("/api/v1/public/pages").get_json()
        assert [p["slug"] for p in listing["items"]] == ["home"]

    def test_publish_requires_boolean(self, client, editor, created):
        response = client.patch(f"{PAGES}/{created['id']}/publish", json={"is_published": "yes"}, headers=editor)
        assert response.status_code == 400

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_update_rejects_non_boolean_publish_flag(self, client, editor, created, value):
        response = client.put(f"{PAGES}/{created['id']}", json={"is_published": value}, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["details"] == {"field": "is_published"}

        page = client.get(f"{PAGES}/{created['id']}", headers=editor).get_json()
        assert page["is_published"] is False
        versions = client.get(f"{PAGES}/{created['id']}/versions", headers=editor).get_json()
        assert [v["change_type"] for v in versions] == ["create"]

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_create_rejects_non_boolean_publish_flag(self, client, editor, value):
        response = client.post(PAGES, json={"slug": "x", "title": "X", "is_published": value}, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationError"

    @pytest.mark.parametrize("body", [
        {"slug": "y", "title": 123},
        {"slug": 7, "title": "Y"},
        {"slug": "y", "title": "Y", "metadata": ["a"]},
    ])
    def test_create_rejects_wrongly_typed_fields(self, client, editor, body):
        response = client.post(PAGES, json=body, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationError"

    def test_update_rejects_wrongly_typed_title(self, client, editor, created):
        response = client.put(f"{PAGES}/{created['id']}", json={"title": 123}, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["details"] == {"field": "title"}

    def test_update_rejects_page_type_change(self, client, editor, created):
        response = client.put(f"{PAGES}/{created['id']}", json={"page_type": "blog"}, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["details"]["field"] == "page_type"

    def test_delete(self, client, editor, created):
        response = client.delete(f"{PAGES}/{created['id']}", headers=editor)
        assert response.status_code == 200
        assert response.get_json()["success"] is True
        assert client.get(f"{PAGES}/{created['id']}", headers=editor).status_code == 404
        assert client.get(f"{PAGES}/{created['id']}/versions", headers=editor).status_code == 404


class TestOptimisticLock:

    def test_stale_client_conflicts(self, client, editor, created):
        response = client.put(
            f"{PAGES}/{created['id']}",
            json={"title": "Late"},
            headers={**editor, "If-Unmodified-Since": "2000-01-01T00:00:00Z"},
        )
        assert response.status_code == 409
        assert response.get_json()["error"] == "ConcurrentModification"

    def test_fresh_client_passes(self, client, editor, created):
        response = client.put(
            f"{PAGES}/{created['id']}",
            json={"title": "On time"},
            headers={**editor, "If-Unmodified-Since": "2999-01-01T00:00:00Z"},
        )
        assert response.status_code == 200

    def test_invalid_header(self, client, editor, created):
        response = client.put(
            f"{PAGES}/{created['id']}",
            json={"title": "Whenever"},
            headers={**editor, "If-Unmodified-Since": "not a date"},
        )
        assert response.status_code == 400


class TestVersionsApi:

    def _versions(self, client, headers, page_id):
        return client.get(f"{PAGES}/{page_id}/versions", headers=headers).get_json()

    def test_history_and_restore(self, client, editor, created):
        page_id = created["id"]
        client.put(f"{PAGES}/{page_id}", json={"title": "Second"}, headers=editor)

        versions = self._versions(client, editor, page_id)
        assert [v["version_number"] for v in versions] == [2, 1]
        assert [v["change_type"] for v in versions] == ["update", "create"]

        first = versions[-1]
        detail = client.get(f"{PAGES}/{page_id}/versions/{first['id']}", headers=editor).get_json()
        assert detail["title"] == "Home"

        restored = client.post(f"{PAGES}/{page_id}/versions/{first['id']}/restore", headers=editor)
        assert restored.status_code == 200
        assert restored.get_json()["title"] == "Home"
        assert [v["version_number"] for v in self._versions(client, editor, page_id)] == [3, 2, 1]

        log = AuditLog.query.filter_by(action="restore").one()
        assert log.user_id == "editor-1"
        assert log.resource_id == page_id
        assert log.ip_address == "127.0.0.1"

    def test_cross_page_access_is_not_found(self, client, editor, created):
        other = client.post(PAGES, json={"slug": "other", "title": "Other"}, headers=editor).get_json()
        foreign = self._versions(client, editor, other["id"])[0]

        restore = client.post(f"{PAGES}/{created['id']}/versions/{foreign['id']}/restore", headers=editor)
        assert restore.status_code == 404
        assert restore.get_json()["error"] == "NotFound"

        detail = client.get(f"{PAGES}/{created['id']}/versions/{foreign['id']}", headers=editor)
        assert detail.status_code == 404

        assert len(self._versions(client, editor, created["id"])) == 1

    def test_compare(self, client, editor, created):
        page_id = created["id"]
        client.put(f"{PAGES}/{page_id}", json={"title": "Second"}, headers=editor)
        v2, v1 = self._versions(client, editor, page_id)

        response = client.get(
            f"{PAGES}/versions/compare?version1={v1['id']}&version2={v2['id']}",
            headers=editor,
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["version1"]["id"] == v1["id"]
        assert body["changes"] == [{"field": "title", "old_value": "Home", "new_value": "Second"}]

    def test_compare_requires_both_ids(self, client, editor, created):
        response = client.get(f"{PAGES}/versions/compare?version1=abc", headers=editor)
        assert response.status_code == 400
        assert response.get_json()["error"] == "ValidationError"

    def test_compare_missing_version(self, client, editor, created):
        v1 = self._versions(client, editor, created["id"])[0]
        response = client.get(f"{PAGES}/versions/compare?version1={v1['id']}&version2=missing", headers=editor)
        assert response.status_code == 404


class TestAuditLogApi:

    def test_admin_only(self, client, editor):
        assert client.get("/api/v1/audit-logs", headers=editor).status_code == 403

    def test_cursor_pagination(self, client, editor, auth_headers):
        for slug in ("one", "two", "three"):
            client.post(PAGES, json={"slug": slug, "title": slug.title()}, headers=editor)
        admin = auth_headers("admin", "admin-1")

        first = client.get("/api/v1/audit-logs?limit=2", headers=admin).get_json()
        assert len(first["items"]) == 2
        assert first["pagination"]["has_more"] is True
        assert first["items"][0]["details"]["slug"] == "three"

        cursor = first["pagination"]["next_cursor"]
        second = client.get("/api/v1/audit-logs", query_string={"limit": 2, "cursor": cursor}, headers=admin).get_json()
        assert len(second["items"]) == 1
        assert second["pagination"] == {"has_more": False, "next_cursor": None}
        assert second["items"][0]["details"]["slug"] == "one"

    def test_filters(self, client, editor, auth_headers, created):
        client.delete(f"{PAGES}/{created['id']}", headers=editor)
        admin = auth_headers("admin", "admin-1")

        body = client.get("/api/v1/audit-logs?action=delete", headers=admin).get_json()
        assert [item["action"] for item in body["items"]] == ["delete"]
        assert body["items"][0]["resource"] == "pages"
        assert body["items"][0]["user_id"] == "editor-1"

    def test_invalid_cursor(self, client, auth_headers):
        response = client.get("/api/v1/audit-logs?cursor=garbage", headers=auth_headers("admin"))
        assert response.status_code == 400


class TestContentApi:

    def _sections(self, client, headers, page_id):
        return client.get(f"{PAGES}/{page_id}/sections", headers=headers).get_json()

    def test_section_and_block_crud(self, client, editor, created):
        page_id = created["id"]

        response = client.post(f"{PAGES}/{page_id}/sections", json={"type": "hero", "title": "Welcome"}, headers=editor)
        assert response.status_code == 201
        section = response.get_json()
        assert section["order"] == 1
        assert section["page_id"] == page_id

        block = client.post(
            f"/api/v1/cms/sections/{section['id']}/blocks",
            json={"type": "image", "media_url": "/img/hero.png"},
            headers=editor,
        )
        assert block.status_code == 201

        updated = client.put(f"/api/v1/cms/sections/{section['id']}", json={"subtitle": "Hi"}, headers=editor)
        assert updated.status_code == 200
        assert updated.get_json()["subtitle"] == "Hi"

        tree = self._sections(client, editor, page_id)
        assert [s["type"] for s in tree] == ["hero"]
        assert [b["media_url"] for b in tree[0]["blocks"]] == ["/img/hero.png"]

        deleted = client.delete(f"/api/v1/cms/blocks/{block.get_json()['id']}", headers=editor)
        assert deleted.status_code == 200
        assert client.get(f"/api/v1/cms/sections/{section['id']}/blocks", headers=editor).get_json() == []

    def test_reorder_sections(self, client, editor, created):
        page_id = created["id"]
        ids = [
            client.post(f"{PAGES}/{page_id}/sections", json={"type": t}, headers=editor).get_json()["id"]
            for t in ("hero", "features", "cta")
        ]

        response = client.patch(
            f"{PAGES}/{page_id}/sections/reorder",
            json={"section_orders": [{"id": ids[2], "order": 1}]},
            headers=editor,
        )

        assert response.status_code == 200
        assert [s["type"] for s in response.get_json()] == ["cta", "hero", "features"]
        assert [s["order"] for s in self._sections(client, editor, page_id)] == [1, 2, 3]

    def test_reorder_requires_list(self, client, editor, created):
        response = client.patch(f"{PAGES}/{created['id']}/sections/reorder", json={}, headers=editor)
        assert response.status_code == 400

    def test_invalid_block_is_bad_request(self, client, editor, created):
        section = client.post(f"{PAGES}/{created['id']}/sections", json={"type": "hero"}, headers=editor).get_json()

        response = client.post(f"/api/v1/cms/sections/{section['id']}/blocks", json={"type": "video"}, headers=editor)
        assert response.status_code == 400
        assert response.get_json()["error"] == "InvariantViolation"

    def test_viewer_reads_but_cannot_edit(self, client, editor, auth_headers, created):
        viewer = auth_headers("viewer")
        response = client.post(f"{PAGES}/{created['id']}/sections", json={"type": "hero"}, headers=viewer)
        assert response.status_code == 403
        assert client.get(f"{PAGES}/{created['id']}/sections", headers=viewer).status_code == 200

    def test_missing_page(self, client, editor):
        response = client.get(f"{PAGES}/missing/sections", headers=editor)
        assert response.status_code == 404

    def test_public_tree(self, client, editor, created):
        page_id = created["id"]
        section = client.post(f"{PAGES}/{page_id}/sections", json={"type": "hero"}, headers=editor).get_json()
        client.post(f"/api/v1/cms/sections/{section['id']}/blocks", json={"type": "text", "title": "Hi"}, headers=editor)
        client.post(f"{PAGES}/{page_id}/sections", json={"type": "cta", "is_visible": False}, headers=editor)

        assert client.get("/api/v1/public/pages/home/sections").status_code == 404

        client.patch(f"{PAGES}/{page_id}/publish", json={"is_published": True}, headers=editor)
        response = client.get("/api/v1/public/pages/home/sections")

        assert response.status_code == 200
        assert response.headers["Cache-Control"].startswith("no-store")
        body = response.get_json()
        assert [s["type"] for s in body] == ["hero"]
        assert [b["title"] for b in body[0]["blocks"]] == ["Hi"]
        assert "is_visible" not in body[0]
