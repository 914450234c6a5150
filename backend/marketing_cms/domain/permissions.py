from typing import Dict, Set

PAGE_ACTIONS: Set[str] = {"create", "read", "update", "delete", "publish"}
CRUD_ACTIONS: Set[str] = {"create", "read", "update", "delete"}

# Role -> resource -> allowed actions
ROLE_PERMISSIONS: Dict[str, Dict[str, Set[str]]] = {
    "admin": {
        "users": CRUD_ACTIONS,
        "roles": CRUD_ACTIONS,
        "pages": PAGE_ACTIONS,
        "content": CRUD_ACTIONS,
        "media": CRUD_ACTIONS,
        "audit_logs": {"read"},
    },
    "editor": {
        "pages": PAGE_ACTIONS,
        "content": CRUD_ACTIONS,
        "media": CRUD_ACTIONS,
    },
    "viewer": {
        "pages": {"read"},
        "content": {"read"},
        "media": {"read"},
    },
}


def has_permission(role: str | None, resource: str, action: str) -> bool:
    if not role:
        return False
    grants = ROLE_PERMISSIONS.get(role.lower(), {})
    return action in grants.get(resource, set())
