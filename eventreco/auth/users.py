from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register_user(
    username: str,
    password: str,
    role: str = "client",
    client_id: int | None = None,
) -> None:
    _users[username] = {
        "password_hash": _hash_password(password),
        "role": role,
        "client_id": client_id,
    }


def _seed_users() -> None:
    """Pre-seed demo accounts on import."""
    register_user("client", "client123", role="client", client_id=1)
    register_user("client2", "client234", role="client", client_id=2)
    register_user("admin", "admin123", role="admin")


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role, client_id}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"], "client_id": record["client_id"]}
    return None


_seed_users()
