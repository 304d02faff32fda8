"""Demo login and registration helpers.

Passwords are not stored: every known, unblocked account signs in with the
single configured demo password. This is a storefront demo, not an
authentication system.
"""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from sporta.errors import AuthError

Record = Dict[str, Any]

BAD_CREDENTIALS = "Invalid credentials. Please check your email and password."
BLOCKED = "Your account has been blocked by an administrator."


def find_user(users: Sequence[Record], email: str) -> Optional[Record]:
    email = (email or "").strip().lower()
    return next((u for u in users if str(u.get("email", "")).lower() == email), None)


def authenticate(users: Sequence[Record], email: str, password: str, demo_password: str = "password") -> Record:
    """Return the matching user or raise `AuthError` with a user-facing message."""
    user = find_user(users, email)
    if user is None or password != demo_password:
        raise AuthError(BAD_CREDENTIALS)
    if user.get("isBlocked"):
        raise AuthError(BLOCKED)
    return user


def is_admin(user: Optional[Record]) -> bool:
    return bool(user) and user.get("role") == "admin"


def new_user(username: str, email: str, role: str = "user") -> Record:
    return {
        "id": str(int(time.time() * 1000)),
        "username": username.strip(),
        "email": email.strip(),
        "role": role,
        "isBlocked": False,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
