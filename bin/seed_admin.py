# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the tables, seeds defaults and the first user.

    python bin/seed_admin.py

Reads FIRST_ADMIN_USERNAME and FIRST_ADMIN_PASSWORD from etc/app.conf.  After
the row is inserted those keys are no longer used by the application.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import settings                # noqa: E402
from core.security import hash_password         # noqa: E402
from database import SessionLocal, engine       # noqa: E402
from models.user import User                    # noqa: E402
from schema_registry import initialize_database  # noqa: E402


def seed():
    initialize_database(engine)

    if not settings.first_admin_username or not settings.first_admin_password:
        print("[seed_admin] FIRST_ADMIN_USERNAME or FIRST_ADMIN_PASSWORD not set in etc/app.conf – no user created.")
        return

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.username == settings.first_admin_username).first()
        if existing:
            print(f"[seed_admin] User '{settings.first_admin_username}' already exists – skipping.")
            return

        db.add(User(
            username=settings.first_admin_username,
            password_hash=hash_password(settings.first_admin_password),
        ))
        db.commit()
        print(f"[seed_admin] User '{settings.first_admin_username}' created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
