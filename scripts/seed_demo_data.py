"""Seed demo accounts, halls, subjects and today's classes.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os

from lectro.db.bootstrap import ensure_runtime_schema_compatibility
from lectro.db.seed import DEMO_USERS, seed_demo_data
from lectro.db.session import SessionLocal

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "password123")


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        created = seed_demo_data(session, password=DEFAULT_PASSWORD)
        session.commit()

    if not any(created.values()):
        print("Demo data already present. Nothing to do.")
        return
    print("Seeded:")
    for kind, count in created.items():
        print(f"  - {kind}: {count}")
    print("\nDemo accounts:")
    for item in DEMO_USERS:
        print(f"  - {item['email']} | role={item['role'].value}")
    print(f"\nPassword for all demo accounts: {DEFAULT_PASSWORD}")


if __name__ == "__main__":
    main()
