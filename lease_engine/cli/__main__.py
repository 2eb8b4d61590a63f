# lease_engine/cli/__main__.py
from __future__ import annotations

import argparse

from lease_engine.cli.seed_demo import seed_demo
from lease_engine.config import settings
from lease_engine.db import Database


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m lease_engine.cli")
    p.add_argument("--database-url", default=settings.database_url)
    p.add_argument("--init-db", action="store_true", help="create tables before seeding")
    p.add_argument("--manager-id", default="demo-manager")
    p.add_argument("--tenant-id", action="append", dest="tenant_ids")
    p.add_argument("--rent", type=float, default=1500.0)
    p.add_argument("--deposit", type=float, default=1500.0)
    args = p.parse_args()

    database = Database(args.database_url, pool_timeout=settings.pool_timeout)
    try:
        if args.init_db:
            database.create_all()

        db = database.session()
        try:
            out = seed_demo(
                db,
                manager_id=args.manager_id,
                tenant_ids=tuple(args.tenant_ids or ("demo-tenant-1", "demo-tenant-2")),
                rent=args.rent,
                deposit=args.deposit,
            )
        finally:
            db.close()
    finally:
        database.dispose()

    print(
        {
            "ok": True,
            "manager_id": out.manager_id,
            "property_id": out.property_id,
            "tenant_ids": list(out.tenant_ids),
        }
    )


if __name__ == "__main__":
    main()
