#!/usr/bin/env python3
"""
Stress one role's pool: acquire connections from N threads at once.

Backends come from the usual environment / .env settings (METASTORE__URI, ...).
Each worker acquires a connection (running the role's init statement), holds it
for --hold seconds, then releases it.

To see the pool limit in action:
  1. Configure e.g. QUERY_SERVER__URI and POOL_SIZE=2, POOL_TIMEOUT=1.
  2. Run: python scripts/stress_acquire.py --role query_server --concurrent 10 --hold 3

Expected: 2x ok, 8x "acquire" errors (timed out waiting for a free connection).

Usage:
  python scripts/stress_acquire.py [--role ROLE] [--concurrent N] [--hold SECONDS]
  Or set env: ROLE, CONCURRENT
"""

import argparse
import os
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed

from rolepool.core.pool import (
    ConnectionAcquisitionError,
    InitStatementError,
    RolePoolManager,
)
from rolepool.models import Role


def do_acquire(
    manager: RolePoolManager,
    role: Role,
    index: int,
    hold: float,
) -> tuple[int, str]:
    """Acquire, hold and release one connection; return (index, outcome)."""
    try:
        conn = manager.acquire_connection(role)
    except ConnectionAcquisitionError:
        return (index, "acquire")
    except InitStatementError:
        return (index, "init")
    if conn is None:
        return (index, "absent")
    try:
        time.sleep(hold)
    finally:
        conn.close()
    return (index, "ok")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Acquire connections for one role from N parallel threads."
    )
    parser.add_argument(
        "--role",
        default=os.environ.get("ROLE", Role.METASTORE.value),
        choices=[r.value for r in Role],
        help="Role to stress (or set ROLE env)",
    )
    parser.add_argument(
        "--concurrent",
        type=int,
        default=int(os.environ.get("CONCURRENT", "20")),
        help="Number of concurrent acquisitions (default 20)",
    )
    parser.add_argument(
        "--hold",
        type=float,
        default=1.0,
        help="Seconds each worker keeps its connection (default 1)",
    )
    args = parser.parse_args()

    role = Role(args.role)
    manager = RolePoolManager.from_settings()
    if not manager.is_configured(role):
        print(f"Error: role {role.value} is not configured", file=sys.stderr)
        sys.exit(1)

    print(f"Acquiring {args.concurrent} concurrent connections for {role.value}")
    print("---")

    results: list[tuple[int, str]] = []
    with ThreadPoolExecutor(max_workers=args.concurrent) as executor:
        futures = {
            executor.submit(do_acquire, manager, role, i, args.hold): i
            for i in range(1, args.concurrent + 1)
        }
        for fut in as_completed(futures):
            idx, outcome = fut.result()
            results.append((idx, outcome))
            print(f"{idx} {outcome}")

    results.sort(key=lambda x: x[0])
    print("---")
    ok = sum(1 for _, o in results if o == "ok")
    acquire_err = sum(1 for _, o in results if o == "acquire")
    init_err = sum(1 for _, o in results if o == "init")
    print(f"Done. ok={ok} acquire_errors={acquire_err} init_errors={init_err}")
    print(f"Pool: {manager.stats()[role.value]}")
    manager.dispose()


if __name__ == "__main__":
    main()
