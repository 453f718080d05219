"""
Example 02: Transactions and raw statements

This example shows adapter-level inserts and updates, statements with
``?`` placeholders, and transactions that commit or roll back as a unit.
The same code runs against MySQL or PostgreSQL by changing the URL.
"""

import asyncio
import tempfile
from pathlib import Path

from anyorm import AdapterRegistry, Expr, Statement, StatementError


async def main():
    db_path = Path(tempfile.mkdtemp()) / "example.db"

    adapters = AdapterRegistry()
    db = adapters.register("default", f"sqlite:///{db_path}?pool_size=2")

    await db.execute(
        "CREATE TABLE accounts (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "owner TEXT UNIQUE, balance REAL)"
    )

    print("=== Transactions ===\n")

    # Example 1: Insert with a generated id
    print("1. Insert and read back the generated id:")
    result = await db.insert("accounts", {"owner": "alice", "balance": 100}, returning="id")
    print(f"   Returning values: {result.returning_values}\n")
    await db.insert("accounts", {"owner": "bob", "balance": 20})

    # Example 2: A transfer that commits
    print("2. Successful transfer:")
    async with db.transaction() as trx:
        await db.update(
            "accounts", {"balance": Expr("balance - 30")}, "owner = ?", "alice", transaction=trx
        )
        await db.update(
            "accounts", {"balance": Expr("balance + 30")}, "owner = ?", "bob", transaction=trx
        )
    rows = await db.select("accounts", ["owner", "balance"])
    print(f"   Balances: {rows}\n")

    # Example 3: A failing transaction rolls back
    print("3. Transaction with error (automatic rollback):")
    try:
        async with db.transaction() as trx:
            await db.update(
                "accounts", {"balance": 0}, "owner = ?", "alice", transaction=trx
            )
            # duplicate owner violates the UNIQUE constraint
            await db.insert("accounts", {"owner": "bob", "balance": 0}, transaction=trx)
    except StatementError as e:
        print(f"   Error occurred: {type(e.original).__name__}")
    rows = await db.select("accounts", ["owner", "balance"], "owner = ?", "alice")
    print(f"   Alice after rollback: {rows}\n")

    # Example 4: Pre-built statements
    print("4. Statement objects:")
    statement = Statement("SELECT COUNT(*) AS n FROM accounts WHERE balance > ?", (50,))
    result = await db.execute(statement)
    print(f"   Accounts above 50: {result.rows[0]['n']}")

    await adapters.close_all()
    db_path.unlink()


if __name__ == "__main__":
    asyncio.run(main())
