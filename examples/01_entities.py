"""
Example 01: Entities

This example declares two entities, registers them against a SQLite
service and walks through insert, find, update and destroy, showing the
dirty tracking along the way.
"""

import asyncio
import tempfile
from pathlib import Path

from anyorm import AdapterRegistry, Entity, MapperRegistry


class User(Entity):
    attributes = {
        "id": {"type": "integer", "primary": True, "auto_increment": True},
        "name": "text",
        "email": {"type": "text", "nullable": True},
        "password": {"type": "text", "protected": True},
        "score": {"type": "numeric", "default": 0},
    }
    mapper_options = {"service": "default", "collection": "users"}


class ApiKey(Entity):
    attributes = {
        "key": {"type": "uuid", "primary": True},
        "label": "text",
    }
    mapper_options = {"service": "default", "collection": "api_keys"}


async def main():
    db_path = Path(tempfile.mkdtemp()) / "example.db"

    adapters = AdapterRegistry()
    db = adapters.register("default", f"sqlite:///{db_path}")

    registry = MapperRegistry(adapters=adapters)
    registry.register(User)
    registry.register(ApiKey)

    await db.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "name TEXT, email TEXT, password TEXT, score REAL)"
    )
    await db.execute("CREATE TABLE api_keys (key TEXT PRIMARY KEY, label TEXT)")

    print("=== Entities ===\n")

    # Example 1: Insert
    print("1. Insert a fresh entity:")
    user = User(name="Alice", password="s3cret", score="12.5")
    print(f"   Fresh: {user.is_fresh()}, dirty: {user.is_dirty()}")
    await user.save()
    print(f"   Saved with id={user.get('id')}, fresh: {user.is_fresh()}\n")

    # Example 2: Dirty tracking
    print("2. Dirty tracking:")
    user.set("email", "alice@example.com")
    print(f"   Changes: {user.changes()}")
    user.rollback()
    print(f"   After rollback: dirty={user.is_dirty()}, email={user.get('email')}\n")

    # Example 3: Update only what changed
    print("3. Update:")
    user.set("score", 20)
    await user.save()
    found = await User.find(user.get("id"))
    print(f"   Loaded: {found.to_dict()}\n")

    # Example 4: Generated UUID primary key
    print("4. UUID primary key:")
    key = await ApiKey(label="ci").save()
    print(f"   Generated key: {key.get('key')}\n")

    # Example 5: Destroy
    print("5. Destroy:")
    print(f"   Removed: {await found.destroy()}")
    print(f"   Find again: {await User.find(user.get('id'))}")

    await adapters.close_all()
    db_path.unlink()


if __name__ == "__main__":
    asyncio.run(main())
