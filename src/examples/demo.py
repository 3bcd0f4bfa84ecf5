"""
demo.py – One-shot showcase of ordinal.

Uses $ORDINAL_DATABASE_URL (or a .env file) and falls back to a local
SQLite file. Run with:  python src/examples/demo.py
"""

from pprint import pprint

from sqlalchemy import Column, Integer, MetaData, String

from ordinal import Settings, create, destroy, init_ordinal, on, positioned
from ordinal.persistence.models import positioned_table

# ────────────────────────────────── 1. engine + logging ────────────────────────────────
settings = Settings.from_env()
engine = init_ordinal(settings)
print(f"\nConnecting to {engine.url.render_as_string(hide_password=True)}\n")

# ────────────────────────────────── 2. a positioned table ──────────────────────────────
metadata = MetaData()
todo_items = positioned_table(
    "todo_items",
    metadata,
    Column("todo_list_id", Integer, nullable=True),
    Column("title", String, nullable=False),
)
metadata.drop_all(engine)
metadata.create_all(engine)

items = positioned(todo_items, engine, scope="todo_list")


@on.move(todo_items)
def announce(record) -> None:
    print(f"  moved {record.title!r} to {record.position}")


def titles(record) -> list[str]:
    return [item.title for item in items.items(record)]


def main() -> None:
    groceries = [
        create(items, {"todo_list_id": 1, "title": title})
        for title in ("milk", "eggs", "bread", "coffee")
    ]
    create(items, {"todo_list_id": 2, "title": "call mum"})
    milk, eggs, bread, coffee = groceries

    pprint(titles(milk))
    items.move_to_bottom(milk)
    items.move_higher(coffee)
    pprint(titles(milk))

    items.insert_at(bread, 1)
    pprint(titles(milk))

    items.remove(eggs)
    destroy(items, eggs)  # second shift is skipped
    pprint(titles(milk))


if __name__ == "__main__":
    main()
