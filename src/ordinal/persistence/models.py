"""
Table helper for positioned lists.

The owning application normally declares its own tables; this builds the
common shape (integer id, nullable position, index on position).
"""

from sqlalchemy import Column, Index, Integer, MetaData, Table


def positioned_table(
    name: str,
    metadata: MetaData,
    *columns: Column,
    position_column: str = "position",
) -> Table:
    """Declare `name` with an ``id`` primary key, `columns`, and a nullable position."""
    table = Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        *columns,
        Column(position_column, Integer, nullable=True),
    )
    Index(f"ix_{name}_{position_column}", table.c[position_column])
    return table
