"""
Dialect-aware SQL helpers shared by the stores.
"""

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_ignore(db: AsyncSession, table: Table, **values):
    """
    INSERT ... ON CONFLICT DO NOTHING for the session's dialect.

    Gives set-add semantics on a unique key in one statement: the row count
    of the result is 1 when the row was new, 0 when it already existed.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}")
    return insert(table).values(**values).on_conflict_do_nothing()
