"""Crossing Times — Store Primitives.

The two operations the pipeline needs from the relational store:
conflict-aware upsert and filtered select. SQLAlchemy errors are
translated into the ingestion error taxonomy here.
"""

from typing import Any, Dict, List, Optional, Sequence, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from crossings.config import settings
from crossings.core.errors import StoreReadFailed, StoreWriteFailed
from crossings.core.logging import get_logger

logger = get_logger("ingest.store")


def _insert_for(dialect: str):
    """Dialect-specific INSERT supporting ON CONFLICT."""
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise StoreWriteFailed(f"Upsert is not supported on dialect '{dialect}'")
    return insert


class Store:
    """Upsert/select over a single SQLModel session.

    Nothing here commits implicitly; the caller owns the transaction.
    """

    def __init__(self, session: Session, batch_size: Optional[int] = None):
        self.session = session
        self.batch_size = batch_size or settings.upsert_batch_size

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def upsert(
        self,
        model: Type[SQLModel],
        rows: List[Dict[str, Any]],
        conflict_columns: Sequence[str],
        ignore_duplicates: bool = True,
    ) -> int:
        """Insert rows, skipping (or updating) those that hit the conflict key.

        Returns the number of rows the store reports as written.
        """
        if not rows:
            return 0

        table = model.__table__
        insert = _insert_for(self.dialect)
        written = 0

        try:
            for start in range(0, len(rows), self.batch_size):
                batch = rows[start : start + self.batch_size]
                stmt = insert(table).values(batch)
                if ignore_duplicates:
                    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
                else:
                    updates = {
                        name: stmt.excluded[name]
                        for name in batch[0]
                        if name not in conflict_columns
                    }
                    stmt = stmt.on_conflict_do_update(
                        index_elements=list(conflict_columns), set_=updates
                    )
                result = self.session.execute(stmt)
                written += max(result.rowcount or 0, 0)
        except SQLAlchemyError as e:
            logger.error(
                f"Upsert into {table.name} failed: {e}",
                extra={"table": table.name, "rows": len(rows)},
            )
            raise StoreWriteFailed(f"Upsert into {table.name} failed: {e}") from e

        logger.debug(
            f"Upserted {len(rows)} rows into {table.name} ({written} written)",
            extra={"table": table.name, "rows": len(rows)},
        )
        return written

    def select(self, model: Type[SQLModel], *criteria: Any) -> List[Any]:
        """Fetch rows of `model` matching every criterion."""
        try:
            return list(self.session.exec(select(model).where(*criteria)).all())
        except SQLAlchemyError as e:
            table_name = model.__table__.name
            logger.error(f"Select from {table_name} failed: {e}", extra={"table": table_name})
            raise StoreReadFailed(f"Select from {table_name} failed: {e}") from e

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreWriteFailed(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        self.session.rollback()
