"""
Relational Store

**What**: The small query surface the resolution layer is built on
(find_by_id, find_where, find_all, insert)
**Why**: Keeps the services independent of how sessions are created; the
session is always passed in, never looked up globally
**How**: Thin wrapper over an AsyncSession using SQLAlchemy 2.x `select()`

**Usage**:
```python
store = Store(db)
gene = await store.find_by_id(Gene, 42)
links = await store.find_where(
    ExpressionLink,
    ExpressionLink.source_type == "gene",
    ExpressionLink.source_id == 42,
    order_by=ExpressionLink.sample_id,
)
```
"""

import logging
from typing import Any, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Store:
    """Read helpers plus a plain insert, all on one caller-owned session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, model: Type[ModelT], pk: Any) -> Optional[ModelT]:
        """Primary-key lookup. Returns None when no row exists."""
        return await self.session.get(model, pk)

    async def find_where(
        self,
        model: Type[ModelT],
        *criteria: Any,
        order_by: Optional[Any] = None,
        options: Iterable[Any] = (),
    ) -> List[ModelT]:
        """
        All rows of `model` matching every criterion (a conjunction).

        **Args**:
        - criteria: SQLAlchemy boolean expressions, e.g. `Gene.genome_id == 1`
        - order_by: column, expression, or sequence of them
        - options: loader options such as `selectinload(...)`
        """
        query = select(model)
        if criteria:
            query = query.where(*criteria)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)
        for option in options:
            query = query.options(option)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def find_one_where(self, model: Type[ModelT], *criteria: Any) -> Optional[ModelT]:
        """Single row matching the criteria, or None."""
        result = await self.session.execute(select(model).where(*criteria))
        return result.scalar_one_or_none()

    async def find_all(self, model: Type[ModelT], order_by: Optional[Any] = None) -> List[ModelT]:
        return await self.find_where(model, order_by=order_by)

    async def insert(self, model: Type[ModelT], **fields: Any) -> ModelT:
        """
        Create a row and flush it so its primary key is assigned.

        Model validators run in the constructor, before anything is added to
        the session. The caller owns the transaction: it commits, and after
        a failed flush it rolls back.
        """
        instance = model(**fields)
        self.session.add(instance)
        try:
            await self.session.flush()
        except SQLAlchemyError:
            logger.error(
                f"Insert into {model.__tablename__} failed",
                exc_info=True,
                extra={"fields": fields},
            )
            raise
        return instance
