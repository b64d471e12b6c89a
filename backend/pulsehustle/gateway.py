"""
Persistence Gateway - the single client for reads and writes to the store

Every domain service talks to the database through this module. It wraps
an ``async_sessionmaker`` and provides:

    - transaction(): a unit of work; all writes inside commit together or
      roll back together
    - insert/get/update/delete/increment/update_where helpers (one
      transaction each)
    - contains_all(): JSON-array containment predicate for skill filters
    - change-event publication to the realtime feed after commit

Any SQLAlchemy failure surfaces as ``UpstreamError`` so services never
leak driver exceptions.

Usage:
    gateway = PersistenceGateway(async_session, feed)

    async with gateway.transaction() as uow:
        payment = await uow.insert(Payment, amount=600, ...)
        gig = await uow.insert(Gig, payment_id=payment.id, ...)
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, List, Optional, Type

from sqlalchemy import and_, cast, delete as sa_delete, literal, select, update as sa_update, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pulsehustle.database import Base
from pulsehustle.errors import UpstreamError
from pulsehustle.feed import ChangeEvent, ChangeFeed, DELETE, INSERT, UPDATE

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Operations bound to one session/transaction.

    Change events are collected here and only published by the gateway
    once the transaction has committed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.events: List[ChangeEvent] = []

    async def insert(self, model: Type[Base], **values: Any) -> Base:
        obj = model(**values)
        self.session.add(obj)
        await self.session.flush()
        self.events.append(ChangeEvent(model.__tablename__, INSERT, new=obj.as_dict()))
        return obj

    async def get(self, model: Type[Base], ident: Any) -> Optional[Base]:
        return await self.session.get(model, ident)

    async def update(self, model: Type[Base], ident: Any, **values: Any) -> Optional[Base]:
        obj = await self.session.get(model, ident)
        if obj is None:
            return None
        old = obj.as_dict()
        for field, value in values.items():
            setattr(obj, field, value)
        await self.session.flush()
        self.events.append(ChangeEvent(model.__tablename__, UPDATE, new=obj.as_dict(), old=old))
        return obj

    async def delete(self, model: Type[Base], ident: Any) -> bool:
        obj = await self.session.get(model, ident)
        if obj is None:
            return False
        old = obj.as_dict()
        await self.session.execute(sa_delete(model).where(model.id == ident))
        self.events.append(ChangeEvent(model.__tablename__, DELETE, old=old))
        return True

    async def increment(self, model: Type[Base], ident: Any, **deltas: Any) -> Optional[Base]:
        """
        Add ``deltas`` to numeric columns with a single UPDATE statement.

        The addition happens inside the database (``col = col + :delta``),
        so concurrent callers cannot lose each other's increments.
        """
        values = {name: getattr(model, name) + delta for name, delta in deltas.items()}
        result = await self.session.execute(
            sa_update(model).where(model.id == ident).values(**values)
        )
        if result.rowcount == 0:
            return None
        obj = await self.session.get(model, ident, populate_existing=True)
        self.events.append(ChangeEvent(model.__tablename__, UPDATE, new=obj.as_dict()))
        return obj

    async def update_where(self, model: Type[Base], ident: Any, condition, **values: Any) -> Optional[Base]:
        """
        Write ``values`` to row ``ident`` only while ``condition`` holds.

        The check and the write are one UPDATE statement, so of several
        concurrent callers at most one sees the row change. Returns None
        when no row matched.
        """
        result = await self.session.execute(
            sa_update(model).where(model.id == ident, condition).values(**values)
        )
        if result.rowcount != 1:
            return None
        obj = await self.session.get(model, ident, populate_existing=True)
        self.events.append(ChangeEvent(model.__tablename__, UPDATE, new=obj.as_dict()))
        return obj

    async def all(self, statement) -> List[Any]:
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def first(self, statement) -> Optional[Any]:
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def scalar(self, statement) -> Any:
        result = await self.session.execute(statement)
        return result.scalar()


class PersistenceGateway:
    def __init__(self, session_factory: async_sessionmaker, feed: Optional[ChangeFeed] = None):
        self._session_factory = session_factory
        self.feed = feed or ChangeFeed()

    @property
    def dialect_name(self) -> str:
        bind = self._session_factory.kw.get("bind")
        return bind.dialect.name if bind is not None else "sqlite"

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[UnitOfWork]:
        async with self._session_factory() as session:
            uow = UnitOfWork(session)
            try:
                yield uow
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error(f"Store operation failed: {exc}")
                raise UpstreamError(f"Store operation failed: {exc.__class__.__name__}") from exc
            except BaseException:
                await session.rollback()
                raise

        for event in uow.events:
            await self.feed.publish(event)

    # ==================== Single-statement helpers ====================

    async def insert(self, model: Type[Base], **values: Any) -> Base:
        async with self.transaction() as uow:
            return await uow.insert(model, **values)

    async def get(self, model: Type[Base], ident: Any) -> Optional[Base]:
        async with self.transaction() as uow:
            return await uow.get(model, ident)

    async def update(self, model: Type[Base], ident: Any, **values: Any) -> Optional[Base]:
        async with self.transaction() as uow:
            return await uow.update(model, ident, **values)

    async def delete(self, model: Type[Base], ident: Any) -> bool:
        async with self.transaction() as uow:
            return await uow.delete(model, ident)

    async def increment(self, model: Type[Base], ident: Any, **deltas: Any) -> Optional[Base]:
        async with self.transaction() as uow:
            return await uow.increment(model, ident, **deltas)

    async def update_where(self, model: Type[Base], ident: Any, condition, **values: Any) -> Optional[Base]:
        async with self.transaction() as uow:
            return await uow.update_where(model, ident, condition, **values)

    async def all(self, statement) -> List[Any]:
        async with self.transaction() as uow:
            return await uow.all(statement)

    async def first(self, statement) -> Optional[Any]:
        async with self.transaction() as uow:
            return await uow.first(statement)

    async def scalar(self, statement) -> Any:
        async with self.transaction() as uow:
            return await uow.scalar(statement)

    async def ensure(self, model: Type[Base], ident: Any, **defaults: Any) -> None:
        """Insert the row ``ident`` with ``defaults`` unless it already exists."""
        try:
            async with self._session_factory() as session:
                if await session.get(model, ident) is None:
                    session.add(model(id=ident, **defaults))
                    await session.commit()
        except IntegrityError:
            # Another caller created it first
            logger.debug(f"{model.__tablename__} row {ident} already created")
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Store operation failed: {exc.__class__.__name__}") from exc

    # ==================== Predicates ====================

    def contains_all(self, column, values: Iterable[str]):
        """
        Predicate: the JSON array in ``column`` contains every value.

        PostgreSQL uses JSONB containment; SQLite expands the array with
        ``json_each`` in a correlated EXISTS per value.
        """
        values = list(values)
        if self.dialect_name == "postgresql":
            return and_(*(cast(column, JSONB).contains([value]) for value in values))

        clauses = []
        for value in values:
            elements = func.json_each(column).table_valued("value")
            clauses.append(
                select(literal(1)).select_from(elements).where(elements.c.value == value).exists()
            )
        return and_(*clauses)
