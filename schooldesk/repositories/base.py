# schooldesk/repositories/base.py - Generic repository bound to one table
from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from schooldesk.core.exceptions import NotFoundError
from schooldesk.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """
    CRUD access to a single model.

    Services receive repositories through their constructor, so swapping
    the session (an in-memory SQLite one in tests) swaps the store.
    Repositories never commit; the calling service owns the transaction.
    """

    entity_name: str = "Record"

    def __init__(self, model: Type[ModelT], session: Session, entity_name: Optional[str] = None):
        self.model = model
        self.session = session
        if entity_name:
            self.entity_name = entity_name

    def get(self, id: UUID) -> Optional[ModelT]:
        return self.session.get(self.model, id)

    def get_or_404(self, id: UUID) -> ModelT:
        instance = self.get(id)
        if instance is None:
            raise NotFoundError(self.entity_name, id)
        return instance

    def find_by(self, **filters: Any) -> Optional[ModelT]:
        return self.session.execute(
            select(self.model).filter_by(**filters)
        ).scalars().first()

    def list(self, *criteria: Any, order_by: Any = None, limit: Optional[int] = None, **filters: Any) -> Sequence[ModelT]:
        query = select(self.model)
        if criteria:
            query = query.where(*criteria)
        if filters:
            query = query.filter_by(**filters)
        if order_by is not None:
            query = query.order_by(*order_by) if isinstance(order_by, (list, tuple)) else query.order_by(order_by)
        if limit:
            query = query.limit(limit)
        return self.session.execute(query).scalars().all()

    def count(self, *criteria: Any, **filters: Any) -> int:
        query = select(func.count()).select_from(self.model)
        if criteria:
            query = query.where(*criteria)
        if filters:
            query = query.filter_by(**filters)
        return self.session.execute(query).scalar_one()

    def add(self, instance: ModelT) -> ModelT:
        self.session.add(instance)
        return instance

    def delete(self, instance: ModelT) -> None:
        self.session.delete(instance)
