from typing import Any, Generic, Iterable, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository providing common CRUD operations.

    Repositories only flush; committing is left to the unit of work that
    owns the session (see SessionManager.session).
    """

    def __init__(self, model: Type[ModelType], session: Session):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class
            session: Database session
        """
        self.model = model
        self.session = session

    @property
    def _pk_column(self):
        pk_columns = self.model.__table__.primary_key.columns
        if len(pk_columns) != 1:
            raise ValueError("Only single-column primary keys are supported")
        return list(pk_columns)[0]

    def create(self, **fields) -> ModelType:
        """Create a new entity."""
        # Let the database assign the ID
        instance = self.model(**fields)
        self.session.add(instance)
        self.session.flush()
        return instance

    def get_by_id(self, id_value: Any) -> ModelType | None:
        """Get entity by ID."""
        stmt = select(self.model).where(self._pk_column == id_value)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_all(self) -> list[ModelType]:
        """Get all entities in primary key order."""
        stmt = select(self.model).order_by(self._pk_column)
        return list(self.session.execute(stmt).scalars().all())

    def get_by(self, **filters) -> list[ModelType]:
        """Get entities matching filters.

        Args:
            **filters: Column name and value pairs to filter by
        """
        stmt = select(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter field: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)

        return list(self.session.execute(stmt.order_by(self._pk_column)).scalars().all())

    def get_one_by(self, **filters) -> ModelType | None:
        """Get single entity matching filters."""
        results = self.get_by(**filters)
        return results[0] if results else None

    def update(self, id_value: Any, **fields) -> ModelType | None:
        """Update entity by ID."""
        entity = self.get_by_id(id_value)
        if entity:
            for key, value in fields.items():
                if not hasattr(entity, key):
                    raise ValueError(f"Unknown field: {key}")
                setattr(entity, key, value)
            self.session.flush()
        return entity

    def delete(self, id_value: Any) -> bool:
        """Delete entity by ID."""
        entity = self.get_by_id(id_value)
        if entity:
            self.session.delete(entity)
            self.session.flush()
            return True
        return False

    def delete_many(self, entities: Iterable[ModelType]) -> int:
        """Delete the given entities, returning how many were removed."""
        removed = 0
        for entity in entities:
            self.session.delete(entity)
            removed += 1
        if removed:
            self.session.flush()
        return removed

    def count(self, **filters) -> int:
        """Count entities matching filters."""
        stmt = select(func.count()).select_from(self.model)
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter field: {key}")
            stmt = stmt.where(getattr(self.model, key) == value)
        return self.session.execute(stmt).scalar_one()

    def exists(self, **filters) -> bool:
        """Check if any entity matches filters."""
        return self.count(**filters) > 0
