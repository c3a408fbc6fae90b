from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from secret_santa.database import Base

ModelType = TypeVar("ModelType", bound=Base)
PydanticType = TypeVar("PydanticType", bound=BaseModel)


class BaseRepository(Generic[ModelType, PydanticType]):
    """Generic base repository with common CRUD operations."""

    def __init__(self, db: AsyncSession, model_class: Any, id_field: str = "id"):
        self.db = db
        self.model_class = model_class
        self.id_field = id_field

    @property
    def id_column(self) -> Any:
        return getattr(self.model_class, self.id_field)

    async def get_by_id(self, id: int) -> Optional[PydanticType]:
        """Get a single record by ID."""
        query = select(self.model_class).where(self.id_column == id)
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def exists_by_id(self, id: int) -> bool:
        """Check whether a record with the given ID exists."""
        query = select(self.id_column).where(self.id_column == id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none() is not None

    async def create(self, pydantic_model: PydanticType) -> PydanticType:
        """Create a new record."""
        db_model = self._from_pydantic(pydantic_model)
        self.db.add(db_model)
        await self.db.commit()
        await self.db.refresh(db_model)
        return self._to_pydantic(db_model)

    async def update_by_id(
        self, id: int, patch: Dict[str, Any], commit: bool = True
    ) -> int:
        """Apply a partial update to a record and return the matched row count."""
        return await self.conditional_update(id, {}, patch, commit=commit)

    async def conditional_update(
        self,
        id: int,
        expected: Dict[str, Any],
        patch: Dict[str, Any],
        commit: bool = True,
    ) -> int:
        """Update a record only if its current fields equal `expected`.

        Returns the number of matched rows, 0 when the record is missing or
        any expected field no longer holds.
        """
        conditions = [self.id_column == id]
        for field, value in expected.items():
            column = getattr(self.model_class, field)
            conditions.append(column.is_(None) if value is None else column == value)

        query = update(self.model_class).where(*conditions).values(**patch)
        result = await self.db.execute(query)
        if commit:
            await self.db.commit()
        return int(result.rowcount or 0)

    async def delete_all(self) -> int:
        """Delete every record and return how many were removed."""
        result = await self.db.execute(delete(self.model_class))
        await self.db.commit()
        return int(result.rowcount or 0)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    def _to_pydantic(self, db_model: ModelType) -> PydanticType:
        """Convert SQLAlchemy model to Pydantic model.

        This should be overridden in subclasses for specific conversion logic.
        """
        raise NotImplementedError

    def _from_pydantic(self, pydantic_model: PydanticType) -> ModelType:
        """Convert Pydantic model to SQLAlchemy model.

        This should be overridden in subclasses for specific conversion logic.
        """
        raise NotImplementedError
