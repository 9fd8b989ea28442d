"""
Base repository class providing common database operations.

This class serves as a reusable foundation for repositories that interact with
the database using SQLAlchemy's async sessions.

It defines the CRUD operations every aggregate needs (save, lookup by id, listing,
existence checks, counting, deletion). Model-specific repositories inherit from it
and add their own queries.

Transaction control is NOT done here: repositories only `flush()`. Committing (or
rolling back) a unit of work is the service layer's job, so several repository calls
can be grouped into one atomic operation.
"""
from classroom.exceptions.base import RepositoryError
from classroom.exceptions.mapper import db_error_handler

import time
from typing import TypeVar, Generic, Type, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
import logging

from classroom.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

# Setup logging
logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize the repository.

        Args:
            model: The SQLAlchemy model class (the class itself, not an instance);
                   needed to build queries dynamically: select(self.model), delete(self.model), ...
            db: The async database session, injected per request.
        """
        self.model = model
        self.db = db

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def save(self, entity: ModelType) -> ModelType:
        """
        Insert the entity if it is new, otherwise flush its pending changes.

        Logging:
        - DEBUG: start event with model name.
        - INFO: success event with id and duration_ms.
        - Integrity failures are mapped by `db_error_handler` (DuplicateError, InvalidArgumentError, ...).

        Returns:
            The same entity, with its database identifier populated.
        """
        is_new = getattr(entity, "id", None) is None
        operation = "insert" if is_new else "update"
        logger.debug(
            "repo.save.start",
            extra={"model": self.model.__name__, "operation": operation},
        )

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model.__name__):
            self.db.add(entity)
            # flush sends the INSERT/UPDATE so the id is available; commit is left to the caller
            await self.db.flush()
            await self.db.refresh(entity)

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "repo.save.success",
            extra={
                "model": self.model.__name__,
                "operation": operation,
                "id": getattr(entity, "id", None),
                "duration_ms": duration_ms,
            },
        )
        return entity

    async def delete(self, entity: ModelType) -> None:
        """
        Delete an already loaded entity.
        """
        async with db_error_handler(self.db, self.model.__name__):
            await self.db.delete(entity)
            await self.db.flush()

        logger.debug(f"Deleted {self.model.__name__} with ID: {getattr(entity, 'id', None)}")

    async def delete_by_id(self, entity_id: int) -> bool:
        """
        Delete an entity by its ID.

        Returns:
            True if a row was deleted, False if no row had that ID.
        """
        async with db_error_handler(self.db, self.model.__name__):
            result = await self.db.execute(delete(self.model).where(self.model.id == entity_id))

        if result.rowcount > 0:
            logger.debug(f"Deleted {self.model.__name__} with ID: {entity_id}")
            return True

        logger.warning(f"{self.model.__name__} with ID {entity_id} not found for deletion")
        return False

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """
        Get an entity by its ID.

        Returns:
            The entity if found, otherwise None. Absence is not an error at this layer.

        Raises:
            RepositoryError: If the query itself fails.
        """
        try:
            # session.get() consults the identity map before issuing a SELECT
            entity = await self.db.get(self.model, entity_id)
            logger.debug(f"Retrieved {self.model.__name__} by ID: {entity_id} (found={entity is not None})")
            return entity

        except Exception as e:
            logger.error(f"Error retrieving {self.model.__name__} by ID {entity_id}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model.__name__}") from e

    async def get_all(self) -> list[ModelType]:
        """
        Get every entity, ordered by primary key.

        Returns:
            A list of model instances (empty if none found).
        """
        try:
            query = select(self.model).order_by(self.model.id)
            result = await self.db.execute(query)
            entities = list(result.scalars().all())

            logger.debug(f"Retrieved {len(entities)} {self.model.__name__} entities")
            return entities

        except Exception as e:
            logger.error(f"Error retrieving all {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model.__name__} entities") from e

    async def exists(self, entity_id: int) -> bool:
        """
        Check if an entity exists by its ID.
        """
        try:
            result = await self.db.execute(select(self.model.id).where(self.model.id == entity_id))
            exists = result.scalar() is not None
            logger.debug(f"{self.model.__name__} with ID {entity_id} exists: {exists}")
            return exists

        except Exception as e:
            logger.error(f"Error checking existence of {self.model.__name__} {entity_id}: {e}")
            raise RepositoryError(f"Failed to check {self.model.__name__} existence") from e

    async def count(self, **filters: Any) -> int:
        """
        Count entities with optional exact-match filters (e.g., term=3).
        """
        try:
            query = select(func.count(self.model.id))

            for field, value in filters.items():
                if hasattr(self.model, field) and value is not None:
                    query = query.where(getattr(self.model, field) == value)

            result = await self.db.execute(query)
            count = result.scalar() or 0

            logger.debug(f"Counted {count} {self.model.__name__} entities")
            return count

        except Exception as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to count {self.model.__name__} entities") from e
