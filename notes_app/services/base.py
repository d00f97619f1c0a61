"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, handle transactions, and implement
business rules.

Usage:
    from notes_app.services.base import BaseService

    class NoteService(BaseService):
        def __init__(self, session: AsyncSession, storage: StorageBackend) -> None:
            super().__init__(session)
            self.repo = NoteRepository(session)
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.core.exceptions import DatabaseError
from notes_app.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Database session management
    - Logging context
    - Error wrapping for database operations

    Subclasses should:
    - Call super().__init__(session) in their __init__
    - Initialize repositories in __init__
    - Implement business logic methods
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the service with a database session.

        Args:
            session: SQLAlchemy async session for database operations
        """
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Execute a database operation with error handling.

        Converts SQLAlchemy exceptions to DatabaseError so the client sees a
        500 with `operation` as the message.

        Args:
            operation: Client-facing description of what failed
            coro: Coroutine to execute

        Raises:
            DatabaseError: For any database error
        """
        try:
            return await coro
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(operation, detail=str(e)) from e

    async def _commit(self) -> None:
        """Commit the unit of work so later side effects see durable state."""
        await self._session.commit()

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
