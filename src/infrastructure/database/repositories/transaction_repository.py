"""
Transaction service: one commit point per use case.
"""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TransactionService:
    """Commits or rolls back the request-scoped session.

    Repositories only flush; nothing they write is visible to other
    sessions until a use case calls commit().
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute_in_transaction(
        self, operation: Callable[[], Awaitable[T]], name: str = "operation"
    ) -> T:
        """
        Run operation and commit, or roll back and re-raise on any error.

        Args:
            operation: Async function doing the writes
            name: Label used in log lines

        Returns:
            Result of the operation
        """
        try:
            result = await operation()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.warning(
                "Transaction rolled back", operation=name, error=str(e)
            )
            raise

        logger.debug("Transaction committed", operation=name)
        return result

    async def commit(self) -> None:
        await self.session.commit()
        logger.debug("Transaction committed")

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("Transaction rolled back")
