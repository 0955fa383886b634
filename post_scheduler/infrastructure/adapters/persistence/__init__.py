from .postgres_account_repository import PostgresAccountRepository
from .postgres_schedule_repository import PostgresScheduleRepository

__all__ = ["PostgresAccountRepository", "PostgresScheduleRepository"]
