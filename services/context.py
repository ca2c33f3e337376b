"""Explicit application context handed to request handlers."""

from dataclasses import dataclass

from config.database import Database
from config.settings import Settings
from services.auth_service import AuthService
from services.task_store import TaskStore
from services.token_service import TokenService
from services.user_store import UserStore


@dataclass
class AppContext:
    """Everything a handler needs, built once per application."""

    settings: Settings
    database: Database
    users: UserStore
    tasks: TaskStore
    tokens: TokenService
    auth: AuthService

    @classmethod
    def build(cls, config: Settings, database: Database) -> "AppContext":
        """Wire stores and services over a connected database."""
        users = UserStore(
            database.get_collection(UserStore.COLLECTION_NAME),
            bcrypt_rounds=config.BCRYPT_ROUNDS,
        )
        tasks = TaskStore(database.get_collection(TaskStore.COLLECTION_NAME))
        tokens = TokenService(config)
        return cls(
            settings=config,
            database=database,
            users=users,
            tasks=tasks,
            tokens=tokens,
            auth=AuthService(users, tokens),
        )

    async def ensure_indexes(self) -> None:
        """Create the indexes both collections rely on."""
        await self.users.ensure_indexes()
        await self.tasks.ensure_indexes()
