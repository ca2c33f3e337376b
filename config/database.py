"""Database configuration for async MongoDB connection using Motor."""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional

from config.settings import Settings, settings as default_settings


class Database:
    """MongoDB database connection manager."""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    def __init__(self, url: Optional[str] = None, name: Optional[str] = None, client=None):
        """
        Configure the connection target.

        Args:
            url: MongoDB connection string (defaults to settings)
            name: Database name (defaults to settings)
            client: Pre-built motor-compatible client; skips creating one on connect
        """
        self.url = url or default_settings.MONGODB_URL
        self.name = name or default_settings.DATABASE_NAME
        self._injected_client = client

    @classmethod
    def from_settings(cls, config: Settings) -> "Database":
        """Build a manager pointed at the configured database."""
        return cls(url=config.MONGODB_URL, name=config.DATABASE_NAME)

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        if self._injected_client is not None:
            self.client = self._injected_client
        else:
            self.client = AsyncIOMotorClient(
                self.url,
                maxPoolSize=10,
                minPoolSize=1,
                tz_aware=True
            )
        self.db = self.client[self.name]

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client and self._injected_client is None:
            self.client.close()

    async def health_check(self) -> bool:
        """Check if database connection is healthy."""
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except Exception:
            return False

    def get_collection(self, collection_name: str):
        """Get a specific collection from the database."""
        return self.db[collection_name]
