"""Shared fixtures: an app wired to an in-memory MongoDB and fast bcrypt."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app import create_app
from config.database import Database
from config.settings import Settings
from services.context import AppContext


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        DATABASE_NAME="taskflow_test",
        JWT_ACCESS_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        BCRYPT_ROUNDS=4,
        ENVIRONMENT="test",
        DEBUG=False,
    )


@pytest.fixture()
def database(test_settings) -> Database:
    return Database(name=test_settings.DATABASE_NAME, client=AsyncMongoMockClient(tz_aware=True))


@pytest.fixture()
def client(test_settings, database):
    app = create_app(config=test_settings, database=database)
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def context(test_settings, database) -> AppContext:
    """Services over a connected in-memory database, for direct async calls."""
    asyncio.run(database.connect())
    ctx = AppContext.build(test_settings, database)
    asyncio.run(ctx.ensure_indexes())
    return ctx


def register(client, name="Jo Lee", email="jo@example.com", password="secret1"):
    """Register a user through the API and return the response."""
    return client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def use_refresh_cookie(client, token):
    """Make ``token`` the only refresh cookie the client will send."""
    client.cookies.clear()
    if token:
        client.cookies.set("refreshToken", token)
