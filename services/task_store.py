"""
Task Store

Owner-scoped CRUD over the ``tasks`` collection. Every query built here
includes ``owner_id``, so a task that belongs to someone else behaves exactly
like one that does not exist.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from pymongo import ReturnDocument

from config.logging_utils import log_debug
from models.task import TaskCreate, TaskResponse, TaskUpdate
from services.errors import NotFoundError, ValidationError
from services.object_ids import parse_object_id, validation_message


class TaskStore:
    """Repository for tasks, parameterized by the caller's identity."""

    COLLECTION_NAME = "tasks"

    def __init__(self, collection):
        self._collection = collection

    async def ensure_indexes(self) -> None:
        """Create indexes for the tasks collection."""
        await self._collection.create_index([("owner_id", 1), ("created_at", -1)])

    def _owned(self, owner_id: str, task_id: str) -> dict:
        """Filter matching one task of the owner, or raise NotFound for a bad id."""
        oid = parse_object_id(task_id)
        if oid is None:
            raise NotFoundError("Task not found")
        return {"_id": oid, "owner_id": owner_id}

    async def create(self, owner_id: str, fields: dict[str, Any]) -> TaskResponse:
        """
        Validate and insert a task owned by ``owner_id``.

        Omitted status/priority default to todo/medium.

        Raises:
            ValidationError: a field is missing or breaks its rule
        """
        try:
            data = TaskCreate.model_validate(fields or {})
        except PydanticValidationError as e:
            raise ValidationError(validation_message(e)) from e

        now = datetime.now(timezone.utc)
        task_doc = {
            **data.model_dump(),
            "owner_id": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        result = await self._collection.insert_one(task_doc)
        task_doc["_id"] = result.inserted_id
        log_debug(f"Created task id={result.inserted_id} owner={owner_id}", prefix="TASKS")
        return TaskResponse.from_document(task_doc)

    async def list(self, owner_id: str) -> list[TaskResponse]:
        """All of the owner's tasks, newest first."""
        cursor = self._collection.find(
            {"owner_id": owner_id}
        ).sort([("created_at", -1), ("_id", -1)])

        tasks = []
        async for doc in cursor:
            tasks.append(TaskResponse.from_document(doc))
        return tasks

    async def get(self, owner_id: str, task_id: str) -> TaskResponse:
        """
        Fetch one of the owner's tasks.

        Raises:
            NotFoundError: no such task for this owner (or malformed id)
        """
        doc = await self._collection.find_one(self._owned(owner_id, task_id))
        if not doc:
            raise NotFoundError("Task not found")
        return TaskResponse.from_document(doc)

    async def update(self, owner_id: str, task_id: str, fields: dict[str, Any]) -> TaskResponse:
        """
        Apply a partial update; fields absent from ``fields`` are left untouched.

        Raises:
            NotFoundError: no such task for this owner (or malformed id)
            ValidationError: a supplied field breaks its rule
        """
        query = self._owned(owner_id, task_id)
        try:
            data = TaskUpdate.model_validate(fields or {})
        except PydanticValidationError as e:
            raise ValidationError(validation_message(e)) from e

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await self.get(owner_id, task_id)

        changes["updated_at"] = datetime.now(timezone.utc)
        doc: Optional[dict] = await self._collection.find_one_and_update(
            query,
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("Task not found")
        log_debug(f"Updated task id={task_id} fields={sorted(changes)}", prefix="TASKS")
        return TaskResponse.from_document(doc)

    async def delete(self, owner_id: str, task_id: str) -> TaskResponse:
        """
        Permanently remove one of the owner's tasks.

        Returns:
            The task as it was before deletion

        Raises:
            NotFoundError: no such task for this owner (or malformed id)
        """
        doc = await self._collection.find_one_and_delete(self._owned(owner_id, task_id))
        if not doc:
            raise NotFoundError("Task not found")
        log_debug(f"Deleted task id={task_id} owner={owner_id}", prefix="TASKS")
        return TaskResponse.from_document(doc)
