"""
Tasks API Router

CRUD endpoints for the authenticated user's tasks. Every call goes through the
owner-scoped task store with the caller's id; tasks of other users are
reported as not found.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_context, get_current_user
from api.errors import to_http_exception
from models.envelope import ApiErrorResponse, ApiListResponse, ApiResponse
from models.task import TaskCreate, TaskData, TaskListData, TaskUpdate
from models.user import UserInDB
from services.context import AppContext
from services.errors import TaskFlowError


router = APIRouter(prefix="/tasks", tags=["Tasks"])

_ERRORS = {
    400: {"model": ApiErrorResponse},
    401: {"model": ApiErrorResponse},
    404: {"model": ApiErrorResponse},
}


@router.post("", response_model=ApiResponse[TaskData], status_code=status.HTTP_201_CREATED, responses=_ERRORS)
async def create_task(
    item: TaskCreate,
    current_user: UserInDB = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """Create a task owned by the current user."""
    try:
        task = await context.tasks.create(current_user.id, item.model_dump())
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    return ApiResponse(message="Task created successfully", data=TaskData(task=task))


@router.get("", response_model=ApiListResponse[TaskListData], responses={401: _ERRORS[401]})
async def list_tasks(
    current_user: UserInDB = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """List the current user's tasks, newest first."""
    tasks = await context.tasks.list(current_user.id)
    return ApiListResponse(count=len(tasks), data=TaskListData(tasks=tasks))


@router.get("/{task_id}", response_model=ApiResponse[TaskData], responses=_ERRORS)
async def get_task(
    task_id: str,
    current_user: UserInDB = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """Get one of the current user's tasks."""
    try:
        task = await context.tasks.get(current_user.id, task_id)
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    return ApiResponse(data=TaskData(task=task))


@router.put("/{task_id}", response_model=ApiResponse[TaskData], responses=_ERRORS)
async def update_task(
    task_id: str,
    item: TaskUpdate,
    current_user: UserInDB = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """Update only the supplied fields of one of the current user's tasks."""
    try:
        task = await context.tasks.update(
            current_user.id, task_id, item.model_dump(exclude_unset=True)
        )
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    return ApiResponse(message="Task updated successfully", data=TaskData(task=task))


@router.delete("/{task_id}", response_model=ApiResponse[TaskData], responses=_ERRORS)
async def delete_task(
    task_id: str,
    current_user: UserInDB = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    """Delete one of the current user's tasks and return the deleted copy."""
    try:
        task = await context.tasks.delete(current_user.id, task_id)
    except TaskFlowError as e:
        raise to_http_exception(e) from e

    return ApiResponse(message="Task deleted successfully", data=TaskData(task=task))
