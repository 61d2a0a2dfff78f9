"""
api/routes/tasks.py -- Task catalog routes.

Routes:
  GET  /api/tasks  -- every published task, newest first (public)
  POST /api/tasks  -- publish a task (admin only)
"""

from fastapi import APIRouter, Depends, Request

from api.models import CreatedResponse, TaskCreate, TaskResponse
from auth.dependencies import require_publisher
from auth.models import Caller
from market.models import Task
from market.store import MarketStore

# Auth policy:
# - GET  /api/tasks: public -- workers browse tasks before logging in
# - POST /api/tasks: requires admin (require_publisher -> can_publish_task); refused before any store access
router = APIRouter()


@router.get("/tasks", response_model=list[TaskResponse])
def list_tasks(request: Request) -> list[TaskResponse]:
    market: MarketStore = request.app.state.market
    return [TaskResponse.from_task(t) for t in market.list_tasks()]


@router.post("/tasks", response_model=CreatedResponse, status_code=201)
def create_task(
    request: Request,
    body: TaskCreate,
    caller: Caller = Depends(require_publisher),
) -> CreatedResponse:
    """Publish a new task. Admin only."""
    market: MarketStore = request.app.state.market
    task_id = market.create_task(Task(title=body.title, description=body.description, reward=body.reward))
    return CreatedResponse(message="Task published.", id=task_id)
