"""FastAPI web application for taskplanner."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taskplanner.database.database import get_db, init_db
from taskplanner.database.label_repository import LabelNotFoundError, LabelRepository
from taskplanner.database.list_repository import (
    DefaultListDeletionError,
    ListNotFoundError,
    ListRepository,
)
from taskplanner.database.repository import TaskNotFoundError, TaskRepository
from taskplanner.models.catalog import Label, LabelCreate, LabelUpdate, ListCreate, ListUpdate, TaskList
from taskplanner.models.task import Task, TaskCreate, TaskUpdate, TaskView
from taskplanner.parsing.quick_add import QuickAddError, quick_add
from taskplanner.parsing.task_parser import ParsedTaskDraft, parse_task_text

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="taskplanner API",
    description="Personal task planner with natural-language quick add",
    version="0.1.0",
    lifespan=lifespan,
)


# Request/response models
class TaskResponse(BaseModel):
    task: Task


class TaskListResponse(BaseModel):
    tasks: List[Task]
    count: int


class ListResponse(BaseModel):
    list: TaskList


class ListsResponse(BaseModel):
    lists: List[TaskList]
    count: int


class LabelResponse(BaseModel):
    label: Label


class LabelsResponse(BaseModel):
    labels: List[Label]
    count: int


class ParseRequest(BaseModel):
    """Free text to parse. `now` pins the reference time for relative dates."""
    text: str = Field(..., description="Quick-add text, e.g. 'Call dentist tomorrow at 2pm #health'")
    now: Optional[datetime] = Field(None, description="Reference time (defaults to server local time)")


class QuickAddRequest(ParseRequest):
    list_id: Optional[str] = Field(None, description="Target list (defaults to the inbox list)")


class ParseResponse(BaseModel):
    draft: ParsedTaskDraft


class QuickAddResponse(BaseModel):
    draft: ParsedTaskDraft
    task: Task


class DeleteResponse(BaseModel):
    success: bool = True


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Lists

@app.get("/lists", response_model=ListsResponse)
def list_lists(db: Session = Depends(get_db)):
    repo = ListRepository(db)
    repo.ensure_default()
    lists = repo.get_all()
    return ListsResponse(lists=lists, count=len(lists))


@app.post("/lists", response_model=ListResponse, status_code=201)
def create_list(payload: ListCreate, db: Session = Depends(get_db)):
    try:
        return ListResponse(list=ListRepository(db).create(payload))
    except Exception as e:
        logger.error(f"Error creating list: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create list")


@app.patch("/lists/{list_id}", response_model=ListResponse)
def update_list(list_id: str, payload: ListUpdate, db: Session = Depends(get_db)):
    try:
        return ListResponse(list=ListRepository(db).update(list_id, payload))
    except ListNotFoundError:
        raise HTTPException(status_code=404, detail="List not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/lists/{list_id}", response_model=DeleteResponse)
def delete_list(list_id: str, db: Session = Depends(get_db)):
    try:
        deleted = ListRepository(db).delete(list_id)
    except DefaultListDeletionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="List not found")
    return DeleteResponse()


# Labels

@app.get("/labels", response_model=LabelsResponse)
def list_labels(db: Session = Depends(get_db)):
    labels = LabelRepository(db).get_all()
    return LabelsResponse(labels=labels, count=len(labels))


@app.post("/labels", response_model=LabelResponse, status_code=201)
def create_label(payload: LabelCreate, db: Session = Depends(get_db)):
    try:
        return LabelResponse(label=LabelRepository(db).create(payload))
    except Exception as e:
        logger.error(f"Error creating label: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create label")


@app.patch("/labels/{label_id}", response_model=LabelResponse)
def update_label(label_id: str, payload: LabelUpdate, db: Session = Depends(get_db)):
    try:
        return LabelResponse(label=LabelRepository(db).update(label_id, payload))
    except LabelNotFoundError:
        raise HTTPException(status_code=404, detail="Label not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/labels/{label_id}", response_model=DeleteResponse)
def delete_label(label_id: str, db: Session = Depends(get_db)):
    if not LabelRepository(db).delete(label_id):
        raise HTTPException(status_code=404, detail="Label not found")
    return DeleteResponse()


# Tasks

@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    view: Optional[TaskView] = Query(None, description="today | next7days | upcoming | all"),
    list_id: Optional[str] = Query(None),
    include_completed: bool = Query(False),
    db: Session = Depends(get_db),
):
    tasks = TaskRepository(db).get_all(list_id=list_id, view=view, include_completed=include_completed)
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    try:
        return TaskResponse(task=TaskRepository(db).create(payload))
    except ListNotFoundError:
        raise HTTPException(status_code=400, detail="Unknown list_id")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating task: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create task")


@app.post("/tasks/parse", response_model=ParseResponse)
def parse_task(payload: ParseRequest):
    """Preview how quick-add text would be interpreted. Nothing is stored."""
    return ParseResponse(draft=parse_task_text(payload.text, now=payload.now))


@app.post("/tasks/quick-add", response_model=QuickAddResponse, status_code=201)
def quick_add_task(payload: QuickAddRequest, db: Session = Depends(get_db)):
    try:
        draft, task = quick_add(db, payload.text, list_id=payload.list_id, now=payload.now)
    except QuickAddError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ListNotFoundError:
        raise HTTPException(status_code=400, detail="Unknown list_id")
    return QuickAddResponse(draft=draft, task=task)


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, db: Session = Depends(get_db)):
    task = TaskRepository(db).get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse(task=task)


@app.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, payload: TaskUpdate, db: Session = Depends(get_db)):
    try:
        return TaskResponse(task=TaskRepository(db).update(task_id, payload))
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail="Task not found")
    except ListNotFoundError:
        raise HTTPException(status_code=400, detail="Unknown list_id")


@app.delete("/tasks/{task_id}", response_model=DeleteResponse)
def delete_task(task_id: str, db: Session = Depends(get_db)):
    if not TaskRepository(db).delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return DeleteResponse()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
