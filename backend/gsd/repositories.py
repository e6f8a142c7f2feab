"""Repository classes encapsulating database operations.

This is the only layer that reads or writes story and task rows. It owns
the definition of "visible" (`deleted_at IS NULL`), the cascading soft
delete, and the translation of store failures into `InternalError`.
Repositories return frozen `Story`/`Task` values, never session-bound rows.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from . import models
from .errors import InternalError, InvalidArgumentError, NotFoundError
from .validation import parse_status, status_token

logger = logging.getLogger("gsd.repositories")


@contextmanager
def _store_call(session: Session, operation: str):
    """Roll back and raise `InternalError` on any store failure."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        raise InternalError(f"{operation} failed: {exc}") from exc


def _to_story(record: models.StoryRecord) -> models.Story:
    return models.Story(id=record.id, name=record.name, owner=record.owner)


def _to_task(record: models.TaskRecord) -> models.Task:
    try:
        status = parse_status(record.status)
    except InvalidArgumentError as exc:
        # A bad token in the table is corrupt data, not a caller mistake.
        raise InternalError(f"task {record.id} has {exc.message}") from exc
    return models.Task(id=record.id, story_id=record.story_id, name=record.name, status=status)


class StoryRepository:
    """Story reads and writes, including the cascading soft delete."""
    def __init__(self, session: Session):
        self.session = session

    def _visible(self, story_id: uuid.UUID) -> Optional[models.StoryRecord]:
        stmt = select(models.StoryRecord).where(
            models.StoryRecord.id == story_id,
            col(models.StoryRecord.deleted_at).is_(None),
        )
        return self.session.exec(stmt).first()

    def get(self, story_id: uuid.UUID) -> models.Story:
        """Return a visible story or raise `NotFoundError`."""
        logger.debug("get_story: %s", story_id)
        with _store_call(self.session, "get_story"):
            record = self._visible(story_id)
        if record is None:
            raise NotFoundError(f"story not found: {story_id}")
        return _to_story(record)

    def list_by_owner(self, owner: str) -> List[models.Story]:
        """Return visible stories for `owner`, oldest first.

        Rows created in the same instant are ordered by id so the result
        is at least deterministic.
        """
        logger.debug("list_stories: %s", owner)
        stmt = (
            select(models.StoryRecord)
            .where(
                models.StoryRecord.owner == owner,
                col(models.StoryRecord.deleted_at).is_(None),
            )
            .order_by(col(models.StoryRecord.created_at).asc(), col(models.StoryRecord.id).asc())
        )
        with _store_call(self.session, "list_stories"):
            return [_to_story(r) for r in self.session.exec(stmt).all()]

    def create(self, name: str, owner: str) -> models.Story:
        """Insert a story from already-normalized fields."""
        logger.debug("create_story: %s, %s", name, owner)
        record = models.StoryRecord(name=name, owner=owner)
        with _store_call(self.session, "create_story"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return _to_story(record)

    def update(self, story_id: uuid.UUID, name: str, owner: str) -> models.Story:
        """Set name and owner on a visible story and touch `updated_at`."""
        logger.debug("update_story: %s, %s, %s", story_id, name, owner)
        with _store_call(self.session, "update_story"):
            record = self._visible(story_id)
            if record is None:
                raise NotFoundError(f"story not found: {story_id}")
            record.name = name
            record.owner = owner
            record.updated_at = models.utcnow()
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return _to_story(record)

    def _soft_delete_tasks(self, story_id: uuid.UUID, now) -> int:
        stmt = (
            update(models.TaskRecord)
            .where(
                col(models.TaskRecord.story_id) == story_id,
                col(models.TaskRecord.deleted_at).is_(None),
            )
            .values(deleted_at=now)
        )
        return self.session.connection().execute(stmt).rowcount

    def _soft_delete_story(self, story_id: uuid.UUID, now) -> int:
        stmt = (
            update(models.StoryRecord)
            .where(
                col(models.StoryRecord.id) == story_id,
                col(models.StoryRecord.deleted_at).is_(None),
            )
            .values(deleted_at=now)
        )
        return self.session.connection().execute(stmt).rowcount

    def delete(self, story_id: uuid.UUID) -> int:
        """Soft-delete a story and all of its visible tasks atomically.

        Both updates run in the session's transaction: tasks first, then
        the story, then a single commit. Any failure rolls back both, so
        no reader ever sees a deleted story with live tasks. Returns the
        number of rows newly marked deleted (0 when already deleted).
        """
        logger.debug("delete_story: %s", story_id)
        now = models.utcnow()
        with _store_call(self.session, "delete_story"):
            tasks_deleted = self._soft_delete_tasks(story_id, now)
            stories_deleted = self._soft_delete_story(story_id, now)
            self.session.commit()
        return tasks_deleted + stories_deleted


class TaskRepository:
    """Task reads and writes."""
    def __init__(self, session: Session):
        self.session = session

    def _visible(self, task_id: uuid.UUID) -> Optional[models.TaskRecord]:
        stmt = select(models.TaskRecord).where(
            models.TaskRecord.id == task_id,
            col(models.TaskRecord.deleted_at).is_(None),
        )
        return self.session.exec(stmt).first()

    def get(self, task_id: uuid.UUID) -> models.Task:
        """Return a visible task or raise `NotFoundError`."""
        logger.debug("get_task: %s", task_id)
        with _store_call(self.session, "get_task"):
            record = self._visible(task_id)
        if record is None:
            raise NotFoundError(f"task not found: {task_id}")
        return _to_task(record)

    def list_by_story(self, story_id: uuid.UUID) -> List[models.Task]:
        """Return visible tasks for `story_id`, oldest first.

        The story itself is not checked; an unknown or deleted story simply
        has no visible tasks.
        """
        logger.debug("list_tasks: story: %s", story_id)
        stmt = (
            select(models.TaskRecord)
            .where(
                models.TaskRecord.story_id == story_id,
                col(models.TaskRecord.deleted_at).is_(None),
            )
            .order_by(col(models.TaskRecord.created_at).asc(), col(models.TaskRecord.id).asc())
        )
        with _store_call(self.session, "list_tasks"):
            return [_to_task(r) for r in self.session.exec(stmt).all()]

    def create(self, story_id: uuid.UUID, name: str) -> models.Task:
        """Insert an `incomplete` task.

        The caller must already have confirmed the story is visible.
        """
        logger.debug("create_task: %s, %s", story_id, name)
        record = models.TaskRecord(story_id=story_id, name=name, status=status_token(models.Status.INCOMPLETE))
        with _store_call(self.session, "create_task"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return _to_task(record)

    def update(self, task_id: uuid.UUID, name: str, status: models.Status) -> models.Task:
        """Set name and status on a visible task and touch `updated_at`."""
        logger.debug("update_task: %s, %s, %s", task_id, name, status)
        token = status_token(status)
        with _store_call(self.session, "update_task"):
            record = self._visible(task_id)
            if record is None:
                raise NotFoundError(f"task not found: {task_id}")
            record.name = name
            record.status = token
            record.updated_at = models.utcnow()
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return _to_task(record)

    def delete(self, task_id: uuid.UUID) -> int:
        """Soft-delete one task. Returns 0 if it was already deleted or absent."""
        logger.debug("delete_task: %s", task_id)
        stmt = (
            update(models.TaskRecord)
            .where(
                col(models.TaskRecord.id) == task_id,
                col(models.TaskRecord.deleted_at).is_(None),
            )
            .values(deleted_at=models.utcnow())
        )
        with _store_call(self.session, "delete_task"):
            deleted = self.session.connection().execute(stmt).rowcount
            self.session.commit()
        return deleted


class Repo:
    """Both repositories over one session, under their operation names.

    This is the persistence entry point the services use.
    """
    def __init__(self, session: Session):
        self.session = session
        self.stories = StoryRepository(session)
        self.tasks = TaskRepository(session)

    def get_story(self, story_id: uuid.UUID) -> models.Story:
        return self.stories.get(story_id)

    def list_stories(self, owner: str) -> List[models.Story]:
        return self.stories.list_by_owner(owner)

    def create_story(self, name: str, owner: str) -> models.Story:
        return self.stories.create(name, owner)

    def update_story(self, story_id: uuid.UUID, name: str, owner: str) -> models.Story:
        return self.stories.update(story_id, name, owner)

    def delete_story(self, story_id: uuid.UUID) -> int:
        return self.stories.delete(story_id)

    def get_task(self, task_id: uuid.UUID) -> models.Task:
        return self.tasks.get(task_id)

    def list_tasks(self, story_id: uuid.UUID) -> List[models.Task]:
        return self.tasks.list_by_story(story_id)

    def create_task(self, story_id: uuid.UUID, name: str) -> models.Task:
        return self.tasks.create(story_id, name)

    def update_task(self, task_id: uuid.UUID, name: str, status: models.Status) -> models.Task:
        return self.tasks.update(task_id, name, status)

    def delete_task(self, task_id: uuid.UUID) -> int:
        return self.tasks.delete(task_id)
