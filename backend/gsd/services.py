"""Business logic services used by HTTP controllers.

Services sit between the controllers and the repositories. They apply the
request-level rules: the default `backlog` owner, merging partial updates
with the stored entity, normalizing every string before it reaches the
store, and checking that a parent story is visible before a task is
attached to it.
"""

import logging
import uuid
from typing import List, Optional

from sqlmodel import Session

from . import models, repositories
from .validation import normalize_and_check, parse_status

logger = logging.getLogger("gsd.services")

# Owner used for stories created or listed without one.
BACKLOG = "backlog"


class StoryService:
    """Story lifecycle operations."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.Repo(session)

    def get(self, story_id: uuid.UUID) -> models.Story:
        return self.repo.get_story(story_id)

    def list_for_owner(self, owner: Optional[str] = None) -> List[models.Story]:
        """List visible stories for `owner`, or for the backlog when omitted."""
        owner = normalize_and_check(owner if owner is not None else BACKLOG)
        return self.repo.list_stories(owner)

    def create(self, name: str, owner: Optional[str] = None) -> models.Story:
        """Validate and insert a new story.

        Both fields are checked before anything is written.
        """
        name = normalize_and_check(name)
        owner = normalize_and_check(owner if owner is not None else BACKLOG)
        return self.repo.create_story(name, owner)

    def update(self, story_id: uuid.UUID, name: Optional[str] = None, owner: Optional[str] = None) -> models.Story:
        """Update a story's name and/or owner.

        Omitted fields keep their stored values. The story must be visible.
        """
        story = self.repo.get_story(story_id)
        name = normalize_and_check(name if name is not None else story.name)
        owner = normalize_and_check(owner if owner is not None else story.owner)
        return self.repo.update_story(story_id, name, owner)

    def delete(self, story_id: uuid.UUID) -> int:
        """Delete a visible story and its tasks; `NotFoundError` if absent."""
        story = self.repo.get_story(story_id)
        deleted = self.repo.delete_story(story.id)
        logger.info("deleted story %s (%d rows)", story.id, deleted)
        return deleted


class TaskService:
    """Task lifecycle operations."""
    def __init__(self, session: Session):
        self.session = session
        self.repo = repositories.Repo(session)

    def get(self, task_id: uuid.UUID) -> models.Task:
        return self.repo.get_task(task_id)

    def list_for_story(self, story_id: uuid.UUID) -> List[models.Task]:
        return self.repo.list_tasks(story_id)

    def create(self, story_id: uuid.UUID, name: str) -> models.Task:
        """Attach a new `incomplete` task to a visible story.

        A missing or soft-deleted story is reported as `NotFoundError`.
        """
        name = normalize_and_check(name)
        story = self.repo.get_story(story_id)
        return self.repo.create_task(story.id, name)

    def update(self, task_id: uuid.UUID, name: Optional[str] = None, status: Optional[str] = None) -> models.Task:
        """Update a task's name and/or status.

        `status` must be one of the two canonical tokens. Omitted fields
        keep their stored values; either status transition is allowed.
        """
        task = self.repo.get_task(task_id)
        name = normalize_and_check(name if name is not None else task.name)
        new_status = parse_status(status) if status is not None else task.status
        return self.repo.update_task(task_id, name, new_status)

    def delete(self, task_id: uuid.UUID) -> int:
        """Delete a visible task; `NotFoundError` if absent or already deleted."""
        task = self.repo.get_task(task_id)
        return self.repo.delete_task(task.id)
