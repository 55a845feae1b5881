"""
Collaboration Engine for the planner core.

Mutates task-level comment and attachment collections and appends exactly one
Activity entry per action. Each operation reads the whole aggregate, applies
the change in memory and writes the whole aggregate back through the store.
When the write loses a revision race the operation is replayed on a fresh
read, up to COLLAB_MAX_RETRIES attempts.
"""

from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from ..project.blobs import BlobStore
from ..project.errors import AttachmentNotFound, RevisionConflict, ValidationError
from ..project.store import ProjectStore
from ..project.types import Activity, ActivityAction, ActivityPage, Project, Task, TaskAttachment, TaskComment
from ..shared.config import ACTIVITY_FEED_PAGE_SIZE, COLLAB_MAX_RETRIES
from ..shared.logger import get_logger
from ..shared.utils import ensure_utc_datetime
from .mentions import extract_mentions

logger = get_logger("collaboration", __name__)

T = TypeVar("T")


class FileUpload(BaseModel):
    """An uploaded file handed to add_attachment."""

    file_name: str = Field(..., min_length=1)
    content_type: str = Field(default="application/octet-stream")
    data: bytes = b""

    @property
    def file_size(self) -> int:
        return len(self.data)


class CollaborationEngine:
    """Comments, attachments and the activity feed of a project's tasks."""

    def __init__(
        self,
        store: ProjectStore,
        blob_store: Optional[BlobStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_retries: int = COLLAB_MAX_RETRIES,
    ) -> None:
        self.store = store
        if blob_store is None:
            blob_store = store.blob_store if store.blob_store is not None else BlobStore()
        self.blob_store = blob_store
        self.clock = clock or store.clock
        self.max_retries = max(1, max_retries)

    def _mutate(self, project_id: str, task_id: str, apply: Callable[[Project, Task], T]) -> T:
        """Read the aggregate, apply a change to one task and persist it.

        ``apply`` must be safe to replay: it runs again on a fresh read when
        the write hits a RevisionConflict.
        """
        attempt = 0
        while True:
            attempt += 1
            project = self.store.require_project(project_id)
            task = project.require_task(task_id)
            result = apply(project, task)
            try:
                self.store.update_project(project)
                return result
            except RevisionConflict:
                if attempt >= self.max_retries:
                    raise
                logger.warning(
                    f"Revision conflict on project {project_id}, retrying ({attempt}/{self.max_retries})",
                    extra={"payload": {"project_id": project_id, "task_id": task_id}},
                )

    def _activity(
        self, project: Project, task: Task, user_id: str, user_name: str, action: ActivityAction, details: str
    ) -> Activity:
        activity = Activity(
            task_id=task.id,
            project_id=project.id,
            user_id=user_id,
            user_name=user_name,
            action=action,
            details=details,
            timestamp=self.clock(),
        )
        project.activity_feed.append(activity)
        return activity

    def add_comment(
        self,
        project_id: str,
        task_id: str,
        content: str,
        user_id: str,
        user_name: Optional[str] = None,
    ) -> TaskComment:
        """Append a comment to a task and record a ``commented`` activity.

        Raises:
            ValidationError: If content is empty.
            ProjectNotFound / TaskNotFound: If the target does not exist.
        """
        if not content or not content.strip():
            raise ValidationError("Comment content cannot be empty")
        user_name = user_name or user_id
        mentions = extract_mentions(content)

        def apply(project: Project, task: Task) -> TaskComment:
            now = self.clock()
            comment = TaskComment(
                task_id=task.id,
                user_id=user_id,
                user_name=user_name,
                content=content,
                mentions=mentions,
                created_at=now,
                updated_at=now,
            )
            task.comments.append(comment)
            self._activity(project, task, user_id, user_name, ActivityAction.COMMENTED, f'Commented on "{task.name}"')
            return comment

        comment = self._mutate(project_id, task_id, apply)
        logger.info(
            f"Comment added to task {task_id}",
            extra={"payload": {"project_id": project_id, "task_id": task_id, "mentions": mentions}},
        )
        return comment

    def add_attachment(
        self,
        project_id: str,
        task_id: str,
        files: Sequence[FileUpload],
        user_id: str,
        user_name: Optional[str] = None,
    ) -> List[TaskAttachment]:
        """Attach a batch of files to a task with a single activity entry.

        The file bytes are registered in the blob store first; if the
        aggregate cannot be written those references are released again.

        Raises:
            ValidationError: If ``files`` is empty or holds something that is not a file upload.
            ProjectNotFound / TaskNotFound: If the target does not exist.
        """
        if not files:
            raise ValidationError("At least one file is required")
        try:
            files = [f if isinstance(f, FileUpload) else FileUpload.model_validate(f) for f in files]
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid file upload: {e}") from e
        user_name = user_name or user_id
        # Fail on a missing target before registering any bytes.
        self.store.require_project(project_id).require_task(task_id)

        uploads: List[Tuple[FileUpload, str]] = []

        def apply(project: Project, task: Task) -> List[TaskAttachment]:
            now = self.clock()
            batch = [
                TaskAttachment(
                    task_id=task.id,
                    file_name=upload.file_name,
                    file_size=upload.file_size,
                    file_type=upload.content_type,
                    url=url,
                    uploaded_by=user_id,
                    uploaded_at=now,
                    version=1,
                )
                for upload, url in uploads
            ]
            task.attachments.extend(batch)
            self._activity(
                project, task, user_id, user_name, ActivityAction.ATTACHED_FILE,
                f'Attached {len(batch)} file(s) to "{task.name}"',
            )
            return batch

        try:
            for f in files:
                uploads.append((f, self.blob_store.put(f.data)))
            attachments = self._mutate(project_id, task_id, apply)
        except Exception:
            for _, url in uploads:
                self.blob_store.release(url)
            raise

        logger.info(
            f"Attached {len(attachments)} file(s) to task {task_id}",
            extra={"payload": {"project_id": project_id, "task_id": task_id}},
        )
        return attachments

    def remove_attachment(
        self,
        project_id: str,
        task_id: str,
        attachment_id: str,
        user_id: str,
        user_name: Optional[str] = None,
    ) -> TaskAttachment:
        """Remove one attachment, record a ``removed_file`` activity and release its blob.

        Raises:
            AttachmentNotFound: If the task holds no attachment with that id.
            ProjectNotFound / TaskNotFound: If the target does not exist.
        """
        user_name = user_name or user_id

        def apply(project: Project, task: Task) -> TaskAttachment:
            removed = next((a for a in task.attachments if a.id == attachment_id), None)
            if removed is None:
                raise AttachmentNotFound(attachment_id, f"Attachment not found: {attachment_id} (task {task.id})")
            task.attachments = [a for a in task.attachments if a.id != attachment_id]
            self._activity(
                project, task, user_id, user_name, ActivityAction.REMOVED_FILE,
                f'Removed "{removed.file_name}" from "{task.name}"',
            )
            return removed

        removed = self._mutate(project_id, task_id, apply)
        self.blob_store.release(removed.url)

        logger.info(
            f"Removed attachment {attachment_id} from task {task_id}",
            extra={"payload": {"project_id": project_id, "task_id": task_id}},
        )
        return removed

    def get_activity_feed(
        self,
        project_id: str,
        task_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> ActivityPage:
        """Return a newest-first window over a project's activity feed.

        The stored feed is never truncated; paging only bounds what is read.

        Raises:
            ValidationError: If limit is not positive or offset is negative.
            ProjectNotFound: If the project does not exist.
        """
        limit = ACTIVITY_FEED_PAGE_SIZE if limit is None else limit
        if limit <= 0:
            raise ValidationError("limit must be positive")
        if offset < 0:
            raise ValidationError("offset cannot be negative")

        project = self.store.require_project(project_id)
        entries = project.activity_feed
        if task_id is not None:
            entries = [a for a in entries if a.task_id == task_id]

        # Stable sort over the reversed log: equal timestamps keep newest-appended first.
        ordered = sorted(reversed(entries), key=lambda a: ensure_utc_datetime(a.timestamp), reverse=True)
        return ActivityPage(
            items=ordered[offset:offset + limit],
            total=len(ordered),
            offset=offset,
            limit=limit,
        )
