"""
Aggregate Store for the planner core.

Handles persistence and retrieval of whole Project aggregates. All projects
live in one JSON array blob under a single storage key; every mutating call
reads the blob with its version, applies the change to a copy and writes the
full blob back with a compare-and-swap. If another writer (this process or
another one) replaced the blob in between, the call reloads and re-applies,
so a revision check always runs against the blob it replaces.
"""

import json
import threading
from typing import Callable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..shared.config import STORE_SWAP_ATTEMPTS, get_storage_key
from ..shared.logger import get_logger
from ..shared.utils import get_utc_now, new_id
from .backends import StorageBackend
from .blobs import BlobStore
from .errors import (
    PlannerError,
    ProjectNotFound,
    RevisionConflict,
    StoreIOError,
    ValidationError,
    VersionMismatch,
)
from .status import ensure_transition
from .types import Project, ProjectCreate, ProjectStatus

logger = get_logger("store", __name__)


class ProjectStore:
    """Service object owning the serialized project collection."""

    def __init__(
        self,
        backend: StorageBackend,
        blob_store: Optional[BlobStore] = None,
        storage_key: Optional[str] = None,
        clock: Callable = get_utc_now,
        swap_attempts: int = STORE_SWAP_ATTEMPTS,
    ) -> None:
        """
        Initialize the store.

        Args:
            backend: Blob medium holding the serialized projects.
            blob_store: Registry whose references are released when a project
                holding attachments is deleted.
            storage_key: Key of the projects blob; defaults to PLANNER_STORAGE_KEY.
            clock: Callable returning the current aware UTC datetime.
            swap_attempts: Reloads allowed when another writer replaces the
                blob between our read and our write.

        Raises:
            ValueError: If backend is None.
        """
        if backend is None:
            raise ValueError("Storage backend is required")
        self.backend = backend
        self.blob_store = blob_store
        self.storage_key = get_storage_key(storage_key)
        self.clock = clock
        self.swap_attempts = max(1, swap_attempts)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _load(self) -> Tuple[List[Project], Optional[str]]:
        try:
            blob, version = self.backend.read_versioned(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to read projects blob: {e}", exc_info=True)
            raise StoreIOError(f"Failed to read projects: {e}") from e

        if not blob:
            return [], version

        try:
            raw = json.loads(blob)
            if not isinstance(raw, list):
                raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
            return [Project.from_wire(item) for item in raw], version
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Stored projects blob is corrupt: {e}", exc_info=True)
            raise StoreIOError(f"Stored projects blob is corrupt: {e}") from e

    def _dump(self, projects: List[Project], expected_version: Optional[str]) -> None:
        # Serialize fully before touching the medium so a bad aggregate never
        # produces a partial write.
        blob = json.dumps([p.to_wire() for p in projects], ensure_ascii=False)
        try:
            self.backend.compare_and_swap(self.storage_key, blob, expected_version)
        except VersionMismatch:
            raise
        except Exception as e:
            logger.error(f"Failed to write projects blob: {e}", exc_info=True)
            raise StoreIOError(f"Failed to write projects: {e}") from e

    def _commit(self, apply: Callable[[List[Project]], Optional[List[Project]]]) -> bool:
        """Load, transform and swap the blob, reloading when it changed underneath.

        ``apply`` gets the freshly loaded projects and returns the new list,
        or None to skip the write. It may raise to abort; it runs again after
        every lost swap, so it must not keep side effects.

        Returns:
            True if a write happened.
        """
        with self._lock:
            for attempt in range(1, self.swap_attempts + 1):
                projects, version = self._load()
                updated = apply(projects)
                if updated is None:
                    return False
                try:
                    self._dump(updated, version)
                    return True
                except VersionMismatch:
                    logger.info(
                        f"Projects blob changed during write, reloading ({attempt}/{self.swap_attempts})",
                        extra={"payload": {"storage_key": self.storage_key}},
                    )
        raise StoreIOError(
            f"Failed to write projects: blob kept changing after {self.swap_attempts} attempts"
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_project(self, spec: Union[ProjectCreate, Mapping]) -> Project:
        """Create and persist an empty project.

        Args:
            spec: ProjectCreate payload (or a mapping with the same fields).

        Returns:
            The persisted Project with generated id and timestamps.

        Raises:
            ValidationError: If name is empty or type is not a known project type.
            StoreIOError: If the write fails.
        """
        if not isinstance(spec, ProjectCreate):
            try:
                spec = ProjectCreate.model_validate(dict(spec))
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid project payload: {e}") from e

        if not spec.name or not spec.name.strip():
            raise ValidationError("Project name cannot be empty")

        now = self.clock()
        project = Project(
            id=new_id(),
            name=spec.name.strip(),
            description=spec.description,
            type=spec.type,
            status=ProjectStatus.PLANNING,
            plan_type=spec.plan_type,
            start_date=now,
            duration=spec.duration,
            budget=spec.budget,
            owner_id=spec.owner_id,
            members=[spec.owner_id],
            created_at=now,
            updated_at=now,
        )
        self.save_project(project)

        logger.info(
            f"Created project '{project.name}' with ID {project.id}",
            extra={"payload": {"project_id": project.id, "type": project.type.value}},
        )
        return project

    def save_project(self, project: Project) -> None:
        """Upsert the full aggregate by id.

        The caller's ``project.revision`` must match the stored revision; on
        success it is incremented in place.

        Raises:
            RevisionConflict: If the stored aggregate has moved on.
            StoreIOError: If reading or writing the medium fails.
        """
        new_revision = project.revision + 1
        stored = project.model_copy(update={"revision": new_revision}, deep=True)

        def apply(projects: List[Project]) -> List[Project]:
            index = next((i for i, p in enumerate(projects) if p.id == project.id), None)
            if index is None:
                return projects + [stored]
            if projects[index].revision != project.revision:
                logger.warning(
                    f"Rejected stale write for project {project.id}",
                    extra={"payload": {
                        "project_id": project.id,
                        "revision": project.revision,
                        "stored_revision": projects[index].revision,
                    }},
                )
                raise RevisionConflict(project.id, project.revision, projects[index].revision)
            return projects[:index] + [stored] + projects[index + 1:]

        self._commit(apply)
        project.revision = new_revision

        logger.debug(
            f"Saved project {project.id}",
            extra={"payload": {"project_id": project.id, "revision": new_revision}},
        )

    def get_projects(self) -> List[Project]:
        """Return all projects in insertion order."""
        with self._lock:
            return self._load()[0]

    def get_project_by_id(self, project_id: str) -> Optional[Project]:
        """Return the project with ``project_id`` or None."""
        return next((p for p in self.get_projects() if p.id == project_id), None)

    def require_project(self, project_id: str) -> Project:
        """Like get_project_by_id but raises ProjectNotFound on a miss."""
        project = self.get_project_by_id(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    def update_project(self, project: Project) -> None:
        """Stamp ``updated_at`` and save the full aggregate."""
        previous = project.updated_at
        project.updated_at = self.clock()
        try:
            self.save_project(project)
        except PlannerError:
            project.updated_at = previous
            raise

    def delete_project(self, project_id: str) -> None:
        """Remove a project. Deleting an unknown id is a no-op.

        Attachment blob references held by the project are released after the
        write succeeds.
        """
        removed: List[Project] = []

        def apply(projects: List[Project]) -> Optional[List[Project]]:
            removed[:] = [p for p in projects if p.id == project_id]
            if not removed:
                return None
            return [p for p in projects if p.id != project_id]

        if not self._commit(apply):
            logger.debug(f"Delete of unknown project {project_id} ignored")
            return

        released = 0
        if self.blob_store is not None:
            for task in removed[0].tasks:
                for attachment in task.attachments:
                    if self.blob_store.release(attachment.url):
                        released += 1

        logger.info(
            f"Deleted project {project_id}",
            extra={"payload": {"project_id": project_id, "released_blobs": released}},
        )

    def set_status(self, project_id: str, new_status: Union[ProjectStatus, str]) -> Project:
        """Move a project along its lifecycle and persist it.

        Raises:
            ProjectNotFound: If the project does not exist.
            InvalidTransition: If the move is not allowed.
        """
        project = self.require_project(project_id)
        target = ensure_transition(project.status, new_status)
        if target == project.status:
            return project

        previous = project.status
        project.status = target
        self.update_project(project)
        logger.info(
            f"Project {project_id} status {previous.value} -> {target.value}",
            extra={"payload": {"project_id": project_id, "revision": project.revision}},
        )
        return project
