"""
Firestore Project Store for IdeaForge

Projects live in a top-level collection; each project document has two
sub-collections, ``artifacts`` (document id = stage name) and ``runs``
(auto ids). Google API errors are surfaced as PersistenceFailure.
"""

import inspect
import logging
import os
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import default as google_auth_default
from google.cloud import firestore
from google.oauth2 import service_account

from ..config import FirestoreConfig
from ..core.errors import NotFound, PersistenceFailure
from ..models import Artifact, ChatTurn, Project, Run, StageName, utc_now_iso
from .project_store import ProjectStore

logger = logging.getLogger("ideaforge.firestore")

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def build_credentials(credentials_path: Optional[str] = None):
    """Service account file when one is configured, application default credentials otherwise."""
    key_path = credentials_path or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if key_path and os.path.exists(key_path):
        return service_account.Credentials.from_service_account_file(key_path, scopes=SCOPES)
    creds, _ = google_auth_default(scopes=SCOPES)
    return creds


class FirestoreProjectStore(ProjectStore):
    """Service for persisting projects, artifacts and runs to Firestore."""

    def __init__(self, config: FirestoreConfig, client: Optional[firestore.AsyncClient] = None):
        """
        Initialize the Firestore store.

        Args:
            config: Project id, database id and credentials location
            client: Pre-built client (tests); created on connect() otherwise
        """
        self.config = config
        self.client = client

    async def connect(self) -> bool:
        if self.client is None:
            self.client = firestore.AsyncClient(
                project=self.config.project_id,
                database=self.config.database_id,
                credentials=build_credentials(self.config.credentials_path),
            )
            logger.info(
                f"Connected to Firestore project={self.config.project_id} "
                f"database={self.config.database_id}"
            )
        return True

    async def close(self) -> None:
        if self.client is None:
            return
        client, self.client = self.client, None
        # close() is sync or async depending on the library release
        result = client.close()
        if inspect.isawaitable(result):
            await result
        logger.info("Firestore client closed")

    @property
    def projects(self):
        if self.client is None:
            raise PersistenceFailure("Firestore client not connected. Call connect() first.")
        return self.client.collection(self.config.collection)

    def _artifacts(self, project_id: str):
        return self.projects.document(project_id).collection("artifacts")

    def _runs(self, project_id: str):
        return self.projects.document(project_id).collection("runs")

    async def _require(self, project_id: str):
        snapshot = await self.projects.document(project_id).get()
        if not snapshot.exists:
            raise NotFound(f"Project {project_id} not found")
        return snapshot

    # ========================================================================
    # Projects
    # ========================================================================

    async def create_project(self, name: str) -> Project:
        try:
            ref = self.projects.document()
            project = Project(id=ref.id, name=name)
            document = project.to_wire()
            document.pop("id")
            await ref.set(document)
            return project
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to create project: {e}") from e

    async def get_project(self, project_id: str) -> Optional[Project]:
        try:
            snapshot = await self.projects.document(project_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to load project {project_id}: {e}") from e
        if not snapshot.exists:
            return None
        return Project.model_validate({"id": snapshot.id, **snapshot.to_dict()})

    async def list_projects(self, limit: int = 20) -> List[Project]:
        query = self.projects.order_by(
            "createdAt", direction=firestore.Query.DESCENDING
        ).limit(limit)
        try:
            return [
                Project.model_validate({"id": doc.id, **doc.to_dict()})
                async for doc in query.stream()
            ]
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to list projects: {e}") from e

    async def save_chat_history(self, project_id: str, history: List[ChatTurn]) -> None:
        await self.update_project(project_id, {"chatHistory": [turn.to_wire() for turn in history]})

    async def update_project(self, project_id: str, fields: Dict[str, Any]) -> None:
        try:
            await self.projects.document(project_id).update(fields)
        except google_exceptions.NotFound as e:
            raise NotFound(f"Project {project_id} not found") from e
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to update project {project_id}: {e}") from e

    # ========================================================================
    # Artifacts
    # ========================================================================

    async def get_artifacts(self, project_id: str) -> List[Artifact]:
        try:
            await self._require(project_id)
            return [
                Artifact.model_validate({"id": doc.id, **doc.to_dict()})
                async for doc in self._artifacts(project_id).stream()
            ]
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to load artifacts for {project_id}: {e}") from e

    async def save_artifact(self, project_id: str, stage: StageName, data: Dict[str, Any]) -> Artifact:
        stage = StageName(stage)
        artifact = Artifact(id=stage.value, stage=stage, data=data, updated_at=utc_now_iso())
        document = artifact.to_wire()
        document.pop("id")
        try:
            await self._artifacts(project_id).document(stage.value).set(document)
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to save {stage.value} for {project_id}: {e}") from e
        return artifact

    # ========================================================================
    # Runs
    # ========================================================================

    async def create_run(self, project_id: str, run: Run) -> Run:
        try:
            await self._require(project_id)
            ref = self._runs(project_id).document()
            stored = run.model_copy(update={"id": ref.id})
            document = stored.to_wire()
            document.pop("id")
            await ref.set(document)
            return stored
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to create run for {project_id}: {e}") from e

    async def get_run(self, project_id: str, run_id: str) -> Optional[Run]:
        try:
            snapshot = await self._runs(project_id).document(run_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to load run {run_id}: {e}") from e
        if not snapshot.exists:
            return None
        return Run.model_validate({"id": snapshot.id, **snapshot.to_dict()})

    async def update_run(self, project_id: str, run_id: str, fields: Dict[str, Any]) -> None:
        try:
            await self._runs(project_id).document(run_id).update(fields)
        except google_exceptions.NotFound as e:
            raise NotFound(f"Run {run_id} not found in project {project_id}") from e
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to update run {run_id}: {e}") from e

    async def list_runs(self, project_id: str, limit: int = 10) -> List[Run]:
        query = self._runs(project_id).order_by(
            "startedAt", direction=firestore.Query.DESCENDING
        ).limit(limit)
        try:
            return [
                Run.model_validate({"id": doc.id, **doc.to_dict()})
                async for doc in query.stream()
            ]
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceFailure(f"Failed to list runs for {project_id}: {e}") from e
