"""
Project Store for IdeaForge

Document-oriented persistence for projects, their chat transcript, their
artifacts (one per stage) and their runs. ``ProjectStore`` is the contract;
``InMemoryProjectStore`` keeps everything in process and backs local runs and
tests, ``FirestoreProjectStore`` (firestore_store.py) is the production store.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..core.errors import NotFound
from ..models import Artifact, ChatTurn, Project, Run, StageName, utc_now_iso


class ProjectStore(ABC):
    """Async document store contract."""

    async def connect(self) -> bool:
        """Open connections. Returns True when the store is usable."""
        return True

    async def close(self) -> None:
        """Release connections."""
        return None

    # ========================================================================
    # Projects
    # ========================================================================

    @abstractmethod
    async def create_project(self, name: str) -> Project:
        pass

    @abstractmethod
    async def get_project(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    async def list_projects(self, limit: int = 20) -> List[Project]:
        """Most recently created projects first."""
        pass

    @abstractmethod
    async def save_chat_history(self, project_id: str, history: List[ChatTurn]) -> None:
        pass

    @abstractmethod
    async def update_project(self, project_id: str, fields: Dict[str, Any]) -> None:
        """Merge top-level wire fields (camelCase) into the project document."""
        pass

    # ========================================================================
    # Artifacts
    # ========================================================================

    @abstractmethod
    async def get_artifacts(self, project_id: str) -> List[Artifact]:
        pass

    @abstractmethod
    async def save_artifact(self, project_id: str, stage: StageName, data: Dict[str, Any]) -> Artifact:
        """Create or overwrite the artifact keyed by ``stage``."""
        pass

    # ========================================================================
    # Runs
    # ========================================================================

    @abstractmethod
    async def create_run(self, project_id: str, run: Run) -> Run:
        """Persist a new run; the store assigns its id."""
        pass

    @abstractmethod
    async def get_run(self, project_id: str, run_id: str) -> Optional[Run]:
        pass

    @abstractmethod
    async def update_run(self, project_id: str, run_id: str, fields: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def list_runs(self, project_id: str, limit: int = 10) -> List[Run]:
        """Most recently started runs first."""
        pass


class InMemoryProjectStore(ProjectStore):
    """
    Process-local store.

    Documents are held in their wire form (camelCase dicts) and deep-copied on
    the way in and out so callers never share mutable state with the store.
    """

    def __init__(self):
        self._projects: Dict[str, Dict[str, Any]] = {}
        self._artifacts: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._runs: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _require(self, project_id: str) -> Dict[str, Any]:
        document = self._projects.get(project_id)
        if document is None:
            raise NotFound(f"Project {project_id} not found")
        return document

    async def create_project(self, name: str) -> Project:
        project = Project(id=uuid.uuid4().hex, name=name)
        self._projects[project.id] = project.to_wire()
        self._artifacts[project.id] = {}
        self._runs[project.id] = {}
        return project

    async def get_project(self, project_id: str) -> Optional[Project]:
        document = self._projects.get(project_id)
        if document is None:
            return None
        return Project.model_validate(copy.deepcopy(document))

    async def list_projects(self, limit: int = 20) -> List[Project]:
        # reversed first so equal timestamps still list the newest insert first
        documents = sorted(reversed(list(self._projects.values())), key=lambda d: d["createdAt"], reverse=True)
        return [Project.model_validate(copy.deepcopy(d)) for d in documents[:limit]]

    async def save_chat_history(self, project_id: str, history: List[ChatTurn]) -> None:
        self._require(project_id)["chatHistory"] = [turn.to_wire() for turn in history]

    async def update_project(self, project_id: str, fields: Dict[str, Any]) -> None:
        self._require(project_id).update(copy.deepcopy(fields))

    async def get_artifacts(self, project_id: str) -> List[Artifact]:
        self._require(project_id)
        return [
            Artifact.model_validate(copy.deepcopy(d))
            for d in self._artifacts[project_id].values()
        ]

    async def save_artifact(self, project_id: str, stage: StageName, data: Dict[str, Any]) -> Artifact:
        self._require(project_id)
        stage = StageName(stage)
        artifact = Artifact(id=stage.value, stage=stage, data=copy.deepcopy(data), updated_at=utc_now_iso())
        self._artifacts[project_id][stage.value] = artifact.to_wire()
        return artifact

    async def create_run(self, project_id: str, run: Run) -> Run:
        self._require(project_id)
        stored = run.model_copy(update={"id": uuid.uuid4().hex})
        self._runs[project_id][stored.id] = stored.to_wire()
        return stored

    async def get_run(self, project_id: str, run_id: str) -> Optional[Run]:
        document = self._runs.get(project_id, {}).get(run_id)
        if document is None:
            return None
        return Run.model_validate(copy.deepcopy(document))

    async def update_run(self, project_id: str, run_id: str, fields: Dict[str, Any]) -> None:
        document = self._runs.get(project_id, {}).get(run_id)
        if document is None:
            raise NotFound(f"Run {run_id} not found in project {project_id}")
        document.update(copy.deepcopy(fields))

    async def list_runs(self, project_id: str, limit: int = 10) -> List[Run]:
        self._require(project_id)
        documents = sorted(
            reversed(list(self._runs[project_id].values())), key=lambda d: d["startedAt"], reverse=True
        )
        return [Run.model_validate(copy.deepcopy(d)) for d in documents[:limit]]
