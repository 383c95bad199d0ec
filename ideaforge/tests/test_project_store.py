"""
Unit tests for the project stores.

Tests cover:
- InMemoryProjectStore documents, ordering and isolation
- Wire (camelCase) round trip of project records
- FirestoreProjectStore against a mocked AsyncClient
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from google.api_core import exceptions as google_exceptions

from ideaforge.config import FirestoreConfig
from ideaforge.core.errors import NotFound, PersistenceFailure
from ideaforge.models import ChatRole, ChatTurn, Project, Run, RunStatus, StageName
from ideaforge.services import FirestoreProjectStore
from ideaforge.tests.conftest import IDEA_BRIEF


class TestInMemoryProjectStore:
    """Tests for the process-local store."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        project = await store.create_project("Acme")

        loaded = await store.get_project(project.id)

        assert loaded == project
        assert loaded.current_stage == 1
        assert loaded.chat_history == []
        assert loaded.brief_finalized is False

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get_project("missing") is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store):
        first = await store.create_project("First")
        second = await store.create_project("Second")

        projects = await store.list_projects()

        assert [p.id for p in projects] == [second.id, first.id]
        assert [p.id for p in await store.list_projects(limit=1)] == [second.id]

    @pytest.mark.asyncio
    async def test_chat_history_round_trip(self, store):
        project = await store.create_project("Acme")
        history = [ChatTurn.of(ChatRole.USER, "hi"), ChatTurn.of(ChatRole.MODEL, "hello")]

        await store.save_chat_history(project.id, history)
        loaded = await store.get_project(project.id)

        assert loaded.chat_history == history
        assert loaded.transcript() == "user: hi\nmodel: hello"

    @pytest.mark.asyncio
    async def test_update_project_merges_wire_fields(self, store):
        project = await store.create_project("Acme")

        await store.update_project(project.id, {"currentStage": 3, "briefFinalized": True})
        loaded = await store.get_project(project.id)

        assert loaded.current_stage == 3
        assert loaded.brief_finalized is True
        assert loaded.name == "Acme"

    @pytest.mark.asyncio
    async def test_save_artifact_overwrites_by_stage(self, store):
        project = await store.create_project("Acme")

        await store.save_artifact(project.id, StageName.IDEA_BRIEF, {"niche": "old"})
        await store.save_artifact(project.id, "idea_brief", IDEA_BRIEF)
        artifacts = await store.get_artifacts(project.id)

        assert len(artifacts) == 1
        assert artifacts[0].id == "idea_brief"
        assert artifacts[0].data == IDEA_BRIEF
        assert artifacts[0].typed().target_customer == IDEA_BRIEF["targetCustomer"]

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, store):
        project = await store.create_project("Acme")
        payload = {"niche": "dogs", "channels": ["web"]}
        await store.save_artifact(project.id, StageName.IDEA_BRIEF, payload)

        payload["channels"].append("mutated")
        artifacts = await store.get_artifacts(project.id)
        artifacts[0].data["niche"] = "changed"

        again = await store.get_artifacts(project.id)
        assert again[0].data == {"niche": "dogs", "channels": ["web"]}

    @pytest.mark.asyncio
    async def test_missing_project_operations(self, store):
        with pytest.raises(NotFound):
            await store.get_artifacts("missing")
        with pytest.raises(NotFound):
            await store.save_artifact("missing", StageName.IDEA_BRIEF, {})
        with pytest.raises(NotFound):
            await store.update_project("missing", {"name": "x"})
        with pytest.raises(NotFound):
            await store.list_runs("missing")

    @pytest.mark.asyncio
    async def test_runs(self, store):
        project = await store.create_project("Acme")
        run = await store.create_run(project.id, Run(id="", stage=StageName.BRAND_KIT))

        assert run.id
        await store.update_run(project.id, run.id, {"status": "FAILED", "logs": ["Error: x"]})
        loaded = await store.get_run(project.id, run.id)

        assert loaded.status == RunStatus.FAILED
        assert loaded.logs == ["Error: x"]
        assert await store.get_run(project.id, "missing") is None
        with pytest.raises(NotFound):
            await store.update_run(project.id, "missing", {"status": "FAILED"})


class TestProjectWireFormat:
    """Tests for camelCase serialization."""

    def test_project_to_wire(self):
        project = Project(id="p1", name="Acme", created_at="2025-01-01T00:00:00+00:00")
        project.chat_history.append(ChatTurn.of(ChatRole.USER, "hi"))

        assert project.to_wire() == {
            "id": "p1",
            "name": "Acme",
            "currentStage": 1,
            "createdAt": "2025-01-01T00:00:00+00:00",
            "chatHistory": [{"role": "user", "parts": [{"text": "hi"}]}],
            "briefFinalized": False,
        }

    def test_project_from_wire_without_optional_fields(self):
        project = Project.model_validate({"id": "p1", "name": "Acme", "createdAt": "x"})

        assert project.current_stage == 1
        assert project.brief_finalized is False


# ============================================================================
# Firestore
# ============================================================================

def _snapshot(doc_id, data):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


@pytest.fixture
def firestore_client():
    client = MagicMock()
    return client


@pytest.fixture
def firestore_store(firestore_client):
    return FirestoreProjectStore(FirestoreConfig(project_id="demo"), client=firestore_client)


class TestFirestoreProjectStore:
    """Tests for FirestoreProjectStore with a mocked client."""

    @pytest.mark.asyncio
    async def test_not_connected(self):
        store = FirestoreProjectStore(FirestoreConfig(project_id="demo"))

        with pytest.raises(PersistenceFailure):
            await store.get_project("p1")

    @pytest.mark.asyncio
    async def test_create_project_writes_document_without_id(self, firestore_store, firestore_client):
        ref = MagicMock()
        ref.id = "generated"
        ref.set = AsyncMock()
        firestore_client.collection.return_value.document.return_value = ref

        project = await firestore_store.create_project("Acme")

        assert project.id == "generated"
        firestore_client.collection.assert_called_with("projects")
        document = ref.set.call_args[0][0]
        assert "id" not in document
        assert document["name"] == "Acme"
        assert document["currentStage"] == 1

    @pytest.mark.asyncio
    async def test_get_project(self, firestore_store, firestore_client):
        ref = MagicMock()
        ref.get = AsyncMock(return_value=_snapshot("p1", {
            "name": "Acme",
            "currentStage": 2,
            "createdAt": "2025-01-01T00:00:00+00:00",
            "chatHistory": [],
        }))
        firestore_client.collection.return_value.document.return_value = ref

        project = await firestore_store.get_project("p1")

        assert project.id == "p1"
        assert project.current_stage == 2

    @pytest.mark.asyncio
    async def test_get_missing_project(self, firestore_store, firestore_client):
        ref = MagicMock()
        ref.get = AsyncMock(return_value=_snapshot("p1", None))
        firestore_client.collection.return_value.document.return_value = ref

        assert await firestore_store.get_project("p1") is None

    @pytest.mark.asyncio
    async def test_update_missing_project_is_not_found(self, firestore_store, firestore_client):
        ref = MagicMock()
        ref.update = AsyncMock(side_effect=google_exceptions.NotFound("no document"))
        firestore_client.collection.return_value.document.return_value = ref

        with pytest.raises(NotFound):
            await firestore_store.update_project("p1", {"currentStage": 2})

    @pytest.mark.asyncio
    async def test_api_errors_become_persistence_failures(self, firestore_store, firestore_client):
        ref = MagicMock()
        ref.get = AsyncMock(side_effect=google_exceptions.ServiceUnavailable("down"))
        firestore_client.collection.return_value.document.return_value = ref

        with pytest.raises(PersistenceFailure):
            await firestore_store.get_project("p1")

    @pytest.mark.asyncio
    async def test_close_releases_client(self, firestore_store, firestore_client):
        firestore_client.close = AsyncMock()

        await firestore_store.close()

        firestore_client.close.assert_awaited_once()
        assert firestore_store.client is None
        # second close is a no-op
        await firestore_store.close()
        firestore_client.close.assert_awaited_once()
