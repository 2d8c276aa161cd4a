"""
Tests for the Database facade.
"""

import pytest

from dlx_db import ContainerName, Database, DataOperationConfig, RecordType, TypeMap
from dlx_db.data_management_operations import ProviderError
from dlx_db.dlx_ops_exceptions import ConfigurationError
from tests.conftest import make_lexeme


class TestAddOne:
    """Single-record creation."""

    @pytest.mark.asyncio
    async def test_creates_record_with_generated_id(self, db, metadata_container):
        record = {"type": "Language", "name": {"eng": "Chitimacha"}}

        response = await db.add_one(ContainerName.METADATA, record)

        assert response.status == 201
        assert response.data["id"]
        assert response.data["name"] == {"eng": "Chitimacha"}
        assert ("Language", response.data["id"]) in metadata_container.items

    @pytest.mark.asyncio
    async def test_caller_record_is_not_mutated(self, db):
        record = {"type": "Language"}

        await db.add_one("metadata", record)

        assert record == {"type": "Language"}

    @pytest.mark.asyncio
    async def test_duplicate_id_reports_conflict(self, db):
        record = {"id": "lang-1", "type": "Language"}

        first = await db.add_one(ContainerName.METADATA, record)
        second = await db.add_one(ContainerName.METADATA, record)
        third = await db.add_one(ContainerName.METADATA, record)

        assert first.status == 201
        assert second.status == 409
        assert second.message == "Item with ID lang-1 already exists."
        assert third.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_invalid_record_is_rejected_before_the_store(self, db, data_container):
        response = await db.add_one(ContainerName.DATA, {"type": "Lexeme"})

        assert response.status == 400
        assert "language" in response.message
        assert data_container.items == {}

    @pytest.mark.asyncio
    async def test_unknown_container_is_a_value_error(self, db):
        with pytest.raises(ValueError):
            await db.add_one("lexicon", make_lexeme())


class TestAddMany:
    """Batch creation within one partition."""

    @pytest.mark.asyncio
    async def test_success_returns_all_records(self, db, data_container):
        lexemes = [make_lexeme() for _ in range(250)]

        response = await db.add_many(ContainerName.DATA, "lang-1", lexemes)

        assert response.status == 201
        assert len(response.data) == 250
        assert len(data_container.batch_calls) == 3
        assert all("id" not in lexeme for lexeme in lexemes)

    @pytest.mark.asyncio
    async def test_mixed_partitions_are_rejected(self, db, data_container):
        lexemes = [make_lexeme("lang-1"), make_lexeme("lang-2")]

        response = await db.add_many(ContainerName.DATA, "lang-1", lexemes)

        assert response.status == 400
        assert "lang-2" in response.message
        assert data_container.batch_calls == []

    @pytest.mark.asyncio
    async def test_partial_failure_is_207(self, db, data_container):
        data_container.partial_batch_calls = {2}

        response = await db.add_many(ContainerName.DATA, "lang-1", [make_lexeme() for _ in range(250)])

        assert response.status == 207
        assert response.is_partial
        assert len(data_container.batch_calls) == 2

    @pytest.mark.asyncio
    async def test_metadata_partition_is_the_type(self, db, metadata_container):
        response = await db.add_many("metadata", "Project", [{"type": "Project"}, {"type": "Project"}])

        assert response.status == 201
        assert metadata_container.batch_calls[0][1] == "Project"


class TestReads:
    """Point reads and read-many."""

    @pytest.mark.asyncio
    async def test_get_one(self, db, data_container):
        data_container.put(make_lexeme(item_id="lx-1"))

        response = await db.get_one(ContainerName.DATA, "lang-1", "lx-1")

        assert response.status == 200
        assert response.data["id"] == "lx-1"

    @pytest.mark.asyncio
    async def test_get_one_missing(self, db):
        response = await db.get_one(ContainerName.DATA, "lang-1", "nope")

        assert response.status == 404
        assert response.data is None
        assert response.message

    @pytest.mark.asyncio
    async def test_get_many_over_limit(self, db, data_container):
        response = await db.get_many(ContainerName.DATA, "lang-1", [str(i) for i in range(101)])

        assert response.status == 400
        assert data_container.bulk_calls == []

    @pytest.mark.asyncio
    async def test_get_many_reports_each_id(self, db, data_container):
        data_container.put(make_lexeme(item_id="a"))
        data_container.put(make_lexeme(item_id="b"))

        response = await db.get_many(ContainerName.DATA, "lang-1", ["a", "missing", "b"])

        assert response.status == 207
        assert len(response.data) == 3
        assert [e["status"] for e in response.data] == [200, 404, 200]

    @pytest.mark.asyncio
    async def test_type_specific_point_reads(self, db, metadata_container, data_container):
        metadata_container.put({"id": "l1", "type": "Language"})
        metadata_container.put({"id": "p1", "type": "Project"})
        metadata_container.put({"id": "r1", "type": "BibliographicReference"})
        data_container.put(make_lexeme("l1", item_id="x1"))

        assert (await db.get_language("l1")).data["id"] == "l1"
        assert (await db.get_project("p1")).data["id"] == "p1"
        assert (await db.get_reference("r1")).data["id"] == "r1"
        assert (await db.get_lexeme("l1", "x1")).data["id"] == "x1"
        assert (await db.get_project("l1")).status == 404


class TestQueries:
    """List and count operations."""

    @pytest.mark.asyncio
    async def test_get_lexemes_collects_all_pages(self, db, data_container):
        data_container.query_results = [[{"id": "1"}], [{"id": "2"}, {"id": "3"}]]

        response = await db.get_lexemes(language="lang-1", project="p1")

        assert response.status == 200
        assert [r["id"] for r in response.data] == ["1", "2", "3"]
        query = data_container.queries[0]
        assert query.parameter("@language") == "lang-1"
        assert query.parameter("@project") == "p1"

    @pytest.mark.asyncio
    async def test_get_languages_queries_metadata(self, db, metadata_container):
        await db.get_languages(project="p1")

        query = metadata_container.queries[0]
        assert query.text.startswith("SELECT * FROM metadata WHERE metadata.type = @type")
        assert query.parameter("@type") == "Language"

    @pytest.mark.asyncio
    async def test_get_references(self, db, metadata_container):
        metadata_container.query_results = [[{"id": "r1"}]]

        response = await db.get_references()

        assert response.data == [{"id": "r1"}]
        assert metadata_container.queries[0].parameter("@type") == "BibliographicReference"

    @pytest.mark.asyncio
    async def test_get_projects_without_user_returns_everything(self, db, metadata_container):
        await db.get_projects()

        assert "permissions" not in metadata_container.queries[0].text

    @pytest.mark.asyncio
    async def test_get_projects_with_empty_user_is_public_only(self, db, metadata_container):
        await db.get_projects(user="")

        text = metadata_container.queries[0].text
        assert "metadata.permissions.public = true" in text
        assert "ARRAY_CONTAINS" not in text

    @pytest.mark.asyncio
    async def test_get_projects_for_user(self, db, metadata_container):
        await db.get_projects(user="u1")

        query = metadata_container.queries[0]
        for role in ("owners", "editors", "viewers"):
            assert f"ARRAY_CONTAINS(metadata.permissions.{role}, @user)" in query.text
        assert query.parameter("@user") == "u1"

    @pytest.mark.asyncio
    async def test_count(self, db, data_container):
        data_container.query_results = [[42]]

        response = await db.count(RecordType.LEXEME, language="lang-1")

        assert response.data == {"count": 42}
        assert data_container.queries[0].text.startswith("SELECT VALUE COUNT(1) FROM data")

    @pytest.mark.asyncio
    async def test_count_without_rows_is_zero(self, db, metadata_container):
        metadata_container.query_results = []

        response = await db.count("Project")

        assert response.status == 200
        assert response.data == {"count": 0}

    @pytest.mark.asyncio
    async def test_query_failure_is_normalized(self, db, metadata_container):
        async def failing_pages(query):
            raise ProviderError("Service unavailable", 503)
            yield  # pragma: no cover

        metadata_container.query_pages = failing_pages

        response = await db.get_references()

        assert response.status == 503
        assert response.message == "Service unavailable"


class TestConstruction:
    """Injected configuration."""

    def test_bulk_limit_from_settings(self, settings, provider):
        settings.operations.bulk_limit = 25
        db = Database(settings=settings, provider=provider)

        assert db.bulk_limit == 25

    def test_custom_type_map(self, settings, provider):
        type_map = TypeMap({"Language": "data", "Lexeme": "data", "Project": "metadata",
                            "BibliographicReference": "metadata"})
        db = Database(settings=settings, provider=provider, type_map=type_map,
                      config=DataOperationConfig(bulk_limit=10))

        assert db.types[RecordType.LANGUAGE] is ContainerName.DATA
        assert db.database_name == "test"

    def test_settings_from_yaml_path(self, tmp_path, provider):
        path = tmp_path / "config.yaml"
        path.write_text("operations:\n  bulk_limit: 30\n")

        db = Database(settings=path, provider=provider)

        assert db.bulk_limit == 30

    def test_invalid_settings_type(self, provider):
        with pytest.raises(ConfigurationError):
            Database(settings={"cosmos": {}}, provider=provider)

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_provider(self, settings, provider):
        async with Database(settings=settings, provider=provider) as db:
            assert db.database_name == "test"

        assert provider.closed


class TestQueryResults:
    """Which records list and count operations return from stored items."""

    @pytest.fixture
    def projects(self, metadata_container):
        projects = [
            {"id": "public", "type": "Project", "permissions": {"public": True}},
            {"id": "owned", "type": "Project", "permissions": {"public": False, "owners": ["u1"]}},
            {"id": "edited", "type": "Project", "permissions": {"public": False, "editors": ["u1"]}},
            {"id": "viewed", "type": "Project", "permissions": {"public": False, "viewers": ["u1"]}},
            {"id": "private", "type": "Project", "permissions": {"public": False, "owners": ["u2"]}},
        ]
        for project in projects:
            metadata_container.put(project)
        metadata_container.put({"id": "lang", "type": "Language", "projects": [{"id": "owned"}]})
        return projects

    @staticmethod
    def ids(response):
        return sorted(record["id"] for record in response.data)

    @pytest.mark.asyncio
    async def test_projects_without_user(self, db, projects):
        response = await db.get_projects()

        assert self.ids(response) == ["edited", "owned", "private", "public", "viewed"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user", ["", None])
    async def test_projects_for_anonymous_user(self, db, projects, user):
        response = await db.get_projects(user=user)

        assert self.ids(response) == ["public"]

    @pytest.mark.asyncio
    async def test_projects_for_user(self, db, projects):
        response = await db.get_projects(user="u1")

        assert self.ids(response) == ["edited", "owned", "public", "viewed"]

    @pytest.mark.asyncio
    async def test_languages_of_project(self, db, projects):
        assert self.ids(await db.get_languages(project="owned")) == ["lang"]
        assert (await db.get_languages(project="public")).data == []

    @pytest.mark.asyncio
    async def test_lexemes_by_language_and_project(self, db, data_container):
        data_container.put(make_lexeme("lang-1", item_id="a", projects=[{"id": "p1"}]))
        data_container.put(make_lexeme("lang-1", item_id="b"))
        data_container.put(make_lexeme("lang-2", item_id="c", projects=[{"id": "p1"}]))

        assert self.ids(await db.get_lexemes(language="lang-1")) == ["a", "b"]
        assert self.ids(await db.get_lexemes(project="p1")) == ["a", "c"]
        assert self.ids(await db.get_lexemes(language="lang-1", project="p1")) == ["a"]
        assert (await db.count(RecordType.LEXEME, language="lang-2")).data == {"count": 1}
