"""Tests for the Elasticsearch job index wrapper."""

from unittest.mock import MagicMock, patch

from elasticsearch import NotFoundError as ESNotFoundError

from app.services.search import (
    JOB_INDEX_MAPPINGS,
    SearchIndex,
    build_job_document,
    build_search_query,
    load_job_documents,
)

from conftest import create_job


class TestBuildSearchQuery:
    """Tests for the search request body."""

    def test_pagination(self):
        body = build_search_query("python", page=3, page_size=5)
        assert body["from"] == 10
        assert body["size"] == 5

    def test_title_match_is_fuzzy(self):
        should = build_search_query("pyhton", 1, 5)["query"]["bool"]["should"]
        assert should[0] == {"match": {"title": {"query": "pyhton", "fuzziness": "AUTO"}}}

    def test_other_fields(self):
        should = build_search_query("berlin", 1, 5)["query"]["bool"]["should"]
        multi_match = should[1]["multi_match"]
        assert multi_match["query"] == "berlin"
        assert set(multi_match["fields"]) == {"description", "requirements", "job_skills", "location"}


class TestJobDocuments:
    """Tests for building documents from the database."""

    def test_build_job_document(self, db, employer):
        job = create_job(db, employer.company_id, skills=["Python", "Docker"])

        document = build_job_document(db, job.id)
        assert document == {
            "id": job.id,
            "title": "Python Developer",
            "industry": "Software",
            "company_name": "Acme",
            "description": "Build APIs",
            "location": "Berlin",
            "salary_min": 60000,
            "salary_max": 90000,
            "requirements": "3 years of experience",
            "job_skills": ["Python", "Docker"],
        }

    def test_build_job_document_missing_job(self, db):
        assert build_job_document(db, 42) is None

    def test_load_job_documents(self, db, employer, session_factory):
        first = create_job(db, employer.company_id, title="First")
        second = create_job(db, employer.company_id, title="Second")

        documents = load_job_documents(session_factory, max_workers=1)
        assert sorted(d["id"] for d in documents) == [first.id, second.id]


class TestSearchIndex:
    """Tests for the client calls made by SearchIndex."""

    def test_ensure_index_creates_missing_index(self):
        client = MagicMock()
        client.indices.exists.return_value = False

        SearchIndex(client, "jobs").ensure_index()
        client.indices.create.assert_called_once_with(index="jobs", mappings=JOB_INDEX_MAPPINGS)

    def test_ensure_index_keeps_existing_index(self):
        client = MagicMock()
        client.indices.exists.return_value = True

        SearchIndex(client, "jobs").ensure_index()
        client.indices.create.assert_not_called()

    def test_upsert_uses_job_id_as_document_id(self):
        client = MagicMock()

        SearchIndex(client, "jobs").upsert(5, {"id": 5, "title": "Dev"})
        client.index.assert_called_once_with(index="jobs", id="5", document={"id": 5, "title": "Dev"})

    def test_delete_ignores_missing_document(self):
        client = MagicMock()
        client.delete.side_effect = ESNotFoundError("not found", meta=MagicMock(status=404), body={})

        SearchIndex(client, "jobs").delete(5)
        client.delete.assert_called_once_with(index="jobs", id="5")

    def test_search_returns_sources_in_hit_order(self):
        client = MagicMock()
        client.search.return_value = {
            "hits": {"hits": [{"_source": {"id": 2}}, {"_source": {"id": 1}}]}
        }

        results = SearchIndex(client, "jobs").search("python", 2, 5)
        assert results == [{"id": 2}, {"id": 1}]
        kwargs = client.search.call_args.kwargs
        assert kwargs["index"] == "jobs"
        assert kwargs["from_"] == 5
        assert kwargs["size"] == 5
        assert "bool" in kwargs["query"]

    def test_bulk_load(self):
        client = MagicMock()
        client.indices.exists.return_value = True
        documents = [{"id": 1}, {"id": 2}]

        with patch("app.services.search.helpers.bulk", return_value=(2, [])) as bulk:
            assert SearchIndex(client, "jobs").bulk_load(documents) == 2

        actions = list(bulk.call_args.args[1])
        assert [a["_id"] for a in actions] == ["1", "2"]
        assert all(a["_index"] == "jobs" for a in actions)
