"""Elasticsearch-backed job search index.

The index is a derived view of the ``jobs`` table: one document per job,
keyed by the job id as a string, carrying the company name and the flat
list of required skill names.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, ContextManager

from elasticsearch import Elasticsearch, NotFoundError as ESNotFoundError, helpers
from sqlalchemy.orm import Session

from app.store import jobs as job_store

logger = logging.getLogger(__name__)

BULK_LOAD_WORKERS = 5

JOB_INDEX_MAPPINGS = {
    "properties": {
        "id": {"type": "integer"},
        "title": {"type": "text"},
        "industry": {"type": "keyword"},
        "company_name": {"type": "text"},
        "description": {"type": "text"},
        "location": {"type": "text"},
        "salary_min": {"type": "integer"},
        "salary_max": {"type": "integer"},
        "requirements": {"type": "text"},
        "job_skills": {"type": "text"},
    }
}


def build_job_document(db: Session, job_id: int) -> dict | None:
    """Read a job, its company name and skills into a search document.

    Returns None if the job no longer exists.
    """
    row = job_store.get_job_with_company_name(db, job_id)
    if row is None:
        return None
    job, company_name = row
    return {
        "id": job.id,
        "title": job.title,
        "industry": job.industry,
        "company_name": company_name,
        "description": job.description,
        "location": job.location,
        "salary_min": job.salary_min,
        "salary_max": job.salary_max,
        "requirements": job.requirements,
        "job_skills": [skill.name for skill in job_store.list_job_skills(db, job.id)],
    }


def build_search_query(query: str, page: int, page_size: int) -> dict:
    return {
        "from": (page - 1) * page_size,
        "size": page_size,
        "query": {
            "bool": {
                "should": [
                    {"match": {"title": {"query": query, "fuzziness": "AUTO"}}},
                    {
                        "multi_match": {
                            "query": query,
                            "fields": ["description", "requirements", "job_skills", "location"],
                            "fuzziness": "AUTO",
                        }
                    },
                ]
            }
        },
    }


def load_job_documents(
    session_factory: Callable[[], ContextManager[Session]],
    max_workers: int = BULK_LOAD_WORKERS,
) -> list[dict]:
    """Build documents for every job using a small pool of worker threads.

    Each worker opens its own session; results are collected under a lock and
    their order is not significant.
    """
    with session_factory() as db:
        job_ids = job_store.list_all_job_ids(db)

    documents: list[dict] = []
    lock = threading.Lock()

    def load_one(job_id: int) -> None:
        with session_factory() as db:
            document = build_job_document(db, job_id)
        if document is not None:
            with lock:
                documents.append(document)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="search_load_") as executor:
        for future in [executor.submit(load_one, job_id) for job_id in job_ids]:
            future.result()

    return documents


class SearchIndex:
    def __init__(self, client: Elasticsearch, index: str = "jobs"):
        self.client = client
        self.index = index

    def ping(self) -> bool:
        return bool(self.client.ping())

    def ensure_index(self) -> None:
        if not self.client.indices.exists(index=self.index):
            self.client.indices.create(index=self.index, mappings=JOB_INDEX_MAPPINGS)
            logger.info("Created search index %s", self.index)

    def bulk_load(self, documents: list[dict]) -> int:
        """Index documents by id. Re-running overwrites the same ids."""
        self.ensure_index()
        actions = (
            {
                "_op_type": "index",
                "_index": self.index,
                "_id": str(document["id"]),
                "_source": document,
            }
            for document in documents
        )
        indexed, _ = helpers.bulk(self.client, actions)
        logger.info("Bulk loaded %d documents into %s", indexed, self.index)
        return indexed

    def upsert(self, job_id: int, document: dict) -> None:
        self.client.index(index=self.index, id=str(job_id), document=document)

    def delete(self, job_id: int) -> None:
        try:
            self.client.delete(index=self.index, id=str(job_id))
        except ESNotFoundError:
            logger.debug("Job %s was not in the search index", job_id)

    def search(self, query: str, page: int, page_size: int) -> list[dict]:
        """Full-text search, hits in descending relevance order."""
        body = build_search_query(query, page, page_size)
        response = self.client.search(
            index=self.index,
            from_=body["from"],
            size=body["size"],
            query=body["query"],
            track_total_hits=True,
        )
        return [hit["_source"] for hit in response["hits"]["hits"]]


def create_search_index(settings) -> SearchIndex:
    client = Elasticsearch(
        settings.elasticsearch_address,
        request_timeout=settings.elasticsearch_timeout_seconds,
    )
    return SearchIndex(client, settings.elasticsearch_index)
