import pytest

from diagram_engine.inference.templates import TemplateExplanationGenerator
from diagram_engine.pipeline.controller import DiagramService
from diagram_engine.pipeline.enricher import ExplanationEnricher

USERS = {
    "name": "users",
    "fields": [
        {"name": "id", "type": "UUID", "primary": True},
        {"name": "email", "type": "VARCHAR", "length": 255, "unique": True},
    ],
}

POSTS = {
    "name": "posts",
    "comment": "Blog posts written by users",
    "fields": [
        {"name": "id", "type": "UUID", "primary": True},
        {"name": "title", "type": "VARCHAR"},
        {"name": "user_id", "type": "UUID", "references": {"table": "users", "field": "id"}},
    ],
    "indexes": [{"type": "INDEX", "fields": ["user_id"]}],
}

GROUPED_ENDPOINTS = [
    {
        "group": "Users",
        "endpoints": [
            {"method": "get", "path": "/users"},
            {"method": "POST", "path": "/users", "auth": True, "description": "Create a user"},
        ],
    },
    {
        "group": "Posts",
        "endpoints": [{"method": "GET", "path": "/posts"}],
    },
]


@pytest.fixture
def blog_payload():
    return {
        "projectName": "Blog",
        "description": "A small blogging platform",
        "schemas": [USERS, POSTS],
        "endpoints": GROUPED_ENDPOINTS,
    }


@pytest.fixture
def template_service():
    enricher = ExplanationEnricher(TemplateExplanationGenerator(), max_concurrency=2, timeout=5)
    return DiagramService(enricher=enricher)
