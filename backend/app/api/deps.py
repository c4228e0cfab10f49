"""FastAPI dependencies: the Entity Store and the advisor client.

Authentication is handled outside this service; requests arrive already
signed in (anonymous sessions on the dashboard).
"""
from fastapi import Request

from app.store.entity_store import EntityStore
from ai.groq_client import GroqClient, get_groq_client


def get_store(request: Request) -> EntityStore:
    """The store created with the app (see app.main.create_app)."""
    return request.app.state.store


def get_advisor_client() -> GroqClient:
    return get_groq_client()
