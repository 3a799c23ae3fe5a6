from fastapi import Request

from replica.services.llm import ChatClient
from replica.services.pipeline import PipelineService


def get_pipeline(request: Request) -> PipelineService:
    """Retrieve the PipelineService from app state."""
    return request.app.state.pipeline


def get_chat_client(request: Request) -> ChatClient:
    """Retrieve the shared ChatClient from app state."""
    return request.app.state.chat_client
