import logging
from contextlib import asynccontextmanager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from replica.config import settings
from replica.exceptions import ReplicaError
from replica.routers import pipeline
from replica.services.llm import ChatClient
from replica.services.pipeline import PipelineService
from replica.services.structure import StructureAnalyzerService
from replica.services.vision import VisionService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build collaborators on startup, close their HTTP clients on shutdown."""
    logger.info("Starting Replica service ...")

    chat_client = ChatClient(settings)
    vision = VisionService(settings)
    try:
        structure = StructureAnalyzerService(chat_client)
        app.state.chat_client = chat_client
        app.state.pipeline = PipelineService(
            vision=vision,
            layout=structure,
            roles=structure,
            design=structure,
            variations=structure,
            settings=settings,
        )

        logger.info("Replica service ready.")
        yield
    finally:
        logger.info("Shutting down Replica service ...")
        await chat_client.close()
        await vision.close()


app = FastAPI(
    title="Replica",
    description="Temporal text consolidation and motion inference for video style cloning",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pipeline.router)


@app.exception_handler(ReplicaError)
async def replica_error_handler(request: Request, exc: ReplicaError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})
