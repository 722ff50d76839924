"""HTTP API for the museum question pipeline.

Why: Consumable API without business logic; pure delegation plus the
     mapping of domain errors onto status codes.
"""

import logging
from typing import Any

try:
    from fastapi import FastAPI, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel
except ImportError as err:
    raise ImportError(
        "FastAPI not installed. Install with: pip install 'museum-guide[http]'"
    ) from err

from museum_guide.application.dto.query_dto import QueryRequest, to_wire
from museum_guide.config.compose import Container, build_container
from museum_guide.config.logging_setup import configure_logging
from museum_guide.domain.errors import ConfigurationError, DomainError, ValidationError

logger = logging.getLogger(__name__)


class RagChatRequestModel(BaseModel):
    """Request model for /v1/rag_chat.

    Fields are untyped so that missing or wrongly typed values reach the
    pipeline and get its own 400 messages instead of a schema error. A
    match_count that is not a positive whole number falls back to the default.
    """

    museum_id: Any = None
    question: Any = None
    match_count: Any = None


class SourceModel(BaseModel):
    id: str
    source_url: str | None = None
    similarity: float


class RagChatResponseModel(BaseModel):
    answer: str
    sources: list[SourceModel]


class ErrorResponseModel(BaseModel):
    error: str
    detail: str | None = None


def error_response(ex: DomainError) -> JSONResponse:
    if isinstance(ex, ValidationError):
        return JSONResponse(status_code=400, content={"error": str(ex)})
    if isinstance(ex, ConfigurationError):
        logger.error("configuration error: %s", ex)
        return JSONResponse(status_code=500, content={"error": "Server configuration error"})
    return JSONResponse(
        status_code=500, content={"error": "Internal server error", "detail": str(ex)}
    )


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app; a container is created from the environment on first use."""
    app = FastAPI(title="Museum Guide RAG API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS", "GET"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    def invalid_body(_request: Request, ex: RequestValidationError) -> JSONResponse:
        # Body is not a JSON object; keep the {error, detail} shape
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in ex.errors()
        )
        return JSONResponse(
            status_code=400, content={"error": "Invalid request body", "detail": detail}
        )

    def get_container(request: Request) -> Container:
        if request.app.state.container is None:
            request.app.state.container = build_container()
        return request.app.state.container

    @app.post(
        "/v1/rag_chat",
        response_model=RagChatResponseModel,
        responses={400: {"model": ErrorResponseModel}, 500: {"model": ErrorResponseModel}},
    )
    def rag_chat(req: RagChatRequestModel, request: Request) -> Any:
        """Answer one visitor question.

        Runs in FastAPI's threadpool (plain def); each call is independent.

        Example:
            POST /v1/rag_chat
            {"museum_id": "…uuid…", "question": "When was the museum founded?"}
        """
        try:
            use_case = get_container(request).get_answer_use_case()
        except DomainError as ex:
            return error_response(ex)

        result = use_case.execute(
            QueryRequest(
                tenant_id=req.museum_id,
                question=req.question,
                match_count=req.match_count,
            )
        )
        if result.error is not None:
            return error_response(result.error)
        return JSONResponse(status_code=200, content=to_wire(result.value))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy", "service": "museum-guide"}

    return app


def build_app() -> FastAPI:
    """uvicorn factory: `uvicorn museum_guide.interface.http.api:build_app --factory`."""
    container = build_container()
    configure_logging(container.settings.log_level)
    return create_app(container)
