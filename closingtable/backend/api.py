"""FastAPI endpoints for offer creation, submission and result reveal."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictFloat, StrictInt

from .config import BackendSettings, load_settings
from .mechanism import InvalidInput
from .observability import setup_logging
from .service import NegotiationService, create_service

logger = logging.getLogger(__name__)


class CreateOfferRequest(BaseModel):
    ceiling: StrictInt | StrictFloat


class CreateOfferResponse(BaseModel):
    offerId: str


class OfferStatusResponse(BaseModel):
    status: str


class SubmitOfferRequest(BaseModel):
    floor: StrictInt | StrictFloat


def _route_template(request: Request) -> str | None:
    # Paths embed capability ids; only the matched template is safe to log.
    route = request.scope.get("route")
    return getattr(route, "path", None)


def _body_field(loc: tuple) -> str:
    # Unparsable JSON reports a character offset, a missing body reports no field.
    if len(loc) > 1 and isinstance(loc[1], str):
        return loc[1]
    return "body"


def create_app(service: NegotiationService | None = None, settings: BackendSettings | None = None) -> FastAPI:
    local_settings = settings if settings is not None else load_settings()
    negotiation = service if service is not None else create_service(local_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if service is None:
            setup_logging(local_settings.log_level, local_settings.log_format)
        negotiation.reaper.start()
        try:
            yield
        finally:
            negotiation.reaper.stop()

    app = FastAPI(title="Closing Table API", version="0.3.0", lifespan=lifespan)
    app.state.negotiation = negotiation
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(local_settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
        logger.warning("rejected input", extra={"route": _route_template(request)})
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("malformed request body", extra={"route": _route_template(request)})
        fields = sorted({_body_field(error["loc"]) for error in exc.errors()})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid or missing " + ", ".join(repr(field) for field in fields)},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/offers", response_model=CreateOfferResponse)
    def create_offer(payload: CreateOfferRequest) -> dict[str, Any]:
        return negotiation.create_offer(payload.ceiling)

    @app.get("/api/offers/{offer_id}", response_model=OfferStatusResponse)
    def get_offer_status(offer_id: str) -> dict[str, Any]:
        return negotiation.get_offer_status(offer_id)

    @app.post("/api/offers/{offer_id}/submit")
    def submit_offer(offer_id: str, payload: SubmitOfferRequest) -> dict[str, Any]:
        return negotiation.submit_offer(offer_id, payload.floor)

    @app.get("/api/results/{result_id}")
    def get_result(result_id: str) -> dict[str, Any]:
        return negotiation.get_result(result_id)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run("closingtable.backend.api:app", host=settings.host, port=settings.port, access_log=False)


if __name__ == "__main__":
    main()
