# Role: FastAPI app bootstrap. Loads environment config early, loads the conversation flow once (fatal if it is
# missing or unparseable), registers routers and maps application errors to JSON responses.

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import backend.config
backend.config.load_env()

import backend.config as config
from backend.api.admin import router as admin_router
from backend.api.conversation import router as conversation_router
from backend.core.conversation_controller import ConversationController
from backend.core.conversation_store import ConversationStore
from backend.core.errors import IntakeError
from backend.core.flow_engine import FlowEngine, FlowEngineError
from backend.core.flow_loader import load_flow_definition
from backend.llm.intake_assistant import IntakeAssistant
from backend.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def build_controller() -> ConversationController:
    # 1) Load the flow (raises FlowLoadError -> process startup fails)
    # 2) Seed authorized users into the store
    flow = load_flow_definition()
    store = ConversationStore()
    seeded = store.seed_users(config.DEFAULT_USERS)
    if seeded:
        logger.info(f"Seeded {seeded} authorized user(s)")
    return ConversationController(store=store, engine=FlowEngine(flow), assistant=IntakeAssistant())


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if getattr(app.state, "controller", None) is None:
        app.state.controller = build_controller()
    logger.info("Legal Intake API started")
    yield
    logger.info("Shutting down...")


async def _intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    body = {"success": False, "message": exc.message}
    if "errors" in exc.details:
        body["errors"] = exc.details["errors"]
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=body)


async def _flow_error_handler(request: Request, exc: FlowEngineError) -> JSONResponse:
    # Context is logged by the controller; the client only learns that the server failed.
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


def create_app(controller: Optional[ConversationController] = None) -> FastAPI:
    app = FastAPI(title="Legal Intake API", version="0.1.0", lifespan=lifespan)
    if controller is not None:
        app.state.controller = controller

    app.add_exception_handler(IntakeError, _intake_error_handler)
    app.add_exception_handler(FlowEngineError, _flow_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(conversation_router)
    app.include_router(admin_router)

    @app.get("/")
    def root() -> dict:
        # Role: quick discoverability for clients (where are docs/health).
        return {
            "message": "Legal Intake API is running",
            "docs": "/docs",
            "health": "/api/health",
        }

    @app.get("/api/health")
    def health(request: Request) -> dict:
        controller = getattr(request.app.state, "controller", None)
        return {"status": "ok", "flowReady": bool(controller and controller.engine.is_ready())}

    return app


app = create_app()
