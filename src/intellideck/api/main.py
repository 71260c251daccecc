"""
FastAPI application for IntelliDeck
Study set library, AI card generation and study sessions (flashcards, learn, write, test, match).
"""
from dotenv import load_dotenv

# Load env vars immediately
load_dotenv()

import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from intellideck.api.app_context import AppContext, build_context
from intellideck.api.routes import generation, sets, study
from intellideck.engine.errors import SessionStateError
from intellideck.engine.grader import EmptyAnswerError
from intellideck.services.generation_service import (
    CardGenerationError, EmptyNotesError, GenerationInProgressError
)
from intellideck.services.library_service import SetNotFoundError, SetValidationError
from intellideck.services.session_service import SessionNotFoundError
from intellideck.utils.config_loader import load_settings

# exception type -> HTTP status; the exception message becomes the detail
ERROR_STATUS = [
    (EmptyNotesError, 400),
    (SetValidationError, 400),
    (EmptyAnswerError, 400),
    (SetNotFoundError, 404),
    (SessionNotFoundError, 404),
    (SessionStateError, 409),
    (GenerationInProgressError, 409),
    (CardGenerationError, 502),
]


def _register_error_handlers(app: FastAPI) -> None:
    def make_handler(status_code: int):
        async def handler(request: Request, exc: Exception):
            logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})
        return handler

    for exc_type, status_code in ERROR_STATUS:
        app.add_exception_handler(exc_type, make_handler(status_code))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions"""
        logger.error(f"Unhandled exception: {exc}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    app = FastAPI(
        title="IntelliDeck API",
        description="Flashcard study sets with adaptive study modes and AI-assisted card generation",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.context = context or build_context(load_settings())
    _register_error_handlers(app)

    app.include_router(sets.router)
    app.include_router(generation.router)
    app.include_router(study.router)

    @app.get("/health")
    async def health():
        ctx: AppContext = app.state.context
        return {"status": "ok", "sets": len(ctx.library.list_sets())}

    return app


app = create_app()
