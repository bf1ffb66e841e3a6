from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from typing import Optional
import logging

from string_analyzer.config import Settings, get_settings
from string_analyzer.database import build_engine, build_session_factory, init_db
from string_analyzer.exceptions import StringAnalyzerError
from string_analyzer.api.routes import router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ENDPOINTS = {
    "POST /strings": "Analyze and store a string",
    "GET /strings/{string_value}": "Get specific string analysis",
    "GET /strings": "Get all strings with optional filters",
    "GET /strings/filter-by-natural-language": "Filter using natural language",
    "DELETE /strings/{string_value}": "Delete a string"
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info("Initializing database...")
    engine = build_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    logger.info("Database connection opened")
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connection closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level)

    app = FastAPI(
        title="String Analyzer Service",
        description="Analyze, fingerprint and store strings, then query them back",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, tags=["strings"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "String Analyzer Service",
            "version": "1.0.0",
            "endpoints": ENDPOINTS
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    def error_response(status_code: int, message: str, **extra) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": message, **extra})

    # Domain errors carry their own status code
    @app.exception_handler(StringAnalyzerError)
    async def string_analyzer_exception_handler(request: Request, exc: StringAnalyzerError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    # Malformed bodies and query parameters are reported per parameter
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = {
            ".".join(str(part) for part in error["loc"]): error["msg"]
            for error in exc.errors()
        }
        return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", details=details)

    # Unknown routes and methods
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, StringAnalyzerError.message)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("string_analyzer.main:app", host="0.0.0.0", port=app.state.settings.port)
