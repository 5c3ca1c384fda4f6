"""
FastAPI application for the coordination planner.

Exposes coordination analysis, change impact analysis, dependency ordering
and the repository catalogue over HTTP.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from repo_coord import __version__
from repo_coord.api.models.analyze import (
    AnalyzeRequest,
    AnalyzeResponse,
    ChangeImpactResponse,
    DependencyOrderResponse,
)
from repo_coord.lib.config import Config, get_config_manager, setup_logging
from repo_coord.lib.ecosystem import resolve_ecosystem
from repo_coord.lib.exceptions import (
    ConfigurationError,
    CoordinationError,
    CyclicDependencyError,
    EmptyImpactError,
)
from repo_coord.services.coordination_planner import CoordinationPlanner


logger = logging.getLogger(__name__)


ERROR_STATUS = {
    ConfigurationError: status.HTTP_400_BAD_REQUEST,
    CyclicDependencyError: status.HTTP_409_CONFLICT,
    EmptyImpactError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def load_api_config() -> Config:
    """Load the configuration named by CONFIG_FILE/ENV_FILE."""
    return get_config_manager(os.getenv("CONFIG_FILE"), os.getenv("ENV_FILE")).load_config()


def build_planner_from_config() -> CoordinationPlanner:
    """Build a planner from the API configuration."""
    config = load_api_config()
    setup_logging(config)

    ecosystem = resolve_ecosystem(config.planner.ecosystem_file)
    logger.info(f"Planner ready for ecosystem '{ecosystem.name}'")
    return CoordinationPlanner(ecosystem)


def get_planner(request: Request) -> CoordinationPlanner:
    """Get the application's planner, building it on first use."""
    planner = getattr(request.app.state, "planner", None)
    if planner is None:
        planner = build_planner_from_config()
        request.app.state.planner = planner
    return planner


def create_app(
    planner: Optional[CoordinationPlanner] = None,
    cors_origins: Optional[List[str]] = None
) -> FastAPI:
    """
    Create the API application.

    Args:
        planner: Planner to serve; built from configuration when omitted
        cors_origins: Allowed CORS origins; taken from configuration when omitted
    """
    if cors_origins is None:
        cors_origins = load_api_config().api.cors_origins

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "planner", None) is None:
            app.state.planner = build_planner_from_config()
        yield

    app = FastAPI(
        title="Cross-Repository Coordination Planner API",
        description="Plan the order, parallelism and risk of changes spanning many repositories",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.planner = planner

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CoordinationError)
    async def coordination_error_handler(request: Request, exc: CoordinationError):
        """Return planner errors as structured JSON."""
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report missing or malformed request fields as a bad request."""
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        error = ConfigurationError(
            f"Invalid change request: {', '.join(fields) or 'malformed input'}",
            details={"fields": fields},
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())

    @app.get("/")
    async def root():
        """Root endpoint for API health check."""
        return {"message": "Cross-Repository Coordination Planner API", "version": __version__}

    @app.get("/health")
    async def health_check(request: Request):
        planner = get_planner(request)
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "ecosystem": planner.ecosystem.name,
            "repository_count": len(planner.ecosystem.repositories),
        }

    @app.get("/repositories")
    async def list_repositories(request: Request):
        planner = get_planner(request)
        return {
            "ecosystem": planner.ecosystem.name,
            "categories": planner.ecosystem.categories,
            "repositories": [repo.model_dump(mode="json") for repo in planner.ecosystem.repositories],
        }

    @app.post("/coordination/analyze", response_model=AnalyzeResponse)
    async def analyze(body: AnalyzeRequest, request: Request):
        """Plan a change across all affected repositories."""
        planner = get_planner(request)
        analysis = planner.analyze(body.to_change_request())
        return AnalyzeResponse(
            change_request=analysis.change_request,
            coordination_plan=analysis.coordination_plan,
            intelligence=analysis.intelligence,
            summary=analysis.summary,
        )

    @app.post("/coordination/impact", response_model=ChangeImpactResponse)
    async def change_impact(body: AnalyzeRequest, request: Request):
        """Work out the follow-up a change causes in dependent repositories."""
        planner = get_planner(request)
        impact = planner.analyze_change_impact(body.to_change_request())
        return ChangeImpactResponse.model_validate(impact.to_dict())

    @app.get("/coordination/order/{category}", response_model=DependencyOrderResponse)
    async def dependency_order(category: str, request: Request, repository: Optional[List[str]] = Query(None)):
        """Get the dependency order of repositories for a change category."""
        planner = get_planner(request)
        entries = planner.dependency_order(category, repository or None)
        return DependencyOrderResponse(
            category=category,
            execution_order=[entry.repository for entry in entries],
            details=entries,
        )

    return app


app = create_app()
