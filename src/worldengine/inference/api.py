"""
FastAPI server for world generation.

Provides REST API endpoints for generating worlds from reference strings
or from explicit specs.
"""

import argparse
import dataclasses
import logging
import time
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import MAX_WORLD_SIZE, EngineConfig
from ..engine.world_builder import WorldBuilder
from ..errors import SpecProviderError, WorldEngineError
from ..procgen.layers import LAYER_TYPES
from ..render.debug_image import world_to_base64
from .sampler import WorldSampler
from .spec_provider import get_client

logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    reference: str = Field(..., description="Reference string the world is derived from")
    size: Optional[int] = Field(None, ge=1, le=MAX_WORLD_SIZE, description="World width and height")
    return_image: bool = Field(False, description="Return base64-encoded PNG preview")


class SpecRequest(BaseModel):
    spec: Dict[str, Any] = Field(..., description="World spec (tiles, layers, ops)")
    seed: str = Field(..., description="Reference seed")
    width: Optional[int] = Field(None, ge=1, le=MAX_WORLD_SIZE, description="Override world.width")
    height: Optional[int] = Field(None, ge=1, le=MAX_WORLD_SIZE, description="Override world.height")
    return_image: bool = Field(False, description="Return base64-encoded PNG preview")


class WorldResponse(BaseModel):
    world: Dict[str, Any]
    stats: Dict[str, Any]
    generation_time: float
    image: Optional[str] = None  # Base64-encoded PNG


class HealthResponse(BaseModel):
    status: str
    provider: str
    model: str
    world_size: int


def _error_to_http(e: Exception) -> HTTPException:
    if isinstance(e, SpecProviderError):
        return HTTPException(status_code=502, detail=str(e))
    if isinstance(e, WorldEngineError):
        return HTTPException(status_code=422, detail=str(e))
    return HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")


def create_app(
    config: Optional[EngineConfig] = None,
    client: Optional[Any] = None,
    cors_origins: Optional[List[str]] = None
) -> FastAPI:
    """Create FastAPI application."""

    config = config or EngineConfig.from_env()
    # The API always returns worlds inline
    config = dataclasses.replace(config, outfile=None)

    app = FastAPI(
        title="WorldEngine API",
        description="Generate tile worlds from reference strings or declarative specs",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    if cors_origins is None:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    def health():
        """Health check endpoint."""
        provider = "together" if (client or get_client()) is not None else "fallback"
        return HealthResponse(
            status="healthy",
            provider=provider,
            model=config.model,
            world_size=config.world_size
        )

    @app.post("/generate", response_model=WorldResponse)
    def generate_world(request: GenerateRequest):
        """Generate a world from a reference string."""

        run_config = config
        if request.size is not None:
            run_config = dataclasses.replace(config, world_size=request.size)
        sampler = WorldSampler(run_config, client=client)

        try:
            start_time = time.time()
            world = sampler.generate_world(request.reference)
            generation_time = time.time() - start_time
        except Exception as e:
            logger.warning("Generation failed for %r: %s", request.reference, e)
            raise _error_to_http(e)

        stats = {k: v for k, v in sampler.last_stats.items() if k != "generation_time"}
        response = WorldResponse(world=world, stats=stats, generation_time=generation_time)
        if request.return_image:
            response.image = world_to_base64(world)
        return response

    @app.post("/generate/spec", response_model=WorldResponse)
    def generate_from_spec(request: SpecRequest):
        """Generate a world from an explicit spec and seed."""

        try:
            start_time = time.time()
            builder = WorldBuilder(request.spec, request.seed, width=request.width, height=request.height)
            world = builder.build()
            generation_time = time.time() - start_time
        except Exception as e:
            logger.warning("Spec generation failed: %s", e)
            raise _error_to_http(e)

        response = WorldResponse(world=world, stats=builder.stats, generation_time=generation_time)
        if request.return_image:
            response.image = world_to_base64(world)
        return response

    @app.get("/layers")
    def get_layer_types():
        """Get available layer types and their parameter ranges."""

        return {
            "layer_types": LAYER_TYPES.list_types(),
            "parameters": {
                name: {
                    param: {"min": lo, "max": hi, "default": default}
                    for param, (lo, hi, default) in params.items()
                }
                for name, params in LAYER_TYPES.get_all_parameters().items()
            },
            "op_types": ["paint", "roads.grid", "stamp.scatter"],
        }

    return app


def main():
    """CLI entry point for API server."""

    parser = argparse.ArgumentParser(description="WorldEngine API Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind server")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind server")
    parser.add_argument("--size", type=int, help="Default world size")
    parser.add_argument("--model", help="Model name for the spec provider")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = EngineConfig.from_env()
    if args.size:
        config.world_size = args.size
    if args.model:
        config.model = args.model

    print("Starting WorldEngine API server...")
    print(f"Server: http://{args.host}:{args.port}")
    print(f"Docs: http://{args.host}:{args.port}/docs")

    app = create_app(config)

    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
