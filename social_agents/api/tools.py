"""HTTP routes invoking registered tools and resources."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from social_agents.api.routes import get_orchestrator
from social_agents.errors import NotFoundError, ResourceError, ValidationError
from social_agents.orchestration.orchestrator import Orchestrator

router = APIRouter(tags=["tools"])


class TextAnalysisRequest(BaseModel):
    text: str = Field(..., description="Text to analyse")
    options: Dict[str, Any] = Field(default_factory=dict)


class ImageAnalysisRequest(BaseModel):
    imageUrl: Optional[str] = None
    imageBase64: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _require_source(self) -> "ImageAnalysisRequest":
        if not self.imageUrl and not self.imageBase64:
            raise ValueError("either imageUrl or imageBase64 is required")
        return self


class PostAnalysisRequest(BaseModel):
    text: str
    mediaUrls: List[str] = Field(default_factory=list)
    platform: str = "unknown"
    options: Dict[str, Any] = Field(default_factory=dict)


async def _invoke(orchestrator: Orchestrator, name: str, params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return await orchestrator.invoke_tool(name, params)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/tools")
async def list_tools(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[Dict[str, Any]]:
    return orchestrator.registry.describe_tools()


@router.post("/tools/{name}")
async def call_tool(
    name: str,
    params: Optional[Dict[str, Any]] = Body(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    return await _invoke(orchestrator, name, params or {})


@router.get("/resources")
async def list_resources(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[Dict[str, Any]]:
    return orchestrator.registry.describe_resources()


@router.get("/resources/{name}")
async def read_resource(
    name: str,
    request: Request,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Any:
    try:
        return await orchestrator.get_resource(name, dict(request.query_params))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ResourceError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@router.post("/analyze/text")
async def analyze_text(
    request: TextAnalysisRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> Dict[str, Any]:
    return await _invoke(orchestrator, "analyze_text", request.model_dump())


@router.post("/analyze/image")
async def analyze_image(
    request: ImageAnalysisRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> Dict[str, Any]:
    return await _invoke(orchestrator, "analyze_image", request.model_dump(exclude_none=True))


@router.post("/analyze/post")
async def analyze_post(
    request: PostAnalysisRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
) -> Dict[str, Any]:
    return await _invoke(orchestrator, "analyze_post", request.model_dump())


@router.get("/analyze/results")
async def analysis_results(
    type: Optional[str] = Query(default=None, pattern="^(text|image|post)$"),
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Any:
    params: Dict[str, Any] = {"limit": limit, "offset": offset}
    if type:
        params["type"] = type
    try:
        return await orchestrator.get_resource("content_analysis_results", params)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/twitter/search")
async def search_tweets(
    q: str = Query(..., min_length=1),
    max_results: int = Query(default=10, ge=10, le=100),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    return await _invoke(orchestrator, "search_tweets", {"query": q, "maxResults": max_results})


@router.post("/rpc")
async def rpc(
    message: Dict[str, Any] = Body(...),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """JSON-RPC over plain HTTP; every request gets an envelope back."""
    return await orchestrator.router.route_message(message)


def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})
