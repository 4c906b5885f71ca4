"""HTTP API exposing agent lifecycle controls."""
from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from social_agents.agents.base import Agent
from social_agents.errors import NotFoundError, StartupError
from social_agents.orchestration.orchestrator import Orchestrator

router = APIRouter(prefix="/agents", tags=["agents"])


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


class AgentResponse(BaseModel):
    agent_id: str
    state: str
    running: bool
    tools: List[str]
    resources: List[str]
    pending_events: int

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentResponse":
        return cls(**agent.status())


@router.get("", response_model=List[AgentResponse])
async def list_agents(orchestrator: Orchestrator = Depends(get_orchestrator)) -> List[AgentResponse]:
    return [AgentResponse(**status_) for status_ in orchestrator.list_agents()]


@router.post("/{agent_id}/start", response_model=AgentResponse)
async def start_agent(agent_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> AgentResponse:
    try:
        agent = await orchestrator.start_agent(agent_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StartupError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return AgentResponse.from_agent(agent)


@router.post("/{agent_id}/stop", response_model=AgentResponse)
async def stop_agent(agent_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> AgentResponse:
    try:
        agent = await orchestrator.stop_agent(agent_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AgentResponse.from_agent(agent)


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_agent(agent_id: str, orchestrator: Orchestrator = Depends(get_orchestrator)) -> None:
    agent = orchestrator.get_agent(agent_id)
    if agent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown agent")
    await orchestrator.unregister_agent(agent_id)


status_router = APIRouter(tags=["status"])


@status_router.get("/api/status")
async def agent_status(orchestrator: Orchestrator = Depends(get_orchestrator)) -> Dict[str, bool]:
    return orchestrator.status()
