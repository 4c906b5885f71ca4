"""Application runtime composition helpers."""
from __future__ import annotations

from typing import Optional

from social_agents.agents.content_analysis import ContentAnalysisAgent
from social_agents.agents.twitter import TwitterAgent
from social_agents.config import Config
from social_agents.core.context import ContextManager
from social_agents.core.event_bus import EventBus
from social_agents.core.registry import CapabilityRegistry
from social_agents.core.router import MessageRouter
from social_agents.orchestration.orchestrator import Orchestrator


def build_orchestrator(config: Optional[Config] = None) -> Orchestrator:
    """Create an orchestrator with the default agents registered but not started."""
    config = config or Config()
    bus = EventBus()
    orchestrator = Orchestrator(
        bus=bus,
        registry=CapabilityRegistry(),
        router=MessageRouter(),
        context=ContextManager(),
    )

    content_agent = ContentAnalysisAgent(bus=bus)
    orchestrator.register_agent(content_agent.agent_id, content_agent)

    twitter_agent = TwitterAgent(config.twitter, bus=bus)
    orchestrator.register_agent(twitter_agent.agent_id, twitter_agent)
    return orchestrator
