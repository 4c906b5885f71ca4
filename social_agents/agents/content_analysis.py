"""Agent analysing social media content (text, images, whole posts)."""
from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from social_agents.agents.base import Agent
from social_agents.core.models import AgentEvent
from social_agents.core.worker import QueueWorker
from social_agents.services import analysis

AGENT_ID = "content-analysis"
MAX_PAGE_SIZE = 100

TEXT_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "options": {
            "type": "object",
            "properties": {
                "extractSentiment": {"type": "boolean"},
                "extractTopics": {"type": "boolean"},
                "extractEntities": {"type": "boolean"},
                "language": {"type": "string"},
            },
        },
    },
    "required": ["text"],
}

IMAGE_SCHEMA = {
    "type": "object",
    "properties": {
        "imageUrl": {"type": "string"},
        "imageBase64": {"type": "string"},
        "options": {
            "type": "object",
            "properties": {
                "detectObjects": {"type": "boolean"},
                "detectScenes": {"type": "boolean"},
                "extractText": {"type": "boolean"},
                "moderateContent": {"type": "boolean"},
            },
        },
    },
    "oneOf": [{"required": ["imageUrl"]}, {"required": ["imageBase64"]}],
}

POST_SCHEMA = {
    "type": "object",
    "properties": {
        "text": {"type": "string"},
        "mediaUrls": {"type": "array", "items": {"type": "string"}},
        "platform": {"type": "string"},
        "options": {
            "type": "object",
            "properties": {
                "extractHashtags": {"type": "boolean"},
                "predictEngagement": {"type": "boolean"},
                "detectTrends": {"type": "boolean"},
            },
        },
    },
    "required": ["text"],
}

QUEUE_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["text", "image", "post"]},
        "params": {"type": "object"},
    },
    "required": ["type", "params"],
}


def _analysis_id(kind: str) -> str:
    return f"{kind}_{int(datetime.now(timezone.utc).timestamp() * 1000)}_{uuid.uuid4().hex[:7]}"


def _preview(text: str) -> str:
    return text[:100] + ("..." if len(text) > 100 else "")


def _bounded_int(value: Any, *, default: int, low: int, high: Optional[int] = None) -> int:
    """Coerce a paging parameter, falling back to ``default`` and clamping to the range."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    number = max(low, number)
    return min(number, high) if high is not None else number


def _error(message: str, analysis_id: Optional[str] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"message": f"Analysis failed: {message}"}
    if analysis_id:
        content["analysisId"] = analysis_id
    return {"isError": True, "content": content}


@dataclass(slots=True)
class AnalysisTask:
    """Analysis waiting in the agent's queue."""

    id: str
    type: str
    params: Dict[str, Any]
    result: Optional[Dict[str, Any]] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ContentAnalysisAgent(Agent):
    """Expose the text, image and post heuristics as tools and keep their results."""

    def __init__(self, agent_id: str = AGENT_ID, **kwargs: Any) -> None:
        super().__init__(agent_id, **kwargs)
        self.analysis_results: Dict[str, Dict[str, Any]] = {}
        self._sequence = itertools.count()
        self._queue: QueueWorker[AnalysisTask] = QueueWorker(f"{agent_id}-analysis", self._run_task)

    async def on_initialize(self) -> None:
        self.register_tool({
            "name": "analyze_text",
            "description": "Extract sentiment, topics and entities from text",
            "input_schema": TEXT_SCHEMA,
            "handler": self.analyze_text,
        })
        self.register_tool({
            "name": "analyze_image",
            "description": "Detect objects, scenes and text in an image",
            "input_schema": IMAGE_SCHEMA,
            "handler": self.analyze_image,
        })
        self.register_tool({
            "name": "analyze_post",
            "description": "Analyse a complete social media post (text and media)",
            "input_schema": POST_SCHEMA,
            "handler": self.analyze_post,
        })
        self.register_tool({
            "name": "queue_analysis",
            "description": "Queue an analysis to run in the background",
            "input_schema": QUEUE_SCHEMA,
            "handler": self.queue_analysis,
        })
        self.register_resource({
            "name": "content_analysis_results",
            "description": "Results of previous content analyses",
            "handler": self.get_analysis_results,
        })

    async def on_start(self) -> None:
        self._queue.start()

    async def on_stop(self) -> None:
        await self._queue.stop()

    async def handle_message(self, event: AgentEvent) -> None:
        await super().handle_message(event)
        if event.type == "message" and event.data.get("type") == "analyze":
            self.queue_analysis(event.data.get("payload", {}))

    @property
    def pending_analyses(self) -> int:
        return self._queue.pending

    def _store(self, analysis_id: str, kind: str, summary: Dict[str, Any],
               options: Dict[str, Any], result: Dict[str, Any]) -> None:
        self.analysis_results[analysis_id] = {
            "type": kind,
            "input": summary,
            "options": options,
            "result": result,
            "timestamp": datetime.now(timezone.utc),
            "sequence": next(self._sequence),
        }

    async def analyze_text(self, params: Dict[str, Any]) -> Dict[str, Any]:
        text = params.get("text")
        if not isinstance(text, str):
            return _error("'text' must be a string")
        opts = {
            "extractSentiment": True,
            "extractTopics": True,
            "extractEntities": True,
            "language": "fr",
            **(params.get("options") or {}),
        }
        analysis_id = _analysis_id("text")
        self.logger.info("Text analysis started (ID: %s)", analysis_id)
        self.logger.debug("Text to analyse: %s", _preview(text))

        result = {
            "analysisId": analysis_id,
            "textLength": len(text),
            "language": opts["language"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sentiment": analysis.analyze_sentiment(text) if opts["extractSentiment"] else None,
            "topics": analysis.extract_topics(text) if opts["extractTopics"] else None,
            "entities": analysis.extract_entities(text) if opts["extractEntities"] else None,
        }
        self._store(analysis_id, "text", {"text": _preview(text)}, opts, result)
        return {"content": result}

    async def analyze_image(self, params: Dict[str, Any]) -> Dict[str, Any]:
        image_url = params.get("imageUrl")
        image_base64 = params.get("imageBase64")
        if not image_url and not image_base64:
            return _error("either 'imageUrl' or 'imageBase64' is required")
        opts = {
            "detectObjects": True,
            "detectScenes": True,
            "extractText": True,
            "moderateContent": True,
            **(params.get("options") or {}),
        }
        analysis_id = _analysis_id("image")
        self.logger.info("Image analysis started (ID: %s)", analysis_id)

        result = {
            "analysisId": analysis_id,
            "imageSource": "url" if image_url else "base64",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "objects": analysis.detect_objects() if opts["detectObjects"] else None,
            "scenes": analysis.detect_scenes() if opts["detectScenes"] else None,
            "textInImage": analysis.extract_image_text() if opts["extractText"] else None,
            "moderationResult": analysis.moderate_image() if opts["moderateContent"] else None,
        }
        self._store(analysis_id, "image", {"imageUrl": image_url or "[base64]"}, opts, result)
        return {"content": result}

    async def analyze_post(self, params: Dict[str, Any]) -> Dict[str, Any]:
        text = params.get("text")
        if not isinstance(text, str):
            return _error("'text' must be a string")
        media_urls: List[str] = list(params.get("mediaUrls") or [])
        platform = params.get("platform") or "unknown"
        opts = {
            "extractHashtags": True,
            "predictEngagement": True,
            "detectTrends": True,
            **(params.get("options") or {}),
        }
        analysis_id = _analysis_id("post")
        self.logger.info("Post analysis started (ID: %s)", analysis_id)

        text_analysis = (await self.analyze_text({"text": text}))["content"]
        media_analysis = []
        for url in media_urls:
            media_analysis.append((await self.analyze_image({"imageUrl": url}))["content"])

        hashtags = analysis.extract_hashtags(text) if opts["extractHashtags"] else None
        engagement = None
        if opts["predictEngagement"]:
            engagement = analysis.predict_engagement(
                text, platform, hashtags, len(media_urls), text_analysis["topics"]
            )

        result = {
            "analysisId": analysis_id,
            "platform": platform,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "textAnalysis": text_analysis,
            "mediaAnalysis": media_analysis,
            "hashtags": hashtags,
            "engagementPrediction": engagement,
            "trendDetection": analysis.detect_trends(text) if opts["detectTrends"] else None,
        }
        summary = {"text": _preview(text), "mediaCount": len(media_urls), "platform": platform}
        self._store(analysis_id, "post", summary, opts, result)
        return {"content": result}

    async def get_analysis_results(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Return stored analyses, newest first, optionally filtered by type."""
        params = params or {}
        kind = params.get("type")
        limit = _bounded_int(params.get("limit"), default=10, low=1, high=MAX_PAGE_SIZE)
        offset = _bounded_int(params.get("offset"), default=0, low=0)

        results = [{"id": analysis_id, **data} for analysis_id, data in self.analysis_results.items()]
        if kind:
            results = [r for r in results if r["type"] == kind]
        results.sort(key=lambda r: (r["timestamp"], r["sequence"]), reverse=True)

        return {
            "content": {
                "total": len(results),
                "offset": offset,
                "limit": limit,
                "results": results[offset:offset + limit],
            }
        }

    def queue_analysis(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Submit an analysis to the background queue."""
        kind = params.get("type")
        if kind not in self._analyzers():
            return _error(f"unknown analysis type '{kind}'")
        task = AnalysisTask(id=f"task_{uuid.uuid4().hex[:12]}", type=kind, params=dict(params.get("params") or {}))
        position = self._queue.submit(task)
        self.logger.debug("Analysis task %s queued at position %d", task.id, position)
        return {"content": {"taskId": task.id, "status": "queued", "position": position}}

    def _analyzers(self) -> Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]]:
        return {"text": self.analyze_text, "image": self.analyze_image, "post": self.analyze_post}

    async def _run_task(self, task: AnalysisTask) -> None:
        self.logger.debug("Processing analysis task: %s", task.type)
        task.result = await self._analyzers()[task.type](task.params)
        self.emit("analysis-completed", {"type": task.type, "taskId": task.id, "result": task.result})
