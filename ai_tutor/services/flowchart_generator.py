"""LangGraph workflow that turns a conversation into a learning flowchart."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from .errors import TutorError
from .extraction import parse_json, slice_json_object, strip_code_fences
from .flowchart_validator import (
    DEFAULT_BOUNDS,
    CanvasBounds,
    create_fallback_flowchart,
    validate_flowchart,
)
from .langgraph_state import FlowchartState
from .llm_client import LLMClient
from .models import ChatTurn, Conversation, Flowchart, FlowchartNode, NodePosition, utcnow
from .prompts import format_flowchart_transcript, get_workflow_prompts
from .settings import TutorSettings

logger = logging.getLogger(__name__)

MIN_FLOWCHART_MESSAGES = 2


class FlowchartGenerator:
    """Runs request, clean, parse and validate steps, falling back on any failure.

    Only the message-count precondition surfaces as an error; provider, parse and
    validation problems all end in the conversation-derived fallback graph.
    """

    def __init__(
        self,
        *,
        llm_client: Optional[LLMClient] = None,
        bounds: CanvasBounds = DEFAULT_BOUNDS,
    ) -> None:
        self.llm_client = llm_client or LLMClient()
        self.bounds = bounds
        self.prompts = get_workflow_prompts()
        self._graph = self._build_graph()

    async def generate(self, conversation: Conversation, settings: TutorSettings) -> Flowchart:
        if len(conversation.messages) < MIN_FLOWCHART_MESSAGES:
            raise ValueError("Need at least 2 messages to generate a flowchart")

        state: FlowchartState = {
            "conversation": conversation,
            "settings": settings.model_copy(),
            "used_fallback": False,
        }
        result = await self._graph.ainvoke(state)
        return result["flowchart"]

    def _build_graph(self):
        workflow = StateGraph(FlowchartState)

        request_node = "request_step"
        clean_node = "clean_step"
        parse_node = "parse_step"
        validate_node = "validate_step"
        fallback_node = "fallback_step"

        workflow.add_node(request_node, self._request_node)
        workflow.add_node(clean_node, self._clean_node)
        workflow.add_node(parse_node, self._parse_node)
        workflow.add_node(validate_node, self._validate_node)
        workflow.add_node(fallback_node, self._fallback_node)

        workflow.set_entry_point(request_node)
        workflow.add_conditional_edges(
            request_node, self._route, {"continue": clean_node, "fallback": fallback_node}
        )
        workflow.add_edge(clean_node, parse_node)
        workflow.add_conditional_edges(
            parse_node, self._route, {"continue": validate_node, "fallback": fallback_node}
        )
        workflow.add_conditional_edges(
            validate_node, self._route, {"continue": END, "fallback": fallback_node}
        )
        workflow.add_edge(fallback_node, END)

        return workflow.compile()

    @staticmethod
    def _route(state: FlowchartState) -> str:
        return "fallback" if state.get("error") else "continue"

    async def _request_node(self, state: FlowchartState) -> Dict[str, Any]:
        settings = state["settings"]
        transcript = format_flowchart_transcript(state["conversation"].messages)
        prompt = self.prompts.get_flowchart_prompt(transcript)
        try:
            raw = await self.llm_client.collect(
                [ChatTurn(role="user", content=prompt)],
                settings,
                provider_id=settings.flowchart_model,
            )
        except TutorError as exc:
            logger.warning("Flowchart request failed, using fallback: %s", exc)
            return {"error": str(exc)}
        return {"raw_response": raw}

    async def _clean_node(self, state: FlowchartState) -> Dict[str, Any]:
        cleaned = strip_code_fences(state.get("raw_response", ""))
        return {"cleaned": slice_json_object(cleaned)}

    async def _parse_node(self, state: FlowchartState) -> Dict[str, Any]:
        try:
            return {"parsed": parse_json(state.get("cleaned", ""))}
        except ValueError as exc:
            logger.warning("Flowchart response was not valid JSON, using fallback: %s", exc)
            return {"error": f"Invalid JSON: {exc}"}

    async def _validate_node(self, state: FlowchartState) -> Dict[str, Any]:
        try:
            flowchart = validate_flowchart(
                state.get("parsed"), state["conversation"], bounds=self.bounds
            )
        except Exception as exc:
            logger.warning("Flowchart validation failed, using fallback: %s", exc)
            return {"error": f"Validation failed: {exc}"}
        if flowchart is None:
            logger.warning("Flowchart response had no usable nodes, using fallback")
            return {"error": "Flowchart has no nodes"}
        return {"flowchart": flowchart}

    async def _fallback_node(self, state: FlowchartState) -> Dict[str, Any]:
        flowchart = create_fallback_flowchart(state["conversation"], bounds=self.bounds)
        return {"flowchart": flowchart, "used_fallback": True}


def export_flowchart(flowchart: Flowchart) -> Dict[str, Any]:
    """Serialize a flowchart into the portable export document."""

    node_types = Counter(node.type for node in flowchart.nodes)
    return {
        "title": flowchart.title,
        "description": flowchart.description or "",
        "stats": {
            "total_nodes": len(flowchart.nodes),
            "total_connections": len(flowchart.edges),
            "node_types": dict(node_types),
        },
        "nodes": [
            {
                "id": node.id,
                "type": node.type,
                "label": node.label,
                "description": node.description or "",
                "position": {"x": node.position.x, "y": node.position.y},
            }
            for node in flowchart.nodes
        ],
        "connections": [
            {
                "id": edge.id,
                "from": edge.source,
                "to": edge.target,
                "relationship": edge.label or "",
            }
            for edge in flowchart.edges
        ],
        "exported_at": utcnow().isoformat(),
    }


def create_empty_flowchart() -> Flowchart:
    return Flowchart(
        title="New Flowchart",
        nodes=[
            FlowchartNode(id="start", type="start", label="Start", position=NodePosition(x=450, y=100)),
            FlowchartNode(id="end", type="end", label="End", position=NodePosition(x=450, y=500)),
        ],
        edges=[],
    )


__all__ = [
    "FlowchartGenerator",
    "MIN_FLOWCHART_MESSAGES",
    "create_empty_flowchart",
    "export_flowchart",
]
