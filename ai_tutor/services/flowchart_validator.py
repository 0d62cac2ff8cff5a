"""Validation, repair and fallback construction for AI-generated flowcharts."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .models import (
    NODE_TYPES,
    Conversation,
    Flowchart,
    FlowchartEdge,
    FlowchartNode,
    NodePosition,
    generate_id,
)

logger = logging.getLogger(__name__)

MAX_NODE_LABEL = 40
MAX_NODE_DESCRIPTION = 160
MAX_EDGE_LABEL = 30
MAX_TITLE = 100
MAX_DESCRIPTION = 200

CENTER_X = 450
START_Y = 80
LEVEL_SPACING = 140
FALLBACK_FIRST_Y = 220
FALLBACK_X_OFFSET = 150
FALLBACK_MESSAGE_LIMIT = 8


@dataclass(frozen=True)
class CanvasBounds:
    min_x: float = 100
    max_x: float = 800
    min_y: float = 50
    max_y: float = 1400

    def clamp(self, x: float, y: float) -> NodePosition:
        return NodePosition(
            x=max(self.min_x, min(self.max_x, x)),
            y=max(self.min_y, min(self.max_y, y)),
        )


DEFAULT_BOUNDS = CanvasBounds()


def main_topic(conversation: Conversation) -> str:
    """Derive a display topic from the conversation title or its first message."""

    if conversation.title.strip():
        return conversation.title.strip()
    if conversation.messages:
        return conversation.messages[0].content[:50] + "..."
    return "Learning Session"


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _identifier(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _text(value)


def _draft_nodes(raw_nodes: List[Any]) -> List[Dict[str, Any]]:
    drafts: List[Dict[str, Any]] = []
    seen: set = set()
    for raw in raw_nodes:
        if not isinstance(raw, dict):
            continue
        index = len(drafts)
        node_id = _identifier(raw.get("id"))
        if not node_id or node_id in seen:
            node_id = generate_id()
        seen.add(node_id)

        position = raw.get("position") if isinstance(raw.get("position"), dict) else {}
        description = _text(raw.get("description"))
        drafts.append(
            {
                "id": node_id,
                "type": raw.get("type") if raw.get("type") in NODE_TYPES else "concept",
                "label": (_text(raw.get("label")) or f"Node {index + 1}")[:MAX_NODE_LABEL],
                "description": description[:MAX_NODE_DESCRIPTION] if description else None,
                "x": _number(position.get("x"), CENTER_X),
                "y": _number(position.get("y"), START_Y + index * LEVEL_SPACING),
            }
        )
    return drafts


def _ensure_terminals(drafts: List[Dict[str, Any]]) -> None:
    if not any(draft["type"] == "start" for draft in drafts):
        drafts[0]["type"] = "start"

    if any(draft["type"] == "end" for draft in drafts):
        return
    last = drafts[-1]
    start_count = sum(1 for draft in drafts if draft["type"] == "start")
    if len(drafts) > 1 and not (last["type"] == "start" and start_count == 1):
        last["type"] = "end"
        return
    # The only candidate is the sole start node; append a summary node instead.
    drafts.append(
        {
            "id": generate_id(),
            "type": "end",
            "label": "Summary",
            "description": None,
            "x": CENTER_X,
            "y": max(draft["y"] for draft in drafts) + LEVEL_SPACING,
        }
    )


def _filter_edges(
    raw_edges: List[Any],
    nodes: List[FlowchartNode],
    *,
    drop_backward_edges: bool,
) -> List[FlowchartEdge]:
    node_y = {node.id: node.position.y for node in nodes}
    edges: List[FlowchartEdge] = []
    edge_ids: set = set()
    for raw in raw_edges:
        if not isinstance(raw, dict):
            continue
        source = _identifier(raw.get("source"))
        target = _identifier(raw.get("target"))
        if not source or not target or source not in node_y or target not in node_y:
            continue
        if source == target:
            continue
        if drop_backward_edges and node_y[target] < node_y[source]:
            continue

        edge_id = _identifier(raw.get("id"))
        if not edge_id or edge_id in edge_ids:
            edge_id = generate_id()
        edge_ids.add(edge_id)
        label = _text(raw.get("label"))
        edges.append(
            FlowchartEdge(
                id=edge_id,
                source=source,
                target=target,
                label=label[:MAX_EDGE_LABEL] if label else None,
            )
        )
    return edges


def validate_flowchart(
    data: Any,
    conversation: Conversation,
    *,
    bounds: CanvasBounds = DEFAULT_BOUNDS,
    drop_backward_edges: bool = True,
) -> Optional[Flowchart]:
    """Repair a parsed flowchart payload.

    Returns None when the payload has no usable nodes, in which case the caller
    is expected to build the fallback graph instead.
    """

    if not isinstance(data, dict):
        return None
    raw_nodes = data.get("nodes")
    if not isinstance(raw_nodes, list):
        return None
    drafts = _draft_nodes(raw_nodes)
    if not drafts:
        return None

    raw_edges = data.get("edges")
    if not isinstance(raw_edges, list):
        raw_edges = []

    _ensure_terminals(drafts)
    nodes = [
        FlowchartNode(
            id=draft["id"],
            type=draft["type"],
            label=draft["label"],
            description=draft["description"],
            position=bounds.clamp(draft["x"], draft["y"]),
        )
        for draft in drafts
    ]

    edges = _filter_edges(raw_edges, nodes, drop_backward_edges=drop_backward_edges)
    dropped = len(raw_edges) - len(edges)
    if dropped:
        logger.info("Dropped %d invalid flowchart edges", dropped)

    # Lossy repair: a chain in node order, not a reconstruction of the intended edges.
    if not edges and len(nodes) > 1:
        edges = [
            FlowchartEdge(id=generate_id(), source=current.id, target=following.id)
            for current, following in zip(nodes, nodes[1:])
        ]

    description = _text(data.get("description"))
    return Flowchart(
        title=(_text(data.get("title")) or main_topic(conversation))[:MAX_TITLE],
        description=description[:MAX_DESCRIPTION] if description else None,
        nodes=nodes,
        edges=edges,
        source_conversation_id=conversation.id,
    )


def create_fallback_flowchart(
    conversation: Conversation,
    *,
    bounds: CanvasBounds = DEFAULT_BOUNDS,
) -> Flowchart:
    """Build a linear chain straight from the conversation turns."""

    topic = main_topic(conversation)
    start_id = generate_id()
    nodes = [
        FlowchartNode(
            id=start_id,
            type="start",
            label=topic[:30],
            position=bounds.clamp(CENTER_X, START_Y),
        )
    ]
    edges: List[FlowchartEdge] = []

    previous_id = start_id
    current_y = FALLBACK_FIRST_Y
    for index, message in enumerate(conversation.messages[:FALLBACK_MESSAGE_LIMIT]):
        is_user = message.role == "user"
        offset = -FALLBACK_X_OFFSET if index % 2 == 0 else FALLBACK_X_OFFSET
        label = message.content[:25] + ("..." if len(message.content) > 25 else "")
        node_id = generate_id()
        nodes.append(
            FlowchartNode(
                id=node_id,
                type="topic" if is_user else "concept",
                label=label,
                position=bounds.clamp(CENTER_X + offset, current_y),
            )
        )
        edges.append(
            FlowchartEdge(
                id=generate_id(),
                source=previous_id,
                target=node_id,
                label="asks" if is_user else "explains",
            )
        )
        previous_id = node_id
        current_y += LEVEL_SPACING

    end_id = generate_id()
    nodes.append(
        FlowchartNode(
            id=end_id,
            type="end",
            label="Summary",
            position=bounds.clamp(CENTER_X, current_y + 50),
        )
    )
    edges.append(FlowchartEdge(id=generate_id(), source=previous_id, target=end_id))

    return Flowchart(
        title=topic[:50] or "Learning Flowchart",
        description="Visual representation of the learning conversation",
        nodes=nodes,
        edges=edges,
        source_conversation_id=conversation.id,
    )


__all__ = [
    "CanvasBounds",
    "DEFAULT_BOUNDS",
    "create_fallback_flowchart",
    "main_topic",
    "validate_flowchart",
]
