"""Centralized prompt templates for the quiz and flowchart extraction pipelines."""

from typing import Iterable

from .models import ChatTurn

TRANSCRIPT_CHAR_BUDGET = 6000
QUIZ_QUESTION_COUNT = 5
QUIZ_OPTION_COUNT = 4
FLOWCHART_MESSAGE_LIMIT = 15
FLOWCHART_MESSAGE_CHARS = 500


def format_quiz_transcript(messages: Iterable[ChatTurn]) -> str:
    """Render the conversation as ``Q:``/``A:`` lines, capped to the prompt budget."""

    text = "\n\n".join(
        f"{'Q:' if message.role == 'user' else 'A:'} {message.content}" for message in messages
    )
    return text[:TRANSCRIPT_CHAR_BUDGET]


def format_flowchart_transcript(messages: Iterable[ChatTurn]) -> str:
    """Render the first messages as numbered question/answer blocks, capped to the budget."""

    blocks = []
    for index, message in enumerate(list(messages)[:FLOWCHART_MESSAGE_LIMIT]):
        prefix = "Question" if message.role == "user" else "Answer"
        blocks.append(f"{prefix} {index + 1}:\n{message.content[:FLOWCHART_MESSAGE_CHARS]}")
    return "\n\n---\n\n".join(blocks)[:TRANSCRIPT_CHAR_BUDGET]


class WorkflowPrompts:
    """Centralized prompt templates for the extraction graphs."""

    @staticmethod
    def get_quiz_prompt(conversation_text: str, question_count: int = QUIZ_QUESTION_COUNT) -> str:
        """Ask for a multiple-choice quiz as a single JSON object."""
        return f"""
Based on the following conversation, create a multiple-choice quiz with {question_count} questions to test understanding.

Conversation:
---
{conversation_text}
---

Format the output as a single JSON object with a "questions" array.
Each question must include: "question" (string), "options" (array of {QUIZ_OPTION_COUNT} strings), "answer" (the correct string, copied exactly from "options"), and "explanation" (string).
Return ONLY valid JSON. No markdown or extra text.
"""

    @staticmethod
    def get_flowchart_prompt(conversation_text: str) -> str:
        """Ask for a top-to-bottom learning flowchart as a single JSON object."""
        return f"""You are an expert educational content analyzer and flowchart designer. Your task is to create a visually appealing and educationally effective learning flowchart from a conversation.

CONVERSATION TO ANALYZE:
{conversation_text}

YOUR TASK:
Create a comprehensive learning flowchart that captures the educational journey in this conversation. The flowchart should be:
1. **Hierarchical**: Main topic -> Major concepts -> Sub-concepts -> Details
2. **Logical**: Follow the natural learning progression TOP to BOTTOM
3. **Visual**: Well-spaced nodes with VERTICAL flow (y-axis increases significantly between levels)
4. **Connected**: Clear relationships between concepts (NO backward connections)

CRITICAL LAYOUT RULES:
- **Vertical spacing**: Minimum 120px between vertical levels (y-axis)
- **Horizontal spacing**: Minimum 180px between horizontal nodes (x-axis)
- **Flow direction**: ALWAYS top-to-bottom (increasing y values)
- **Center alignment**: Keep main flow centered around x=450
- **Branch distribution**: Spread parallel concepts horizontally

NODE POSITIONING STRATEGY:
Level 1 (Start):     y: 80
Level 2 (Topics):    y: 220  (+140)
Level 3 (Concepts):  y: 360  (+140)
Level 4 (Details):   y: 500  (+140)
Level 5 (End):       y: 640  (+140)

Horizontal spread: Center +/- 200px for branches

FLOWCHART DESIGN PRINCIPLES:
- Use "start" node for the main topic/question (1 only)
- Use "topic" nodes for major subject areas (2-4 nodes)
- Use "concept" nodes for specific concepts and explanations (5-12 nodes)
- Use "decision" nodes ONLY for actual conditional logic or comparisons (0-2 nodes)
- Use "end" node for conclusions or summary (1 only)
- Keep labels concise (15-30 characters max)
- NO backward edges (from child to parent)

EDGE RULES:
- Direction: ALWAYS from parent to child (top to bottom)
- Labels: Use only when relationship isn't obvious
- Keep labels short: "leads to", "produces", "requires"
- NO circular connections

OUTPUT FORMAT:
Return ONLY a valid JSON object (no markdown, no code blocks, no extra text):

{{
  "title": "Concise title (5-8 words)",
  "description": "Brief overview of what this flowchart covers",
  "nodes": [
    {{
      "id": "node-1",
      "type": "start",
      "label": "Main Topic",
      "description": "Brief explanation",
      "position": {{ "x": 450, "y": 80 }}
    }},
    {{
      "id": "node-2",
      "type": "topic",
      "label": "First Major Concept",
      "position": {{ "x": 300, "y": 220 }}
    }},
    {{
      "id": "node-3",
      "type": "concept",
      "label": "Detail A",
      "position": {{ "x": 300, "y": 360 }}
    }},
    {{
      "id": "node-4",
      "type": "end",
      "label": "Summary",
      "position": {{ "x": 450, "y": 640 }}
    }}
  ],
  "edges": [
    {{ "id": "edge-1", "source": "node-1", "target": "node-2", "label": "explores" }},
    {{ "id": "edge-2", "source": "node-2", "target": "node-3", "label": "details" }},
    {{ "id": "edge-3", "source": "node-3", "target": "node-4" }}
  ]
}}

QUALITY CHECKLIST:
- All nodes have unique IDs
- All edges reference valid source/target node IDs
- Labels are concise (15-30 chars)
- Flow is strictly top-to-bottom (no edges from lower y to higher y)
- 8-15 nodes total
- Valid JSON syntax

Generate the flowchart now:"""


# Convenience function to get all prompts
def get_workflow_prompts() -> WorkflowPrompts:
    """Get the workflow prompts instance."""
    return WorkflowPrompts()
