"""Tests for the lenient flowchart pipeline plus export and empty templates."""

import json

import pytest

from ai_tutor.services.errors import ConfigurationError, ProviderError
from ai_tutor.services.flowchart_generator import (
    FlowchartGenerator,
    create_empty_flowchart,
    export_flowchart,
)
from ai_tutor.services.models import ChatTurn, Conversation

FALLBACK_DESCRIPTION = "Visual representation of the learning conversation"

GOOD_RESPONSE = json.dumps(
    {
        "title": "How Photosynthesis Works",
        "description": "From light to sugar",
        "nodes": [
            {"id": "n1", "type": "start", "label": "Photosynthesis", "position": {"x": 450, "y": 80}},
            {"id": "n2", "type": "topic", "label": "Light reactions", "position": {"x": 300, "y": 220}},
            {"id": "n3", "type": "decision", "label": "Enough light?", "position": {"x": 600, "y": 220}},
            {"id": "n4", "type": "end", "label": "Glucose", "position": {"x": 450, "y": 360}},
        ],
        "edges": [
            {"id": "e1", "source": "n1", "target": "n2", "label": "starts with"},
            {"id": "e2", "source": "n1", "target": "n3"},
            {"id": "e3", "source": "n2", "target": "n4"},
        ],
    }
)


@pytest.mark.asyncio
async def test_valid_response_is_used(stub_llm, settings, conversation) -> None:
    llm = stub_llm(GOOD_RESPONSE)

    flowchart = await FlowchartGenerator(llm_client=llm).generate(conversation, settings)

    assert flowchart.title == "How Photosynthesis Works"
    assert [n.id for n in flowchart.nodes] == ["n1", "n2", "n3", "n4"]
    assert [e.id for e in flowchart.edges] == ["e1", "e2", "e3"]
    assert flowchart.source_conversation_id == "conv-1"
    assert "Question 1:\nWhat is photosynthesis?" in llm.prompts[0]


@pytest.mark.asyncio
async def test_flowchart_model_overrides_selected_model(stub_llm, settings, conversation) -> None:
    llm = stub_llm(GOOD_RESPONSE)
    flowchart_settings = settings.model_copy(update={"flowchart_model": "mistral-codestral"})

    await FlowchartGenerator(llm_client=llm).generate(conversation, flowchart_settings)

    assert llm.provider_ids == ["mistral-codestral"]


@pytest.mark.asyncio
async def test_prose_and_fences_around_json_are_removed(stub_llm, settings, conversation) -> None:
    llm = stub_llm("Here you go:\n```json\n" + GOOD_RESPONSE + "\n```\nEnjoy!")

    flowchart = await FlowchartGenerator(llm_client=llm).generate(conversation, settings)

    assert flowchart.title == "How Photosynthesis Works"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        "not json at all",
        "",
        json.dumps({"title": "Empty", "nodes": []}),
        json.dumps(["n1", "n2"]),
        '{"nodes": ' + "[" * 100000 + "]" * 100000 + "}",
    ],
)
async def test_unusable_responses_fall_back(stub_llm, settings, conversation, response) -> None:
    flowchart = await FlowchartGenerator(llm_client=stub_llm(response)).generate(conversation, settings)

    assert flowchart.description == FALLBACK_DESCRIPTION
    assert flowchart.title == "Photosynthesis basics"
    assert flowchart.nodes[0].type == "start"
    assert flowchart.nodes[-1].type == "end"


@pytest.mark.asyncio
async def test_oversized_coordinates_use_default_position(stub_llm, settings, conversation) -> None:
    huge = "1" + "0" * 400
    response = (
        '{"nodes": [{"id": "a", "type": "start", "position": {"x": ' + huge + ', "y": 80}},'
        ' {"id": "b", "type": "end"}]}'
    )

    flowchart = await FlowchartGenerator(llm_client=stub_llm(response)).generate(conversation, settings)

    assert flowchart.description != FALLBACK_DESCRIPTION
    assert [n.id for n in flowchart.nodes] == ["a", "b"]
    assert flowchart.nodes[0].position.x == 450


@pytest.mark.asyncio
async def test_unexpected_validation_error_falls_back(stub_llm, settings, conversation, monkeypatch) -> None:
    def broken_validator(*args, **kwargs):
        raise RuntimeError("unexpected shape")

    monkeypatch.setattr("ai_tutor.services.flowchart_generator.validate_flowchart", broken_validator)

    flowchart = await FlowchartGenerator(llm_client=stub_llm(GOOD_RESPONSE)).generate(conversation, settings)

    assert flowchart.description == FALLBACK_DESCRIPTION


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ProviderError("zhipu", 429, "rate limited"), ConfigurationError("ZhipuAI API key not set")],
)
async def test_request_failures_fall_back(stub_llm, settings, conversation, error) -> None:
    flowchart = await FlowchartGenerator(llm_client=stub_llm(error=error)).generate(conversation, settings)

    assert flowchart.description == FALLBACK_DESCRIPTION
    assert len(flowchart.nodes) == len(conversation.messages) + 2


@pytest.mark.asyncio
async def test_single_message_conversation_is_rejected(stub_llm, settings) -> None:
    llm = stub_llm(GOOD_RESPONSE)
    single = Conversation(messages=[ChatTurn(role="user", content="Hi")])

    with pytest.raises(ValueError, match="at least 2 messages"):
        await FlowchartGenerator(llm_client=llm).generate(single, settings)

    assert llm.prompts == []


@pytest.mark.asyncio
async def test_export_format(stub_llm, settings, conversation) -> None:
    flowchart = await FlowchartGenerator(llm_client=stub_llm(GOOD_RESPONSE)).generate(conversation, settings)

    exported = export_flowchart(flowchart)

    assert exported["title"] == "How Photosynthesis Works"
    assert exported["description"] == "From light to sugar"
    assert exported["stats"] == {
        "total_nodes": 4,
        "total_connections": 3,
        "node_types": {"start": 1, "topic": 1, "decision": 1, "end": 1},
    }
    assert exported["nodes"][1] == {
        "id": "n2",
        "type": "topic",
        "label": "Light reactions",
        "description": "",
        "position": {"x": 300, "y": 220},
    }
    assert exported["connections"][0] == {
        "id": "e1",
        "from": "n1",
        "to": "n2",
        "relationship": "starts with",
    }
    assert exported["connections"][1]["relationship"] == ""
    assert "T" in exported["exported_at"]


def test_empty_flowchart_template() -> None:
    flowchart = create_empty_flowchart()

    assert flowchart.title == "New Flowchart"
    assert [(n.type, n.position.x, n.position.y) for n in flowchart.nodes] == [
        ("start", 450, 100),
        ("end", 450, 500),
    ]
    assert flowchart.edges == []
