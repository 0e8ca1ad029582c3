"""Tests for the Play Store agent's tool-calling loop, with a scripted chat function."""

import json

import pytest
from pydantic import ValidationError

from playstore_agent.agent.playstore_agent import PlayStoreAgent
from playstore_agent.core.config import Settings
from playstore_agent.llm import router
from playstore_agent.tools.playstore import get_playstore_rating
from playstore_agent.tools.scorer import score_app_rating


class ScriptedChat:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def __call__(self, messages, tools=None):
        self.calls.append({"messages": [dict(m) for m in messages], "tools": tools})
        return self.replies.pop(0)


def tool_call(name, arguments, call_id="call_1"):
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


async def fake_rating(app_name: str) -> dict:
    return {"appId": f"com.{app_name.lower()}", "rating": 4.4}


async def broken_rating(app_name: str) -> dict:
    raise RuntimeError("Failed to fetch app details: No app found with name: Nope")


async def test_plain_answer_without_tools():
    chat = ScriptedChat([{"role": "assistant", "content": "Hello!"}])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": fake_rating}, instructions="be brief")

    response = await agent.generate([{"role": "user", "content": "hi"}])

    assert response.text == "Hello!"
    assert response.tool_results == []
    sent = chat.calls[0]["messages"]
    assert sent[0] == {"role": "system", "content": "be brief"}
    assert sent[1] == {"role": "user", "content": "hi"}
    assert chat.calls[0]["tools"][0]["function"]["name"] == "get-playstore-rating"


async def test_agent_role_maps_to_assistant():
    chat = ScriptedChat([{"role": "assistant", "content": "ok"}])
    agent = PlayStoreAgent(chat=chat, tools={})

    await agent.generate([{"role": "user", "content": "a"}, {"role": "agent", "content": "b"}])

    assert [m["role"] for m in chat.calls[0]["messages"]] == ["system", "user", "assistant"]
    assert chat.calls[0]["tools"] is None


async def test_tool_call_round_trip():
    chat = ScriptedChat([
        {"role": "assistant", "content": None, "tool_calls": [tool_call("get-playstore-rating", '{"app_name": "Spotify"}')]},
        {"role": "assistant", "content": "Spotify is rated 4.4/5.0"},
    ])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": fake_rating})

    response = await agent.generate([{"role": "user", "content": "Rating for Spotify?"}])

    assert response.text == "Spotify is rated 4.4/5.0"
    assert response.tool_results == [{
        "toolCallId": "call_1",
        "toolName": "get-playstore-rating",
        "args": {"app_name": "Spotify"},
        "result": {"appId": "com.spotify", "rating": 4.4},
    }]
    tool_msg = chat.calls[1]["messages"][-1]
    assert tool_msg["role"] == "tool"
    assert tool_msg["tool_call_id"] == "call_1"
    assert json.loads(tool_msg["content"]) == {"appId": "com.spotify", "rating": 4.4}


async def test_tool_errors_are_fed_back():
    chat = ScriptedChat([
        {"role": "assistant", "tool_calls": [tool_call("get-playstore-rating", '{"app_name": "Nope"}')]},
        {"role": "assistant", "content": "I couldn't find that app."},
    ])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": broken_rating})

    response = await agent.generate([{"role": "user", "content": "Nope?"}])

    assert response.text == "I couldn't find that app."
    assert "No app found" in response.tool_results[0]["result"]["error"]


async def test_unknown_tool_and_extra_args():
    chat = ScriptedChat([
        {
            "role": "assistant",
            "tool_calls": [
                tool_call("weather", "{}", "c1"),
                tool_call("get-playstore-rating", '```json\n{"app_name": "Deezer", "country": "fr"}\n```', "c2"),
            ],
        },
        {"role": "assistant", "content": "done"},
    ])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": fake_rating})

    response = await agent.generate([{"role": "user", "content": "x"}])

    assert "Unknown tool: weather" in response.tool_results[0]["result"]["error"]
    assert response.tool_results[1]["args"] == {"app_name": "Deezer", "country": "fr"}
    assert response.tool_results[1]["result"] == {"appId": "com.deezer", "rating": 4.4}


async def test_tool_rounds_are_bounded():
    looping = {"role": "assistant", "content": "", "tool_calls": [tool_call("get-playstore-rating", '{"app_name": "A"}')]}
    chat = ScriptedChat([looping, looping, {"role": "assistant", "content": "final"}])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": fake_rating}, max_tool_rounds=2)

    response = await agent.generate([{"role": "user", "content": "A?"}])

    assert response.text == "final"
    assert len(response.tool_results) == 2
    assert [c["tools"] is None for c in chat.calls] == [False, False, True]


async def test_chat_errors_propagate():
    async def failing_chat(messages, tools=None):
        raise router.LLMError("Groq error 401: unauthorized")

    agent = PlayStoreAgent(chat=failing_chat, tools={})

    with pytest.raises(router.LLMError):
        await agent.generate([{"role": "user", "content": "hi"}])


async def test_mock_provider(monkeypatch):
    monkeypatch.setattr(router.settings, "LLM_PROVIDER", "mock")

    reply = await router.chat([{"role": "system", "content": "x"}, {"role": "user", "content": "Spotify?"}])

    assert reply == {"role": "assistant", "content": "Mock agent received: Spotify?"}


async def test_unsupported_provider(monkeypatch):
    monkeypatch.setattr(router.settings, "LLM_PROVIDER", "nope")

    with pytest.raises(router.LLMError, match="Unsupported LLM_PROVIDER"):
        await router.chat([{"role": "user", "content": "hi"}])


def test_default_tools_come_from_the_registry():
    agent = PlayStoreAgent(chat=ScriptedChat([]))

    assert agent.tools == {"get-playstore-rating": get_playstore_rating, "score-app-rating": score_app_rating}


async def test_negative_tool_rounds_still_answer():
    chat = ScriptedChat([{"role": "assistant", "content": "no tools today"}])
    agent = PlayStoreAgent(chat=chat, tools={"get-playstore-rating": fake_rating}, max_tool_rounds=-2)

    response = await agent.generate([{"role": "user", "content": "hi"}])

    assert response.text == "no tools today"
    assert chat.calls[0]["tools"] is None


def test_negative_tool_rounds_rejected_in_settings():
    with pytest.raises(ValidationError):
        Settings(AGENT_MAX_TOOL_ROUNDS=-1)
