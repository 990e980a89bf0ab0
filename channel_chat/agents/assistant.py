from __future__ import annotations

"""Channel Assistant: conversational front for the channel tools.

Sends the conversation to Ollama with the tool declarations attached,
runs whatever tools the model asks for through the dispatcher, and feeds
the results back until the model answers in plain text."""

import json
import logging
from typing import Optional

import requests

from ..models import records_from
from ..prompts.assistant import ASSISTANT_SYSTEM_PROMPT, build_channel_context
from ..tools.declarations import ollama_tools
from ..tools.results import CHART_METRIC_VS_TIME, GENERATED_IMAGE, PLAY_VIDEO

logger = logging.getLogger(__name__)


class ChannelAssistant:
    """Tool-calling chat over a loaded channel document."""

    def __init__(self, dispatcher, ollama_url: str = "http://localhost:11434",
                 model: str = "llama3.2", max_tool_rounds: int = 4):
        self.dispatcher = dispatcher
        self.ollama_url = ollama_url.rstrip("/")
        self.model = model
        self.max_tool_rounds = max_tool_rounds

    def chat(self, message: str, channel=None,
             history: Optional[list[dict]] = None) -> dict:
        """Answer one user message.

        Returns {"response", "tool_calls", "charts", "play_cards",
        "generated_images"} where the last four list what the tools produced.
        """
        records = records_from(channel)
        title = channel.get("channel_title", "") if isinstance(channel, dict) else ""

        messages = [
            {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT},
            {"role": "system", "content": build_channel_context(title, records)},
        ]
        for h in history or []:
            if h.get("role") in ("user", "assistant") and h.get("content"):
                messages.append({"role": h["role"], "content": h["content"]})
        messages.append({"role": "user", "content": message})

        outcome = {
            "response": "",
            "tool_calls": [],
            "charts": [],
            "play_cards": [],
            "generated_images": [],
        }

        for _ in range(self.max_tool_rounds + 1):
            reply = self._call_ollama(messages)
            calls = reply.get("tool_calls") or []
            if not calls:
                outcome["response"] = reply.get("content") or "No response generated."
                return outcome

            messages.append({
                "role": "assistant",
                "content": reply.get("content") or "",
                "tool_calls": calls,
            })
            for call in calls:
                function = call.get("function") or {}
                name = function.get("name", "")
                args = self._parse_arguments(function.get("arguments"))
                result = self.dispatcher.dispatch(name, args, channel)
                wire = result.to_dict()
                logger.info(f"Tool {name}({args}) -> {'ok' if result.ok else wire['error']}")

                outcome["tool_calls"].append({"name": name, "args": args, "result": wire})
                self._collect(outcome, result, wire)
                messages.append({"role": "tool", "content": self._summarise(result, wire)})

        outcome["response"] = (
            "I ran out of tool attempts before reaching an answer. "
            "Try asking a narrower question."
        )
        return outcome

    def _call_ollama(self, messages: list[dict]) -> dict:
        resp = requests.post(
            f"{self.ollama_url}/api/chat",
            json={
                "model": self.model,
                "messages": messages,
                "tools": ollama_tools(),
                "stream": False,
                "options": {"temperature": 0.3},
            },
            timeout=300,
        )
        resp.raise_for_status()
        return resp.json().get("message", {})

    @staticmethod
    def _parse_arguments(arguments) -> dict:
        if isinstance(arguments, dict):
            return arguments
        if isinstance(arguments, str):
            try:
                parsed = json.loads(arguments)
            except json.JSONDecodeError:
                return {}
            return parsed if isinstance(parsed, dict) else {}
        return {}

    @staticmethod
    def _collect(outcome: dict, result, wire: dict):
        kind = getattr(result, "kind", None)
        if kind == CHART_METRIC_VS_TIME:
            outcome["charts"].append(wire)
        elif kind == PLAY_VIDEO:
            outcome["play_cards"].append(wire)
        elif kind == GENERATED_IMAGE:
            outcome["generated_images"].append({
                "imageBase64": wire.get("imageBase64"),
                "mimeType": wire.get("mimeType", "image/png"),
            })

    @staticmethod
    def _summarise(result, wire: dict) -> str:
        """What the model gets to read back. Image bytes are not worth its context."""
        if getattr(result, "kind", None) == GENERATED_IMAGE:
            return json.dumps({"generated_image": True, "text": wire.get("text")})
        return json.dumps(wire)
