"""
Natural-language turn for the chat front end.

One round trip: the model sees the tool catalog as OpenAI function
definitions, may pick one tool, the dispatcher runs it, and a second
completion phrases the answer from the formatted result.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from openai import AsyncAzureOpenAI, OpenAIError

from .context import current_request_id
from .dispatcher import Dispatcher
from .errors import AssistantError
from .models import ChatReply
from .observability import OBSERVABILITY_LOGGER, log_event

DEFAULT_AZURE_OPENAI_API_VERSION = "2024-02-01"

SYSTEM_PROMPT = (
    "You are an assistant that helps users query and manage Azure DevOps. "
    "Use the provided functions to retrieve data, create work items, update work items "
    "(including fields like System.Description, System.Title, etc.), and manage builds/releases. "
    "When the user asks to create a work item, call the create_work_item function with "
    "workItemType and title. The project is already configured, so you do not need to ask for it. "
    "If the user mentions a project name, assume it matches the default project. "
    "When the user asks to list work items in a project, use the query_work_items function "
    "with a WIQL that selects all work items from that project (e.g., SELECT [System.Id] "
    "FROM WorkItems WHERE [System.TeamProject] = 'terraform-modules'). "
    "If the user asks something that cannot be answered with the available tools, "
    "respond politely.\n\n"
    "Important mapping for update_work_item: When the user asks to update a field like "
    '"description", map it to System.Description in the fields object. Do NOT put the new '
    "value in the comment parameter. The comment parameter is only for adding a comment to "
    "the work item history, not for updating fields. If the user does not explicitly ask to "
    "add a comment, leave the comment parameter empty."
)


def parse_tool_arguments(raw: Any) -> Dict[str, Any]:
    """Tool-call arguments arrive as a JSON string; anything unusable reads as {}."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class ChatAssistant:
    def __init__(
        self,
        llm: Any,
        dispatcher: Dispatcher,
        *,
        model: str,
        system_prompt: str = SYSTEM_PROMPT,
        logger: Optional[logging.Logger] = None,
    ):
        self.llm = llm
        self.dispatcher = dispatcher
        self.model = model
        self.system_prompt = system_prompt
        self.log = logger or logging.getLogger(OBSERVABILITY_LOGGER)

    @classmethod
    def from_env(cls, dispatcher: Dispatcher) -> Optional["ChatAssistant"]:
        """Build from AZURE_OPENAI_* variables; None when they are not all set."""
        api_key = os.getenv("AZURE_OPENAI_API_KEY", "").strip()
        endpoint = os.getenv("AZURE_OPENAI_ENDPOINT", "").strip()
        deployment = os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "").strip()
        if not (api_key and endpoint and deployment):
            return None
        api_version = (
            os.getenv("AZURE_OPENAI_API_VERSION", "").strip()
            or DEFAULT_AZURE_OPENAI_API_VERSION
        )
        llm = AsyncAzureOpenAI(
            api_key=api_key, azure_endpoint=endpoint, api_version=api_version
        )
        return cls(llm, dispatcher, model=deployment)

    def tool_definitions(self) -> List[Dict[str, Any]]:
        return [d.to_openai_tool() for d in self.dispatcher.descriptors()]

    async def _complete(self, messages: List[Dict[str, Any]], **kwargs: Any) -> Any:
        try:
            response = await self.llm.chat.completions.create(
                model=self.model, messages=messages, **kwargs
            )
        except OpenAIError as exc:
            raise AssistantError(f"Language model request failed: {exc}") from exc
        if not getattr(response, "choices", None):
            raise AssistantError("Language model returned no choices")
        return response.choices[0].message

    async def respond(self, message: str) -> ChatReply:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": message},
        ]
        first = await self._complete(
            messages, tools=self.tool_definitions(), tool_choice="auto"
        )

        tool_calls = getattr(first, "tool_calls", None) or []
        if not tool_calls:
            return ChatReply(result=first.content)

        # Only the first tool call of a turn is executed
        call = tool_calls[0]
        name = call.function.name
        arguments = parse_tool_arguments(call.function.arguments)
        outcome = await self.dispatcher.run(name, arguments)

        messages.append(
            {
                "role": "assistant",
                "content": first.content,
                "tool_calls": [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {
                            "name": name,
                            "arguments": call.function.arguments or "{}",
                        },
                    }
                ],
            }
        )
        messages.append(
            {"role": "tool", "tool_call_id": call.id, "content": outcome.text}
        )
        final = await self._complete(messages)

        log_event(
            "chat_turn",
            self.log,
            request_id=current_request_id(),
            tool_used=name,
            status="error" if outcome.is_error else "ok",
        )
        return ChatReply(result=final.content, tool_used=name, raw_result=outcome.raw)


__all__ = ["ChatAssistant", "SYSTEM_PROMPT", "parse_tool_arguments"]
