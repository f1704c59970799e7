"""Language-model assistant for purchase parsing, chat and insights."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from grocery_tracker.domain.chat import ChatMessage, ModelMessage, UserMessage
from grocery_tracker.domain.parsing import ParsedPurchase, PurchaseExtraction
from grocery_tracker.domain.purchases import Purchase

logger = logging.getLogger(__name__)

PARSED_CONFIDENCE = 0.9
INSIGHTS_SAMPLE_SIZE = 50

REPLY_FALLBACK = (
    "I'm having trouble connecting to the server right now. Please try again."
)
REPLY_EMPTY = "I'm not sure I understood that."
INSIGHTS_FALLBACK = (
    "I'm having trouble analyzing your data right now. Please try again later."
)
INSIGHTS_EMPTY = "No insights could be generated."

_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}
_NULLABLE_NUMBER = {"anyOf": [{"type": "number"}, {"type": "null"}]}

PURCHASE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "is_purchase": {"type": "boolean"},
        "data": {
            "anyOf": [
                {
                    "type": "object",
                    "properties": {
                        "item_name": _NULLABLE_STRING,
                        "store_name": _NULLABLE_STRING,
                        "price": _NULLABLE_NUMBER,
                        "quantity": _NULLABLE_NUMBER,
                        "unit": _NULLABLE_STRING,
                        "date": _NULLABLE_STRING,
                    },
                    "required": [
                        "item_name",
                        "store_name",
                        "price",
                        "quantity",
                        "unit",
                        "date",
                    ],
                    "additionalProperties": False,
                },
                {"type": "null"},
            ]
        },
        "response_message": {"type": "string"},
    },
    "required": ["is_purchase", "data", "response_message"],
    "additionalProperties": False,
}

CHAT_INSTRUCTIONS = (
    "You are a helpful assistant for a grocery expense tracker. Help users with "
    "budgeting advice, cooking tips based on ingredients, or general questions. "
    "Keep answers concise."
)

INSIGHTS_INSTRUCTIONS = (
    "You are a helpful financial assistant. Analyze the grocery transaction "
    "history provided. Find patterns in spending, expensive items, or store "
    "choices. Provide 1 or 2 specific, friendly, and actionable tips to help the "
    "user save money, such as 'You buy X frequently at high prices' or "
    "'Store A is cheaper for Y'. Do not use markdown formatting; use plain text "
    "or unicode bullets. Keep it under 80 words."
)


class AssistantClient(Protocol):
    """Interface for the hosted language model."""

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        input_text: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Return structured output matching the JSON schema."""

    async def complete_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        messages: list[dict[str, str]],
    ) -> str:
        """Return a plain-text completion for a conversation."""


@dataclass
class AssistantService:
    """Service that prepares prompts and degrades on model failures."""

    client: AssistantClient
    model: str
    insights_model: str
    reasoning_effort: str | None
    store: bool
    today: Callable[[], date] = date.today

    async def parse(self, text: str) -> ParsedPurchase | None:
        """Extract a purchase from free text, or None when it is not one."""
        try:
            raw = await self.client.complete_json(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=_parse_instructions(self.today()),
                input_text=text,
                schema=PURCHASE_SCHEMA,
                schema_name="purchase_extraction",
            )
            extraction = PurchaseExtraction.model_validate(raw)
            if not extraction.is_purchase or not extraction.data:
                return None
            fields = {
                key: value
                for key, value in extraction.data.items()
                if value is not None
            }
            return ParsedPurchase.model_validate(
                {**fields, "confidence": PARSED_CONFIDENCE},
                context={"today": self.today()},
            )
        except Exception:
            logger.exception("Purchase parsing failed")
            return None

    async def reply(self, history: list[ChatMessage], message: str) -> str:
        """Answer a chat message given the prior conversation."""
        messages = _to_model_messages(history)
        messages.append({"role": "user", "content": message})
        try:
            text = await self.client.complete_text(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=CHAT_INSTRUCTIONS,
                messages=messages,
            )
        except Exception:
            logger.exception("Chat reply failed")
            return REPLY_FALLBACK
        return text.strip() or REPLY_EMPTY

    async def insights(self, purchases: list[Purchase]) -> str:
        """Return short money-saving tips for a list of purchases."""
        summary = [
            {
                "item": purchase.item_name,
                "price": purchase.price,
                "store": purchase.store_name,
                "date": purchase.date,
                "total": purchase.total,
            }
            for purchase in purchases[:INSIGHTS_SAMPLE_SIZE]
        ]
        try:
            text = await self.client.complete_text(
                model=self.insights_model,
                reasoning_effort=None,
                store=self.store,
                instructions=INSIGHTS_INSTRUCTIONS,
                messages=[{"role": "user", "content": json.dumps(summary)}],
            )
        except Exception:
            logger.exception("Insight generation failed")
            return INSIGHTS_FALLBACK
        return text.strip() or INSIGHTS_EMPTY


def _parse_instructions(today: date) -> str:
    return (
        "You extract structured shopping data from natural language input.\n"
        f"Current date: {today.isoformat()}.\n"
        "If the input describes a purchase, set is_purchase to true and fill:\n"
        "- item_name: the product name.\n"
        "- store_name: the shop; use 'Unknown Store' if not specified.\n"
        "- price: the unit price; derive it from the total if needed.\n"
        "- quantity: the amount bought; default 1.\n"
        "- unit: the unit of measure (kg, lbs, pack, box); default 'unit'.\n"
        "- date: purchase date as YYYY-MM-DD; resolve 'today', 'yesterday' "
        "and similar relative to the current date.\n"
        "If the input is not a purchase, set is_purchase to false and data to "
        "null. Always put a short friendly confirmation or clarification in "
        "response_message."
    )


def _to_model_messages(history: list[ChatMessage]) -> list[dict[str, str]]:
    """Map chat history to model roles, leaving out local system notices."""
    messages = []
    for entry in history:
        if isinstance(entry, UserMessage):
            messages.append({"role": "user", "content": entry.content})
        elif isinstance(entry, ModelMessage):
            messages.append({"role": "assistant", "content": entry.content})
    return messages
