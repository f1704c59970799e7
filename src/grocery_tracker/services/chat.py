"""Chat-driven purchase entry."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from grocery_tracker.domain.chat import (
    ChatMessage,
    ModelMessage,
    PendingPurchase,
    SystemMessage,
    UserMessage,
)
from grocery_tracker.domain.parsing import ParsedPurchase
from grocery_tracker.domain.purchases import IntakeResult, PurchaseDraft
from grocery_tracker.services.assistant import AssistantService
from grocery_tracker.services.purchases import PurchaseService

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hi! I can help you track expenses. Just tell me what you bought.\n\n"
    'Try: "Bought 5lbs of apples at Walmart for $7"'
)
SAVED_TEXT = "Saved!"
DISCARDED_TEXT = "Discarded."
ERROR_TEXT = (
    "Sorry, I had trouble processing that. Please check your internet connection."
)


class ChatMessageNotFoundError(LookupError):
    """Raised when a chat message id is not in the session."""


class NoPendingPurchaseError(ValueError):
    """Raised when confirming a message that proposes no purchase."""


@dataclass
class ChatSession:
    """Messages exchanged with one user since sign-in."""

    messages: list[ChatMessage] = field(default_factory=list)

    def find(self, message_id: str) -> ChatMessage | None:
        """Return the message with the given id, if present."""
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    def swap(self, message: ChatMessage) -> None:
        """Replace the message that shares ``message.id``."""
        self.messages = [
            message if existing.id == message.id else existing
            for existing in self.messages
        ]


@dataclass
class ChatService:
    """Routes chat text to purchase extraction or a conversational reply."""

    assistant: AssistantService
    purchase_service: PurchaseService
    clock: Callable[[], float] = time.time
    _sessions: dict[str, ChatSession] = field(default_factory=dict)

    def session(self, user_id: str) -> ChatSession:
        """Return the user's chat session, starting one with a welcome note."""
        existing = self._sessions.get(user_id)
        if existing is not None:
            return existing
        session = ChatSession(
            messages=[
                SystemMessage(
                    id="welcome", content=WELCOME_TEXT, timestamp=self.clock()
                )
            ]
        )
        self._sessions[user_id] = session
        return session

    async def send(self, user_id: str, text: str) -> list[ChatMessage]:
        """Handle user text and return the messages it added to the session."""
        content = text.strip()
        if not content:
            return []
        session = self.session(user_id)
        history = list(session.messages)
        user_message = UserMessage(
            id=_message_id(), content=content, timestamp=self.clock()
        )
        session.messages.append(user_message)
        try:
            parsed = await self.assistant.parse(content)
            if parsed is not None:
                answer = ModelMessage(
                    id=_message_id(),
                    content=_confirmation_text(parsed),
                    timestamp=self.clock(),
                    pending_purchase=_to_pending(parsed),
                )
            else:
                reply = await self.assistant.reply(history, content)
                answer = ModelMessage(
                    id=_message_id(), content=reply, timestamp=self.clock()
                )
        except Exception:
            logger.exception(
                "Chat message handling failed", extra={"user_id": user_id}
            )
            answer = ModelMessage(
                id=_message_id(), content=ERROR_TEXT, timestamp=self.clock()
            )
        session.messages.append(answer)
        return [user_message, answer]

    def confirm(self, user_id: str, message_id: str) -> IntakeResult:
        """Record the purchase proposed by a model message."""
        session = self.session(user_id)
        message = _pending_message(session, message_id)
        pending = message.pending_purchase
        result = self.purchase_service.record_purchase(
            user_id,
            PurchaseDraft(
                item_name=pending.item_name,
                store_name=pending.store_name,
                price=pending.price,
                quantity=pending.quantity,
                unit=pending.unit,
                date=pending.date,
            ),
        )
        session.swap(
            ModelMessage(
                id=message.id, content=SAVED_TEXT, timestamp=message.timestamp
            )
        )
        return result

    def dismiss(self, user_id: str, message_id: str) -> ModelMessage:
        """Reject the purchase proposed by a model message."""
        session = self.session(user_id)
        message = _pending_message(session, message_id)
        dismissed = ModelMessage(
            id=message.id, content=DISCARDED_TEXT, timestamp=message.timestamp
        )
        session.swap(dismissed)
        return dismissed

    def reset(self, user_id: str) -> None:
        """Forget the user's chat session."""
        self._sessions.pop(user_id, None)


def _pending_message(session: ChatSession, message_id: str) -> ModelMessage:
    message = session.find(message_id)
    if message is None:
        raise ChatMessageNotFoundError(message_id)
    if not isinstance(message, ModelMessage) or message.pending_purchase is None:
        raise NoPendingPurchaseError(message_id)
    return message


def _to_pending(parsed: ParsedPurchase) -> PendingPurchase:
    return PendingPurchase(
        item_name=parsed.item_name,
        store_name=parsed.store_name,
        price=parsed.price,
        quantity=parsed.quantity,
        unit=parsed.unit,
        date=parsed.date,
        confidence=parsed.confidence,
    )


def _confirmation_text(parsed: ParsedPurchase) -> str:
    return (
        "I found a purchase!\n"
        f"{parsed.quantity:g} {parsed.unit} of {parsed.item_name} "
        f"from {parsed.store_name} for ${parsed.price:.2f} each.\n\n"
        "Save this?"
    )


def _message_id() -> str:
    return str(uuid4())
