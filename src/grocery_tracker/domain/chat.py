"""Session-only chat messages."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class PendingPurchase:
    """Purchase extracted from chat text, awaiting user confirmation."""

    item_name: str
    store_name: str
    price: float
    quantity: float
    unit: str
    date: str
    confidence: float

    @property
    def total(self) -> float:
        """Return the line total the confirmed purchase will carry."""
        return self.price * self.quantity


@dataclass(frozen=True)
class UserMessage:
    """Text typed by the user."""

    id: str
    content: str
    timestamp: float
    role: Literal["user"] = "user"


@dataclass(frozen=True)
class ModelMessage:
    """Assistant reply, optionally proposing a purchase."""

    id: str
    content: str
    timestamp: float
    pending_purchase: PendingPurchase | None = None
    role: Literal["model"] = "model"


@dataclass(frozen=True)
class SystemMessage:
    """Local notice that is never sent to the model."""

    id: str
    content: str
    timestamp: float
    role: Literal["system"] = "system"


ChatMessage = UserMessage | ModelMessage | SystemMessage
