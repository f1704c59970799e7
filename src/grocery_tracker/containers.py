"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from grocery_tracker.adapters.openai_assistant_client import OpenAIAssistantClient
from grocery_tracker.adapters.supabase_auth_client import SupabaseAuthClient
from grocery_tracker.adapters.supabase_purchase_repository import (
    SupabasePurchaseRepository,
)
from grocery_tracker.config import Settings, parse_allowed_emails
from grocery_tracker.services.assistant import AssistantService
from grocery_tracker.services.auth import AuthService
from grocery_tracker.services.chat import ChatService
from grocery_tracker.services.purchases import PurchaseService
from grocery_tracker.services.reports import ReportService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    purchase_service: PurchaseService
    assistant_service: AssistantService
    chat_service: ChatService
    report_service: ReportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_service = AuthService(
        client=SupabaseAuthClient(supabase_client),
        allowed_emails=parse_allowed_emails(resolved_settings.allowed_user_emails),
    )
    purchase_service = PurchaseService(SupabasePurchaseRepository(supabase_client))
    openai_client = OpenAIAssistantClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    assistant_service = AssistantService(
        client=openai_client,
        model=resolved_settings.openai_model,
        insights_model=resolved_settings.openai_insights_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    chat_service = ChatService(
        assistant=assistant_service, purchase_service=purchase_service
    )
    report_service = ReportService(assistant=assistant_service)

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        purchase_service=purchase_service,
        assistant_service=assistant_service,
        chat_service=chat_service,
        report_service=report_service,
        close_resources=close_resources,
    )
