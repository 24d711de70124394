"""GitHub webhook endpoint."""

import hashlib
import hmac
import json
from typing import Annotated, Any

from fastapi import APIRouter, Header, Request, status
from pydantic import BaseModel

from deploybot.api.deps import EventRouterDep, HandlerDepsDep
from deploybot.core.exceptions import WebhookPayloadError, WebhookSignatureError
from deploybot.core.events import parse_event
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class WebhookResponse(BaseModel):
    """Result of handling a webhook delivery."""

    event: str
    delivery: str | None = None
    handled: bool
    outcome: dict[str, Any] | None = None


def verify_signature(secret: str, body: bytes, signature: str | None) -> None:
    """Check an ``X-Hub-Signature-256`` header against the payload.

    Raises:
        WebhookSignatureError: If the signature is missing or wrong
    """
    if not signature or not signature.startswith("sha256="):
        raise WebhookSignatureError("Missing webhook signature")
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    if not hmac.compare_digest(expected, signature[len("sha256=") :]):
        raise WebhookSignatureError("Webhook signature mismatch")


@router.post(
    "/github",
    response_model=WebhookResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Receive a GitHub webhook",
)
async def github_webhook(
    request: Request,
    deps: HandlerDepsDep,
    event_router: EventRouterDep,
    x_github_event: Annotated[str, Header()],
    x_github_delivery: Annotated[str | None, Header()] = None,
    x_hub_signature_256: Annotated[str | None, Header()] = None,
) -> WebhookResponse:
    """Route a webhook delivery to its handler and report the outcome."""
    body = await request.body()

    if deps.settings.verify_signatures:
        verify_signature(deps.settings.webhook_secret, body, x_hub_signature_256)

    try:
        payload = json.loads(body)
    except ValueError:
        raise WebhookPayloadError(x_github_event, "Body is not valid JSON")
    event = parse_event(x_github_event, payload)

    if event is None:
        logger.debug("webhook.ignored", github_event=x_github_event, delivery=x_github_delivery)
        return WebhookResponse(event=x_github_event, delivery=x_github_delivery, handled=False)

    outcome = await event_router.handle(event, deps)
    return WebhookResponse(
        event=event.kind,
        delivery=x_github_delivery,
        handled=True,
        outcome=outcome.model_dump(mode="json"),
    )
