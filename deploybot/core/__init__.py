"""Core orchestration for Deploybot."""

from deploybot.core.exceptions import (
    ConfigInvalidError,
    ConfigNotFoundError,
    DeploybotError,
    MalformedCommandError,
    PermissionDeniedError,
    ProviderError,
    ProviderRequestFailedError,
    TargetHasNoDeploymentsError,
    TargetNotFoundError,
    TemplateRenderError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from deploybot.core.locks import LockStore
from deploybot.core.templates import TemplateRenderer
from deploybot.core.resolver import ConfigResolver
from deploybot.core.dispatcher import DeploymentDispatcher
from deploybot.core.deps import HandlerDeps
from deploybot.core.events import EventRouter, parse_event

__all__ = [
    "ConfigInvalidError",
    "ConfigNotFoundError",
    "DeploybotError",
    "MalformedCommandError",
    "PermissionDeniedError",
    "ProviderError",
    "ProviderRequestFailedError",
    "TargetHasNoDeploymentsError",
    "TargetNotFoundError",
    "TemplateRenderError",
    "WebhookPayloadError",
    "WebhookSignatureError",
    "LockStore",
    "TemplateRenderer",
    "ConfigResolver",
    "DeploymentDispatcher",
    "HandlerDeps",
    "EventRouter",
    "parse_event",
]
