"""Custom exceptions for Deploybot."""

from typing import Any


class DeploybotError(Exception):
    """Base exception for Deploybot."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigNotFoundError(DeploybotError):
    """The deployment configuration file does not exist at the ref."""

    def __init__(self, path: str, ref: str):
        super().__init__(
            f"Deployment configuration not found: {path}@{ref}",
            {"path": path, "ref": ref},
        )
        self.path = path
        self.ref = ref


class ConfigInvalidError(DeploybotError):
    """The deployment configuration failed schema validation.

    Only the first offending property is reported.
    """

    def __init__(self, property: str, message: str):
        super().__init__(f"{property} {message}", {"property": property})
        self.property = property
        self.reason = message


class TargetNotFoundError(DeploybotError):
    """Target does not exist in the resolved configuration."""

    def __init__(self, target: str):
        super().__init__(
            f'Deployment target "{target}" does not exist',
            {"target": target},
        )
        self.target = target


class TargetHasNoDeploymentsError(DeploybotError):
    """Target exists but declares no deployments."""

    def __init__(self, target: str):
        super().__init__(
            f'Deployment target "{target}" has no deployments',
            {"target": target},
        )
        self.target = target


class ProviderError(DeploybotError):
    """The remote deployment provider rejected a request."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ProviderRequestFailedError(DeploybotError):
    """Creating a deployment failed; carries the attempted request body."""

    def __init__(self, message: str, body: dict[str, Any]):
        super().__init__(message, {"body": body})
        self.body = body


class PermissionDeniedError(DeploybotError):
    """User lacks write access. Never surfaced to the user."""

    def __init__(self, user: str, repo: str):
        super().__init__(
            f"User {user} cannot write to {repo}",
            {"user": user, "repo": repo},
        )


class MalformedCommandError(DeploybotError):
    """Comment did not match the command grammar. Ignored silently."""

    pass


class WebhookSignatureError(DeploybotError):
    """Webhook payload signature did not verify."""

    pass


class TemplateRenderError(DeploybotError):
    """A configuration template could not be rendered."""

    def __init__(self, template: str, message: str):
        super().__init__(
            f"Failed to render template {template!r}: {message}",
            {"template": template},
        )


class WebhookPayloadError(DeploybotError):
    """Webhook payload is missing fields the event requires."""

    def __init__(self, event: str, message: str):
        super().__init__(f"Invalid {event} payload: {message}", {"event": event})
