"""Deployment configuration resolution.

Reads the per-ref deployment configuration file from the repository,
validates it and returns the targets it declares.
"""

import base64
import binascii
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from deploybot.config import settings
from deploybot.core.exceptions import (
    ConfigInvalidError,
    ConfigNotFoundError,
    ProviderError,
)
from deploybot.models.config import Target, Targets
from deploybot.models.deployment import RepoRef
from deploybot.services.provider import DeploymentProvider
from deploybot.utils.logging import get_logger

logger = get_logger(__name__)

_targets_adapter = TypeAdapter(dict[str, Target])


def _property_path(loc: tuple[Any, ...]) -> str:
    """Format a validation error location like ``config.web.deployments[0].task``."""
    path = "config"
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}"
    return path


def parse_targets(document: Any) -> Targets:
    """Validate a decoded configuration document.

    An empty document yields no targets. Targets without deployments are
    accepted here; that is only an error once such a target is deployed.

    Raises:
        ConfigInvalidError: With the first offending property
    """
    if document is None:
        return Targets()

    try:
        targets = _targets_adapter.validate_python(document)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigInvalidError(_property_path(first["loc"]), first["msg"]) from e

    for name, target in targets.items():
        target.name = name
    return Targets(targets)


class ConfigResolver:
    """Fetches and validates deployment configuration for a ref."""

    def __init__(self, provider: DeploymentProvider, path: str | None = None):
        self.provider = provider
        self.path = path or settings.deploy_config_path

    async def resolve(self, repo: RepoRef, ref: str) -> Targets:
        """Resolve the targets configured at ``ref``.

        Raises:
            ConfigNotFoundError: If the configuration file does not exist
            ConfigInvalidError: If the file is not valid configuration
        """
        try:
            content = await self.provider.get_file_contents(repo, ref, self.path)
        except ProviderError as e:
            if e.is_not_found:
                logger.info(
                    "config.not_found",
                    repo=repo.full_name,
                    ref=ref,
                    path=self.path,
                )
                raise ConfigNotFoundError(self.path, ref) from e
            raise

        try:
            text = base64.b64decode(content).decode("utf-8")
            document = yaml.safe_load(text)
        except (binascii.Error, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigInvalidError("config", f"could not be parsed: {e}") from e

        targets = parse_targets(document)
        logger.debug(
            "config.resolved",
            repo=repo.full_name,
            ref=ref,
            targets=targets.names(),
        )
        return targets
