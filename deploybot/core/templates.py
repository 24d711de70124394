"""Template rendering for deployment configuration values."""

from typing import Any

from jinja2 import TemplateError
from jinja2.sandbox import SandboxedEnvironment

from deploybot.core.exceptions import TemplateRenderError


class TemplateRenderer:
    """Renders jinja2 templates found in deployment configuration.

    Configuration comes from the repository being deployed, so templates
    run in a sandboxed environment.
    """

    def __init__(self) -> None:
        self._env = SandboxedEnvironment(autoescape=False, keep_trailing_newline=True)

    def render(self, template: Any, context: dict[str, Any]) -> Any:
        """Render a template value against ``context``.

        Strings are rendered, dicts and lists are walked recursively and
        everything else is returned unchanged.
        """
        if isinstance(template, str):
            return self._render_string(template, context)
        if isinstance(template, dict):
            return {key: self.render(value, context) for key, value in template.items()}
        if isinstance(template, list):
            return [self.render(item, context) for item in template]
        return template

    def _render_string(self, template: str, context: dict[str, Any]) -> str:
        if "{" not in template:
            return template
        try:
            return self._env.from_string(template).render(**context)
        except TemplateError as e:
            raise TemplateRenderError(template, str(e)) from e
