"""
File-based prompt versioning registry.

Prompts live in event_scout/agents/prompts/{name}/:
  manifest.yaml   - active_version + per-version metadata
  v1.yaml         - prompt content (system_prompt + user_prompt, Jinja2 templates)

Usage:
    registry = PromptRegistry()
    system, user = registry.render("event_extraction", variables={"source_name": "Meetup"})
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Template, Undefined

logger = logging.getLogger(__name__)

_PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class SilentUndefined(Undefined):
    """Render missing variables as a visible placeholder instead of failing."""

    def __str__(self) -> str:
        return f"[{self._undefined_name}]"


class PromptRegistry:
    """
    Loads prompt manifests + renders Jinja2 templates.

    Manifests and templates are loaded once and cached.
    """

    def __init__(self, prompts_dir: Path | None = None):
        self._dir = prompts_dir or _PROMPTS_DIR
        self._manifests: dict[str, dict[str, Any]] = {}
        self._templates: dict[str, dict[str, Any]] = {}  # key = "name/version"

    def _load_manifest(self, prompt_name: str) -> dict[str, Any]:
        if prompt_name in self._manifests:
            return self._manifests[prompt_name]

        manifest_path = self._dir / prompt_name / "manifest.yaml"
        if not manifest_path.exists():
            raise FileNotFoundError(f"Prompt manifest not found: {manifest_path}")

        with manifest_path.open(encoding="utf-8") as f:
            manifest = yaml.safe_load(f) or {}

        self._manifests[prompt_name] = manifest
        return manifest

    def _resolve_version(self, prompt_name: str, version: str) -> str:
        """Resolve 'active' to the concrete version string from manifest."""
        if version != "active":
            return version
        manifest = self._load_manifest(prompt_name)
        return manifest.get("active_version", "v1")

    def _load_template(self, prompt_name: str, version: str) -> dict[str, Any]:
        cache_key = f"{prompt_name}/{version}"
        if cache_key in self._templates:
            return self._templates[cache_key]

        template_path = self._dir / prompt_name / f"{version}.yaml"
        if not template_path.exists():
            raise FileNotFoundError(f"Prompt template not found: {template_path}")

        with template_path.open(encoding="utf-8") as f:
            template = yaml.safe_load(f) or {}

        self._templates[cache_key] = template
        return template

    def render(
        self,
        prompt_name: str,
        version: str = "active",
        variables: dict[str, Any] | None = None,
    ) -> tuple[str, str]:
        """
        Render a prompt template with the given variables.

        Args:
            prompt_name: Prompt identifier (e.g., "event_extraction")
            version: "active" or explicit version (e.g., "v1")
            variables: Template variables for Jinja2 substitution

        Returns:
            Tuple of (system_prompt, user_prompt) as rendered strings
        """
        resolved_version = self._resolve_version(prompt_name, version)
        template_data = self._load_template(prompt_name, resolved_version)

        variables = variables or {}
        system_rendered = Template(
            template_data.get("system_prompt", ""), undefined=SilentUndefined
        ).render(**variables)
        user_rendered = Template(
            template_data.get("user_prompt", ""), undefined=SilentUndefined
        ).render(**variables)

        logger.debug(f"Rendered prompt {prompt_name}/{resolved_version}")
        return system_rendered, user_rendered

    def get_active_version(self, prompt_name: str) -> str:
        """Return the active version string for a prompt."""
        return self._resolve_version(prompt_name, "active")

    def list_prompts(self) -> list[str]:
        """Return all prompt names found in the prompts directory."""
        if not self._dir.exists():
            return []
        return sorted(
            p.name
            for p in self._dir.iterdir()
            if p.is_dir() and (p / "manifest.yaml").exists()
        )


# Singleton
_registry: PromptRegistry | None = None


def get_prompt_registry() -> PromptRegistry:
    global _registry
    if _registry is None:
        _registry = PromptRegistry()
    return _registry
