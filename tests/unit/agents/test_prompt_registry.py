"""
Unit tests for the prompt registry.

Tests for PromptRegistry loading, version resolution and rendering.
"""

import pytest

from event_scout.agents.registry.prompt_registry import PromptRegistry, get_prompt_registry

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def prompts_dir(tmp_path):
    """Create a prompts directory with one prompt in two versions."""
    prompt_dir = tmp_path / "greeting"
    prompt_dir.mkdir()
    (prompt_dir / "manifest.yaml").write_text("active_version: v2\n", encoding="utf-8")
    (prompt_dir / "v1.yaml").write_text(
        "system_prompt: 'old system'\nuser_prompt: 'Hello {{ name }}'\n", encoding="utf-8"
    )
    (prompt_dir / "v2.yaml").write_text(
        "system_prompt: 'System for {{ name }}'\nuser_prompt: 'Hi {{ name }} at {{ place }}'\n",
        encoding="utf-8",
    )
    (tmp_path / "not_a_prompt").mkdir()
    return tmp_path


# =============================================================================
# TEST CLASSES
# =============================================================================


class TestPromptRegistry:
    """Tests for PromptRegistry."""

    def test_render_active_version(self, prompts_dir):
        """Should render the version named by the manifest."""
        registry = PromptRegistry(prompts_dir)
        system, user = registry.render("greeting", variables={"name": "Ana", "place": "Campinas"})
        assert system == "System for Ana"
        assert user == "Hi Ana at Campinas"

    def test_render_explicit_version(self, prompts_dir):
        """Should render an explicitly requested version."""
        registry = PromptRegistry(prompts_dir)
        system, user = registry.render("greeting", version="v1", variables={"name": "Ana"})
        assert system == "old system"
        assert user == "Hello Ana"

    def test_missing_variable_renders_placeholder(self, prompts_dir):
        """Should render missing variables visibly instead of failing."""
        registry = PromptRegistry(prompts_dir)
        _, user = registry.render("greeting", variables={"name": "Ana"})
        assert user == "Hi Ana at [place]"

    def test_get_active_version(self, prompts_dir):
        """Should resolve the active version from the manifest."""
        assert PromptRegistry(prompts_dir).get_active_version("greeting") == "v2"

    def test_list_prompts(self, prompts_dir):
        """Should list only directories with a manifest."""
        assert PromptRegistry(prompts_dir).list_prompts() == ["greeting"]

    def test_missing_manifest(self, prompts_dir):
        """Should raise FileNotFoundError for an unknown prompt."""
        with pytest.raises(FileNotFoundError):
            PromptRegistry(prompts_dir).render("unknown")

    def test_missing_version(self, prompts_dir):
        """Should raise FileNotFoundError for an unknown version."""
        with pytest.raises(FileNotFoundError):
            PromptRegistry(prompts_dir).render("greeting", version="v9")

    def test_templates_are_cached(self, prompts_dir):
        """Should not re-read a template once loaded."""
        registry = PromptRegistry(prompts_dir)
        registry.render("greeting", variables={"name": "Ana"})
        (prompts_dir / "greeting" / "v2.yaml").unlink()
        system, _ = registry.render("greeting", variables={"name": "Bia"})
        assert system == "System for Bia"


class TestBundledPrompts:
    """Tests for the prompts shipped with the package."""

    def test_event_extraction_prompt(self):
        """Should render the extraction prompt with the run variables."""
        registry = get_prompt_registry()
        assert "event_extraction" in registry.list_prompts()
        system, user = registry.render(
            "event_extraction",
            variables={
                "current_date": "01/06/2025",
                "source_name": "Meetup",
                "mode": "scrape",
                "content": "CONTEÚDO DA PÁGINA",
            },
        )
        assert "domainRelevance" in system
        assert "Hoje: 01/06/2025." in user
        assert "Fonte: Meetup (scrape)." in user
        assert user.rstrip().endswith("CONTEÚDO DA PÁGINA")

    def test_singleton(self):
        """Should return the same registry instance."""
        assert get_prompt_registry() is get_prompt_registry()
