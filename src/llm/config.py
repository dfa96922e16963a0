# src/llm/config.py — v3
"""Per-component LLM routing with cascade resolution.

Resolution order:
  1. Per-component setting (LLM_PAPER_CHAT=google:gemini-2.5-pro)
  2. Default provider + model (LLM_DEFAULT_PROVIDER + LLM_DEFAULT_MODEL)
  3. Hardcoded fallback (google:gemini-2.5-flash-lite)
"""

from __future__ import annotations

from dataclasses import dataclass

from paperchat.config.components import LLM_COMPONENTS
from paperchat.config.settings import Settings

_FALLBACK_PROVIDER = "google"
_FALLBACK_MODEL = "gemini-2.5-flash-lite"


@dataclass(frozen=True)
class LLMAssignment:
    """Resolved LLM provider:model for a component."""

    provider: str
    model: str
    source: str  # "component", "default", or "fallback"

    @property
    def key(self) -> str:
        """Return 'provider:model' string."""
        return f"{self.provider}:{self.model}"


def _parse_assignment(value: str) -> tuple[str, str] | None:
    """Parse 'provider:model' string. Returns None if empty or malformed."""
    if not value or ":" not in value:
        return None
    provider, model = value.split(":", 1)
    provider, model = provider.strip(), model.strip()
    if not provider or not model:
        return None
    return (provider, model)


def resolve_llm(component: str, settings: Settings) -> LLMAssignment:
    """Resolve LLM assignment for a component.

    Args:
        component: Component name ("paper_chat", "spec_extractor").
        settings: Application settings.

    Returns:
        Resolved LLMAssignment with provider, model, and resolution source.

    Raises:
        ValueError: If ``component`` is not a known LLM component.
    """
    if component not in LLM_COMPONENTS:
        raise ValueError(
            f"Unknown LLM component: {component!r}. Known: {', '.join(LLM_COMPONENTS)}"
        )
    per_component = getattr(settings, f"llm_{component}", "")
    parsed = _parse_assignment(per_component)
    if parsed:
        return LLMAssignment(provider=parsed[0], model=parsed[1], source="component")

    if settings.llm_default_provider and settings.llm_default_model:
        return LLMAssignment(
            provider=settings.llm_default_provider,
            model=settings.llm_default_model,
            source="default",
        )

    return LLMAssignment(
        provider=_FALLBACK_PROVIDER,
        model=_FALLBACK_MODEL,
        source="fallback",
    )


def resolve_all(settings: Settings) -> dict[str, LLMAssignment]:
    """Resolve LLM assignments for every known component."""
    return {comp: resolve_llm(comp, settings) for comp in LLM_COMPONENTS}
