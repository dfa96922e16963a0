# src/llm/client_factory.py — v3
"""Factory: instantiate LLM client from provider name.

Called at application wiring time for each component, based on the
cascade resolution in llm/config.py.
"""

from __future__ import annotations

import importlib
import logging

from paperchat.config.settings import Settings
from paperchat.llm.base_client import BaseLLMClient
from paperchat.llm.config import resolve_llm

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "paperchat.llm.adapters.google_adapter.GoogleAdapter",
    "openai": "paperchat.llm.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (google, openai).
        model: Model name (e.g. gemini-2.5-flash-lite).
        settings: Application settings (for API keys and timeouts).
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if settings is not None:
        init_kwargs.setdefault("timeout_s", settings.llm_timeout_s)
        if provider == "google":
            init_kwargs.setdefault("api_key", settings.google_api_key)
        elif provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)
            if settings.openai_base_url:
                init_kwargs.setdefault("base_url", settings.openai_base_url)

    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def create_component_client(component: str, settings: Settings) -> BaseLLMClient:
    """Resolve the assignment for ``component`` and build its client."""
    assignment = resolve_llm(component, settings)
    logger.info(
        "LLM for %s: %s (from %s)", component, assignment.key, assignment.source
    )
    return create_llm_client(assignment.provider, assignment.model, settings)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
