# src/llm/client_factory.py — v1
"""Factory: instantiate the inference client from provider name.

Called once by the engine at construction time. Adapters are imported
lazily so an unused provider's SDK need not be installed.
"""

from __future__ import annotations

import importlib
import logging

from agentweave.config.settings import Settings
from agentweave.llm.base_client import BaseInferenceClient

logger = logging.getLogger(__name__)

# Registry of provider name -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "ollama": "agentweave.llm.adapters.ollama_adapter.OllamaAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_inference_client(
    provider: str | None = None,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseInferenceClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier; defaults to settings.inference_provider.
        settings: Application settings (host, timeout).
        **kwargs: Additional provider-specific arguments.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    if provider is None:
        provider = settings.inference_provider if settings is not None else "ollama"

    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported inference provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    if settings is not None:
        init_kwargs.setdefault("timeout", settings.inference_timeout_s)
        if provider == "ollama":
            init_kwargs.setdefault("host", settings.ollama_host)

    logger.debug("Creating inference client: provider=%s", provider)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseInferenceClient.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered inference provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
