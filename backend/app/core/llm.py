"""
LLM Initialization and Configuration Module

This module provides a centralized way to initialize LLMs with different providers
(Google Gemini, OpenAI) based on configuration. It abstracts away provider-specific
initialization logic and provides a consistent interface.

Supports two modes of LLM configuration:
1. Graph-level: Single LLM config for all nodes in a graph
2. Node-level: Individual LLM configs for specific nodes within a graph
"""

import logging
from typing import Dict, Any, Optional
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from langchain_core.language_models import BaseChatModel

from app.core.config import settings

logger = logging.getLogger(__name__)

# Supported LLM providers
SUPPORTED_PROVIDERS = {
    "google": ChatGoogleGenerativeAI,
    "openai": ChatOpenAI,
}

# Default provider if not specified
DEFAULT_PROVIDER = "google"

# Generation parameters that only the Gemini client understands
GOOGLE_ONLY_PARAMS = ("top_k", "max_output_tokens", "thinking_budget", "google_api_key")


class LLMError(Exception):
    """Custom exception for LLM initialization errors."""
    pass


def _get_provider_config(provider: str, model_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get provider-specific configuration parameters.

    Args:
        provider: The LLM provider name (google, openai)
        model_config: Raw model configuration dict

    Returns:
        Dict of provider-specific parameters
    """
    config = model_config.copy()

    if provider == "google":
        if "google_api_key" not in config:
            if not settings.google_api_key:
                raise LLMError("GOOGLE_API_KEY is not configured")
            config["google_api_key"] = settings.google_api_key

    elif provider == "openai":
        if "api_key" not in config:
            if settings.openai_api_key:
                config["api_key"] = settings.openai_api_key
            else:
                logger.warning("No OpenAI API key found in environment")

        # OpenAI names the output budget differently
        if "max_output_tokens" in config:
            config["max_tokens"] = config["max_output_tokens"]
        for param in GOOGLE_ONLY_PARAMS:
            config.pop(param, None)

    return config


def create_llm(
    model_config: Dict[str, Any],
    provider: Optional[str] = None
) -> BaseChatModel:
    """
    Create an LLM instance based on the provider and configuration.

    Args:
        model_config: Configuration dict containing model parameters
        provider: LLM provider name. If None, will look for 'model_provider' in config

    Returns:
        Initialized LLM instance

    Raises:
        LLMError: If provider is not supported or configuration is invalid
    """
    if provider is None:
        provider = model_config.get("model_provider", DEFAULT_PROVIDER)

    provider = provider.lower()

    if provider not in SUPPORTED_PROVIDERS:
        raise LLMError(
            f"Unsupported LLM provider: {provider}. "
            f"Supported providers: {list(SUPPORTED_PROVIDERS.keys())}"
        )

    llm_class = SUPPORTED_PROVIDERS[provider]

    try:
        provider_config = _get_provider_config(provider, model_config)
        provider_config.pop("model_provider", None)

        logger.info(f"Initializing {provider} LLM with model: {provider_config.get('model', 'default')}")
        return llm_class(**provider_config)

    except LLMError:
        raise
    except Exception as e:
        raise LLMError(f"Failed to initialize {provider} LLM: {str(e)}") from e


def get_llm_config_for_path(
    config_path: str,
    fallback_config: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Get LLM configuration for a specific config path, with optional fallback.

    Args:
        config_path: Dot-separated path in config (e.g., 'main.proposal.nodes.critique_node')
        fallback_config: Optional fallback configuration if specific path not found

    Returns:
        Dict containing LLM configuration for the specified path

    Raises:
        LLMError: If no configuration is found and no fallback provided
    """
    config = settings.llm_config or {}

    for part in config_path.split("."):
        if isinstance(config, dict) and part in config:
            config = config[part]
        elif fallback_config:
            logger.info(f"Config path '{config_path}' not found, using fallback")
            return fallback_config.copy()
        else:
            raise LLMError(f"Configuration path '{config_path}' not found")

    # Remove nested 'nodes' section if present in final config
    final_config = config.copy() if isinstance(config, dict) else {}
    final_config.pop("nodes", None)

    return final_config


def create_llm_from_config_path(
    config_path: str,
    fallback_config: Optional[Dict[str, Any]] = None
) -> BaseChatModel:
    """Create an LLM instance from a dot-separated configuration path."""
    config = get_llm_config_for_path(config_path, fallback_config)
    return create_llm(config)
