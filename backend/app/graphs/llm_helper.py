"""
LLM Helper for Pipeline Nodes

This module provides pipeline-specific LLM initialization and the single
prompt-in, text-out call every orchestrator goes through. It handles both
node-specific and graph-level LLM configuration modes while keeping the core
llm.py module agnostic of pipeline specifics.
"""

import logging
from typing import Dict, Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

from app.core.exceptions import UpstreamEmpty, UpstreamError
from app.core.llm import LLMError, get_llm_config_for_path, create_llm_from_config_path

logger = logging.getLogger(__name__)


class GraphLLMHelper:
    """
    Helper class for managing LLM instances within a specific graph.

    Supports two configuration modes:
    1. Node-specific config: {task_category}.{graph_name}.nodes.{node_name}
    2. Graph-level config fallback: {task_category}.{graph_name}
    """

    def __init__(self, graph_name: str, task_category: str = "main"):
        self.graph_name = graph_name
        self.task_category = task_category
        self._llm_cache: Dict[str, Any] = {}

    def get_node_llm(self, node_name: str) -> BaseChatModel:
        """
        Get LLM instance for a specific node in this graph.

        Args:
            node_name: Name of the node (e.g., 'critique_node', 'improvement_node')

        Returns:
            LLM instance configured for the node
        """
        cache_key = f"{self.task_category}.{self.graph_name}.{node_name}"

        if cache_key not in self._llm_cache:
            node_config_path = f"{self.task_category}.{self.graph_name}.nodes.{node_name}"
            graph_config_path = f"{self.task_category}.{self.graph_name}"

            # Get graph-level config as fallback
            try:
                graph_config = get_llm_config_for_path(graph_config_path)
            except LLMError:
                graph_config = None

            llm = create_llm_from_config_path(node_config_path, fallback_config=graph_config)
            logger.info(f"LLM ready for {self.graph_name}.{node_name}")

            self._llm_cache[cache_key] = llm

        return self._llm_cache[cache_key]


def create_graph_llm_helper(graph_name: str, task_category: str = "main") -> GraphLLMHelper:
    return GraphLLMHelper(graph_name, task_category)


# Shared helper for every proposal pipeline node
proposal_llm = create_graph_llm_helper("proposal")


def message_text(message: Any) -> str:
    """Extract plain text from a chat model reply (string or content blocks)."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content or "")


async def generate_text(prompt: str, node_name: str, llm: Optional[BaseChatModel] = None) -> str:
    """
    Send one prompt to the text-generation service and return its reply.

    Raises:
        UpstreamError: the model could not be created or the call failed
        UpstreamEmpty: the reply was empty or whitespace-only
    """
    try:
        model = llm or proposal_llm.get_node_llm(node_name)
        reply = await model.ainvoke([HumanMessage(content=prompt)])
    except Exception as e:
        logger.error(f"AI call failed in {node_name}: {e}")
        raise UpstreamError(str(e)) from e

    text = message_text(reply)
    if not text or not text.strip():
        logger.warning(f"Empty AI response in {node_name}")
        raise UpstreamEmpty()
    return text
