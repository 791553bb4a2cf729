"""Configuration package for AI prompts and templates."""

from .prompts import (
    DEFAULT_SYSTEM_PROMPT,
    EDA_PROMPT,
    REASONING_INSTRUCTION,
    build_chat_system_prompt,
    build_document_context,
    build_eda_prompt,
)

__all__ = [
    # Prompt templates
    "EDA_PROMPT",
    "DEFAULT_SYSTEM_PROMPT",
    "REASONING_INSTRUCTION",
    # Helper functions
    "build_eda_prompt",
    "build_chat_system_prompt",
    "build_document_context",
]
