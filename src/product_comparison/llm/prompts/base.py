"""Base class for provider prompts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BasePrompt(ABC):
    """Base class for all provider prompts.

    Keeps prompt text in one place instead of scattered string literals,
    so it can be versioned and tested.

    Example:
        ```python
        class SummaryPrompt(BasePrompt):
            def format(self, text: str) -> str:
                return f"Summarize:\\n\\n{text}"
        ```
    """

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with input variables.

        Raises:
            ValueError: If required variables are missing.
        """
        ...

    @property
    def name(self) -> str:
        """Prompt identifier for logging."""
        return self.__class__.__name__
