"""Provider prompt definitions."""

from product_comparison.llm.prompts.base import BasePrompt
from product_comparison.llm.prompts.comparison import ProductComparisonPrompt


__all__ = ["BasePrompt", "ProductComparisonPrompt"]
