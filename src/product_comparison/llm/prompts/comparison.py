"""Product comparison prompt.

Asks the provider for 3-5 difference bullets and a closing opinion in a
line-oriented format that ``ComparisonParser`` understands.
"""

from __future__ import annotations

from typing import Any, ClassVar, Final

from .base import BasePrompt


POINT_MARKER: Final[str] = "- Point"
OPINION_MARKER: Final[str] = "Final Opinion: "


class ProductComparisonPrompt(BasePrompt):
    """Prompt comparing two product descriptions.

    Example output expected from the provider:
        - Point 1: The iPhone 15 uses the A16 chip, the Galaxy S24 ...
        - Point 2: ...
        - Point 3: ...
        Final Opinion: The Galaxy S24 is the better value because ...
    """

    MAX_WORDS: ClassVar[int] = 150

    TEMPLATE: ClassVar[str] = (
        "Compare (1) {first} vs (2) {second} in 3-5 bullet points, each "
        "highlighting a key difference including technical features (like "
        "processor, hardware, ram, cloth material etc.). "
        "Conclude with a final opinion on which product is better and why, "
        "in 1-2 sentences. "
        "Format the response as follows:\n"
        "- Point 1: [Comparison point]\n"
        "- Point 2: [Comparison point]\n"
        "- Point 3: [Comparison point]\n"
        "- [Optional Point 4: Comparison point]\n"
        "- [Optional Point 5: Comparison point]\n"
        "Final Opinion: [Your recommendation and reasoning]\n"
        "Keep the total response under {max_words} words."
    )

    def format(self, **kwargs: Any) -> str:
        """Format the prompt for two product descriptions.

        Args:
            **kwargs: Must contain ``first`` and ``second``.

        Returns:
            Formatted prompt string.

        Raises:
            ValueError: If either description is missing.
        """
        first = kwargs.get("first")
        second = kwargs.get("second")
        if first is None or second is None:
            msg = "Both 'first' and 'second' product descriptions are required"
            raise ValueError(msg)

        return self.TEMPLATE.format(
            first=first,
            second=second,
            max_words=self.MAX_WORDS,
        )
