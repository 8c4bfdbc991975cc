"""Line-oriented parser for provider comparison text.

Lines starting with the point marker become comparison points (with the
``- Point N: `` prefix removed); the line starting with the opinion marker
becomes the final opinion. Everything else is ignored, and text that does
not follow the format yields empty fields rather than an error.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from product_comparison.llm.prompts.comparison import OPINION_MARKER, POINT_MARKER


_POINT_PREFIX = re.compile(r"^- Point \d+: ")


class ComparisonResult(BaseModel):
    """Structured comparison extracted from provider text."""

    points: list[str] = Field(default_factory=list)
    opinion: str = ""


class ComparisonParser:
    """Parse raw provider text into a ComparisonResult."""

    def parse(self, raw_text: str) -> ComparisonResult:
        """Extract comparison points and the final opinion.

        Args:
            raw_text: Text returned by the provider.

        Returns:
            ComparisonResult; fields are empty when nothing matches.
        """
        points: list[str] = []
        opinion = ""

        for raw_line in raw_text.splitlines():
            line = raw_line.strip()
            if line.startswith(POINT_MARKER):
                points.append(_POINT_PREFIX.sub("", line, count=1))
            elif line.startswith(OPINION_MARKER):
                opinion = line[len(OPINION_MARKER) :]

        return ComparisonResult(points=points, opinion=opinion)
