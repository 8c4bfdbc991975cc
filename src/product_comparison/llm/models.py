"""Gemini wire models.

Request/response bodies for the ``models/{model}:generateContent`` endpoint.
Only the fields the service reads are modelled; everything else is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GeminiPart(BaseModel):
    """A single content part."""

    model_config = ConfigDict(extra="ignore")

    text: str = Field(..., description="Generated or prompt text")


class GeminiContent(BaseModel):
    """Content block holding ordered parts."""

    model_config = ConfigDict(extra="ignore")

    parts: list[GeminiPart] = Field(..., description="Ordered content parts")
    role: str | None = Field(default=None, description="Author role")


class GeminiGenerateRequest(BaseModel):
    """Request body for the generateContent endpoint."""

    contents: list[GeminiContent] = Field(..., description="Prompt contents")

    @classmethod
    def from_prompt(cls, prompt: str) -> GeminiGenerateRequest:
        """Build a single-turn request carrying one prompt text."""
        return cls(contents=[GeminiContent(parts=[GeminiPart(text=prompt)])])


class GeminiCandidate(BaseModel):
    """One generated candidate."""

    model_config = ConfigDict(extra="ignore")

    content: GeminiContent = Field(..., description="Candidate content")
    finish_reason: str | None = Field(default=None, alias="finishReason")


class GeminiGenerateResponse(BaseModel):
    """Response body from the generateContent endpoint."""

    model_config = ConfigDict(extra="ignore")

    candidates: list[GeminiCandidate] = Field(..., description="Generated candidates")
    usage_metadata: dict[str, Any] | None = Field(default=None, alias="usageMetadata")


class GeminiErrorDetail(BaseModel):
    """Entry of ``error.details`` in a Gemini error body."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str = Field(default="", alias="@type")
    retry_delay: str | None = Field(default=None, alias="retryDelay")
    violations: list[dict[str, Any]] | None = None


class GeminiError(BaseModel):
    """The ``error`` object of a Gemini error body."""

    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    message: str | None = None
    status: str | None = None
    details: list[GeminiErrorDetail] = Field(default_factory=list)


class GeminiErrorResponse(BaseModel):
    """Top-level Gemini error body."""

    model_config = ConfigDict(extra="ignore")

    error: GeminiError = Field(default_factory=GeminiError)
