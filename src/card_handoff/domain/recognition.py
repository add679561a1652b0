"""Models for text recognition backend payloads."""

from pydantic import BaseModel, ConfigDict, Field


class RecognizedText(BaseModel):
    """Structured output requested from the LLM recognizer."""

    text: str


class TextAnnotation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class AnnotateStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    message: str = ""


class AnnotateImageResponse(BaseModel):
    """Single image result of a Cloud Vision annotate call."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    full_text_annotation: TextAnnotation | None = Field(
        default=None, alias="fullTextAnnotation"
    )
    error: AnnotateStatus | None = None


class BatchAnnotateResponse(BaseModel):
    """Top-level Cloud Vision ``images:annotate`` response."""

    model_config = ConfigDict(extra="ignore")

    responses: list[AnnotateImageResponse] = Field(default_factory=list)
