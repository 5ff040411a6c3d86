"""Request schemas for API endpoints."""
from pydantic import BaseModel, Field, field_validator

from shared.summarizer import SummaryLength, SummaryOptions, SummaryStyle


class SummarizeTextRequest(BaseModel):
    """Request schema for ad-hoc text summarization."""
    text: str = Field(..., description="Text to summarize")
    length: SummaryLength = Field(default=SummaryLength.MEDIUM, description="Summary length")
    style: SummaryStyle = Field(default=SummaryStyle.FORMAL, description="Writing style")
    language: str = Field(default="Turkish", description="Language of the summary")
    include_key_quotes: bool = Field(default=False, description="Also extract key quotes")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject blank text."""
        if not v.strip():
            raise ValueError('Text input cannot be empty')
        return v

    def to_options(self) -> SummaryOptions:
        return SummaryOptions(
            length=self.length,
            style=self.style,
            language=self.language,
            include_key_quotes=self.include_key_quotes
        )
