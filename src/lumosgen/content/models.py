"""Content generation options and results."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from lumosgen.content.validator import ValidationResult


class ContentGenerationOptions(BaseModel):
    """Knobs applied to every generated page."""

    tone: str = "professional"
    include_code_examples: bool = True
    target_markets: list[str] = Field(default_factory=lambda: ["global"])
    seo_optimization: bool = True
    language: str = "en"


class GeneratedArtifact(BaseModel):
    """Best attempt produced for one template."""

    template: str
    content: str
    score: int
    attempts: int
    validation: ValidationResult
    used_fallback: bool = False
    provider: str | None = None


class ContentMetadata(BaseModel):
    """Summary of a marketing content run."""

    title: str
    description: str
    keywords: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    average_score: float = 0.0


class GeneratedContent(BaseModel):
    """Complete set of marketing pages for a project."""

    homepage: GeneratedArtifact
    about: GeneratedArtifact
    faq: GeneratedArtifact
    blog_posts: list[GeneratedArtifact] = Field(default_factory=list)
    metadata: ContentMetadata

    def artifacts(self) -> list[GeneratedArtifact]:
        return [self.homepage, self.about, self.faq, *self.blog_posts]
