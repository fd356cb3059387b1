"""Prompt templates, validation and marketing content generation."""

from lumosgen.content.models import ContentGenerationOptions, GeneratedArtifact, GeneratedContent
from lumosgen.content.project import ProjectAnalysis, ProjectAnalyzer
from lumosgen.content.templates import PromptTemplateLibrary, TemplateNotFoundError
from lumosgen.content.validator import ContentValidator, ValidationResult

__all__ = [
    "ContentGenerationOptions",
    "ContentValidator",
    "GeneratedArtifact",
    "GeneratedContent",
    "ProjectAnalysis",
    "ProjectAnalyzer",
    "PromptTemplateLibrary",
    "TemplateNotFoundError",
    "ValidationResult",
]
