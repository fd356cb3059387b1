"""Structural validation and scoring of generated Markdown pages."""

import re
from typing import Literal

from pydantic import BaseModel, Field, computed_field

Severity = Literal["critical", "major", "minor"]

SEVERITY_PENALTY: dict[str, int] = {"critical": 25, "major": 15, "minor": 5}
WARNING_PENALTY = 2
PASSING_SCORE = 70

# Recommended sections per page type, as regular expressions over lowercased content
RECOMMENDED_SECTIONS: dict[str, list[tuple[str, str]]] = {
    "homepage": [
        ("features", r"features"),
        ("getting started", r"getting started"),
        ("call to action", r"call\s+to.action"),
    ],
    "about": [("mission", r"mission"), ("story", r"story"), ("technology", r"technology")],
    "faq": [("questions", r"questions"), ("answers", r"answers")],
    "blog": [("introduction", r"introduction"), ("conclusion", r"conclusion")],
}

CTA_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (r"get started", r"download", r"try now", r"learn more", r"view documentation")
]
PLACEHOLDERS = ["[placeholder]", "[todo]", "[tbd]", "lorem ipsum"]
STORY_KEYWORDS = ["story", "mission", "vision", "journey", "started", "founded"]
TECH_KEYWORDS = ["technology", "built", "using", "stack", "framework"]
QUESTION_MARKERS = ["?", "how", "what", "why", "when", "where"]
CONCLUSION_KEYWORDS = ["conclusion", "summary", "wrap up", "final thoughts"]

HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
BOLD = re.compile(r"\*\*")
ITALIC = re.compile(r"(?<!\*)\*(?!\*)")
SECTION_SPLIT = re.compile(r"^##", re.MULTILINE)


class ValidationIssue(BaseModel):
    """A structural problem that lowers the score."""

    type: Literal["structure", "format", "content", "length"]
    message: str
    severity: Severity
    line: int | None = None


class ValidationWarning(BaseModel):
    """An advisory finding with a suggested fix."""

    type: Literal["style", "seo", "accessibility", "best-practice"]
    message: str
    suggestion: str


class ValidationResult(BaseModel):
    """Outcome of validating one page."""

    score: int = 100
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return self.score >= PASSING_SCORE and not any(
            error.severity == "critical" for error in self.errors
        )


class ValidationCriteria(BaseModel):
    """Requirements for pages without a dedicated rule set."""

    min_words: int | None = None
    max_words: int | None = None
    required_sections: list[str] = Field(default_factory=list)


def count_words(content: str) -> int:
    return len(content.split())


def calculate_score(errors: list[ValidationIssue], warnings: list[ValidationWarning]) -> int:
    """100 minus severity penalties and 2 per warning, floored at 0."""
    score = 100
    for error in errors:
        score -= SEVERITY_PENALTY[error.severity]
    score -= WARNING_PENALTY * len(warnings)
    return max(0, score)


class ContentValidator:
    """Checks generated Markdown against page-type specific rules."""

    def validate(
        self,
        content: str,
        content_type: str,
        criteria: ValidationCriteria | None = None,
    ) -> ValidationResult:
        """Validate content for a page type.

        Args:
            content: Markdown text
            content_type: homepage, about, faq, blog (or blog-post); anything
                else is validated as generic content
            criteria: Word and section requirements for generic content

        Returns:
            ValidationResult with score and findings
        """
        page_type = content_type.lower()
        if page_type == "blog-post":
            page_type = "blog"

        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        self._check_structure(content, page_type, errors, warnings)
        if page_type == "homepage":
            self._check_homepage(content, errors, warnings)
        elif page_type == "about":
            self._check_about(content, warnings)
        elif page_type == "faq":
            self._check_faq(content, warnings)
        elif page_type == "blog":
            self._check_blog(content, warnings)
        else:
            self._check_generic(content, criteria or ValidationCriteria(), errors, warnings)
        self._check_quality(content, errors, warnings)

        result = ValidationResult(
            score=calculate_score(errors, warnings), errors=errors, warnings=warnings
        )
        result.suggestions = self.generate_improvement_suggestions(result)
        return result

    def _check_structure(
        self,
        content: str,
        page_type: str,
        errors: list[ValidationIssue],
        warnings: list[ValidationWarning],
    ) -> None:
        lines = content.split("\n")

        h1_count = sum(1 for line in lines if line.startswith("# "))
        if h1_count == 0:
            errors.append(
                ValidationIssue(
                    type="structure", message="Missing H1 header (# title)", severity="critical"
                )
            )
        elif h1_count > 1:
            warnings.append(
                ValidationWarning(
                    type="style",
                    message="Multiple H1 headers found. Consider using H2 for subsections.",
                    suggestion="Use only one H1 header per page for better SEO",
                )
            )

        previous_level = None
        for number, line in enumerate(lines, start=1):
            match = HEADING.match(line)
            if not match:
                continue
            level = len(match.group(1))
            if previous_level is not None and level > previous_level + 1:
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message=f"Heading level skipped at line {number}: {match.group(2)}",
                        suggestion="Use consecutive heading levels (H1 > H2 > H3)",
                    )
                )
            previous_level = level

        lowered = content.lower()
        for label, pattern in RECOMMENDED_SECTIONS.get(page_type, []):
            if not re.search(pattern, lowered):
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message=f"Missing recommended section: {label}",
                        suggestion=f"Consider adding a {label} section",
                    )
                )

    def _check_homepage(
        self, content: str, errors: list[ValidationIssue], warnings: list[ValidationWarning]
    ) -> None:
        if "##" not in content or "- **" not in content:
            errors.append(
                ValidationIssue(
                    type="structure",
                    message="Missing features section with bullet points",
                    severity="major",
                )
            )

        if not any(pattern.search(content) for pattern in CTA_PATTERNS):
            warnings.append(
                ValidationWarning(
                    type="best-practice",
                    message="No clear call-to-action found",
                    suggestion="Add a compelling call-to-action to encourage engagement",
                )
            )

        words = count_words(content)
        if words < 200:
            errors.append(
                ValidationIssue(
                    type="length",
                    message=f"Content too short: {words} words (minimum 200)",
                    severity="major",
                )
            )
        elif words > 600:
            warnings.append(
                ValidationWarning(
                    type="style",
                    message=f"Content might be too long: {words} words",
                    suggestion="Consider breaking into smaller sections",
                )
            )

    def _check_about(self, content: str, warnings: list[ValidationWarning]) -> None:
        lowered = content.lower()
        if not any(keyword in lowered for keyword in STORY_KEYWORDS):
            warnings.append(
                ValidationWarning(
                    type="best-practice",
                    message="Missing story or mission elements",
                    suggestion="Add a story or mission statement to connect with readers",
                )
            )
        if not any(keyword in lowered for keyword in TECH_KEYWORDS):
            warnings.append(
                ValidationWarning(
                    type="best-practice",
                    message="Missing technology information",
                    suggestion="Mention the technologies used to build credibility",
                )
            )

    def _check_faq(self, content: str, warnings: list[ValidationWarning]) -> None:
        questions = [line for line in content.split("\n") if line.startswith("### ")]
        if len(questions) < 5:
            warnings.append(
                ValidationWarning(
                    type="best-practice",
                    message=f"Only {len(questions)} questions found. Consider adding more FAQs",
                    suggestion="Include at least 5-7 common questions",
                )
            )
        for line in questions:
            lowered = line.lower()
            if not any(marker in lowered for marker in QUESTION_MARKERS):
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message=f'H3 header "{line}" doesn\'t appear to be a question',
                        suggestion="Format FAQ headers as clear questions",
                    )
                )

    def _check_blog(self, content: str, warnings: list[ValidationWarning]) -> None:
        if not self._has_introduction(content):
            warnings.append(
                ValidationWarning(
                    type="style",
                    message="Missing introduction paragraph",
                    suggestion="Add an engaging introduction before the first section",
                )
            )

        lowered = content.lower()
        if not any(keyword in lowered for keyword in CONCLUSION_KEYWORDS):
            warnings.append(
                ValidationWarning(
                    type="style",
                    message="Missing conclusion section",
                    suggestion="Add a conclusion to summarize key points",
                )
            )

        words = count_words(content)
        if words < 400:
            warnings.append(
                ValidationWarning(
                    type="style",
                    message=f"Blog post might be too short: {words} words",
                    suggestion="Consider expanding with more details and examples",
                )
            )

    @staticmethod
    def _has_introduction(content: str) -> bool:
        """Whether body text appears before the first H2 heading."""
        for line in content.split("\n"):
            stripped = line.strip()
            if stripped.startswith("##"):
                return False
            if stripped and not stripped.startswith("#"):
                return True
        return False

    def _check_generic(
        self,
        content: str,
        criteria: ValidationCriteria,
        errors: list[ValidationIssue],
        warnings: list[ValidationWarning],
    ) -> None:
        words = count_words(content)
        if criteria.min_words and words < criteria.min_words:
            errors.append(
                ValidationIssue(
                    type="length",
                    message=f"Content too short: {words} words (minimum: {criteria.min_words})",
                    severity="major",
                )
            )
        if criteria.max_words and words > criteria.max_words:
            warnings.append(
                ValidationWarning(
                    type="style",
                    message=f"Content might be too long: {words} words (maximum: {criteria.max_words})",
                    suggestion="Consider breaking into smaller sections",
                )
            )

        lowered = content.lower()
        for section in criteria.required_sections:
            if section.lower() not in lowered:
                errors.append(
                    ValidationIssue(
                        type="structure",
                        message=f"Missing required section: {section}",
                        severity="major",
                    )
                )

    def _check_quality(
        self, content: str, errors: list[ValidationIssue], warnings: list[ValidationWarning]
    ) -> None:
        for section in SECTION_SPLIT.split(content)[1:]:
            lines = [line for line in section.strip().split("\n") if line.strip()]
            if len(lines) <= 1:
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message="Empty or very short section found",
                        suggestion="Ensure all sections have meaningful content",
                    )
                )

        lowered = content.lower()
        for placeholder in PLACEHOLDERS:
            if placeholder in lowered:
                errors.append(
                    ValidationIssue(
                        type="content",
                        message=f"Placeholder text found: {placeholder}",
                        severity="major",
                    )
                )

        for number, line in enumerate(content.split("\n"), start=1):
            if len(BOLD.findall(line)) % 2:
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message=f"Unmatched bold markers at line {number}",
                        suggestion="Ensure all ** markers are properly paired",
                    )
                )
            if len(ITALIC.findall(line)) % 2:
                warnings.append(
                    ValidationWarning(
                        type="style",
                        message=f"Unmatched italic markers at line {number}",
                        suggestion="Ensure all * markers are properly paired",
                    )
                )

    def generate_improvement_suggestions(self, result: ValidationResult) -> list[str]:
        """Human readable next steps for a validation result."""
        suggestions = []
        if result.errors:
            suggestions.append("Fix critical errors first:")
            suggestions.extend(f"- {error.message}" for error in result.errors)
        if result.warnings:
            suggestions.append("Consider these improvements:")
            suggestions.extend(f"- {warning.suggestion}" for warning in result.warnings)

        if result.score >= 90:
            suggestions.append("Excellent content quality! Ready for publication.")
        elif result.score >= PASSING_SCORE:
            suggestions.append("Good content quality with room for minor improvements.")
        else:
            suggestions.append("Content needs significant improvements before publication.")
        return suggestions
