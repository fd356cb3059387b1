"""Marketing content generation with validation and retry."""

import structlog

from lumosgen.ai.service import AIService
from lumosgen.ai.types import ChatMessage, GenerationRequest, GenerationResponse
from lumosgen.content.fallbacks import fallback_content
from lumosgen.content.models import (
    ContentGenerationOptions,
    ContentMetadata,
    GeneratedArtifact,
    GeneratedContent,
)
from lumosgen.content.project import ProjectAnalysis
from lumosgen.content.templates import PromptTemplateLibrary
from lumosgen.content.validator import ContentValidator, ValidationResult

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are an expert technical writer specializing in developer-focused marketing "
    "content. Generate high-quality, structured content that follows the provided "
    "template exactly."
)
RETRY_REMINDER = (
    "\n\nIMPORTANT: This is a retry. Pay extra attention to the structure requirements "
    "and make sure every section is properly formatted."
)

ACCEPT_SCORE = 85
FIRST_TEMPERATURE = 0.7
RETRY_TEMPERATURE = 0.5
MAX_TOKENS = 2500
BLOG_FEATURE_THRESHOLD = 3


class MarketingContentGenerator:
    """Turns a project analysis into validated marketing pages.

    Each page is generated from a prompt template, scored by the validator
    and regenerated at a lower temperature until it scores well enough or the
    retry budget runs out. The best non-empty attempt wins; a static page is
    used only when no attempt produced any text.
    """

    def __init__(
        self,
        ai_service: AIService,
        templates: PromptTemplateLibrary | None = None,
        validator: ContentValidator | None = None,
        max_retries: int = 2,
    ):
        """Initialize generator.

        Args:
            ai_service: Orchestrator used for every generation call
            templates: Prompt template library
            validator: Content validator
            max_retries: Extra attempts after the first one
        """
        self.ai_service = ai_service
        self.templates = templates or PromptTemplateLibrary()
        self.validator = validator or ContentValidator()
        self.max_retries = max_retries

    async def generate_with_template(
        self,
        template_name: str,
        analysis: ProjectAnalysis,
        options: ContentGenerationOptions | None = None,
        max_retries: int | None = None,
        strategy: str | None = None,
    ) -> GeneratedArtifact:
        """Generate one page with the validate-and-retry loop.

        Args:
            template_name: Template to render (homepage, about, faq, blog)
            analysis: Project analysis feeding the prompt
            options: Generation options
            max_retries: Override of the generator's retry budget
            strategy: Content strategy added to the system message

        Returns:
            The accepted or best-scoring attempt, or the static fallback

        Raises:
            TemplateNotFoundError: If the template is unknown
            AllProvidersFailedError: If the orchestrator cannot reach any provider
        """
        options = options or ContentGenerationOptions()
        retries = self.max_retries if max_retries is None else max_retries
        prompt = self.templates.generate_prompt(template_name, analysis, options)
        system_prompt = SYSTEM_PROMPT
        if strategy:
            system_prompt += f"\n\nContent strategy to follow:\n{strategy}"

        best: GeneratedArtifact | None = None
        attempts = 0
        for attempt in range(retries + 1):
            attempts = attempt + 1
            response = await self._generate(system_prompt, prompt, is_retry=attempt > 0)
            content = response.content
            validation = self.validator.validate(content, template_name)

            logger.info(
                "content_attempt_scored",
                template=template_name,
                attempt=attempts,
                score=validation.score,
                valid=validation.is_valid,
            )

            candidate = GeneratedArtifact(
                template=template_name,
                content=content,
                score=validation.score,
                attempts=attempts,
                validation=validation,
                provider=response.provider.value,
            )
            if validation.is_valid and validation.score >= ACCEPT_SCORE:
                return candidate

            if content.strip() and (best is None or validation.score > best.score):
                best = candidate

            if attempt < retries:
                logger.info(
                    "content_retry",
                    template=template_name,
                    score=validation.score,
                    errors=[error.message for error in validation.errors],
                )

        if best is not None:
            logger.warning(
                "content_best_attempt_used",
                template=template_name,
                score=best.score,
                suggestions=best.validation.suggestions,
            )
            return best.model_copy(update={"attempts": attempts})

        logger.warning("content_fallback_used", template=template_name)
        content = fallback_content(template_name, analysis.metadata.name)
        validation = self.validator.validate(content, template_name)
        return GeneratedArtifact(
            template=template_name,
            content=content,
            score=validation.score,
            attempts=attempts,
            validation=validation,
            used_fallback=True,
        )

    async def _generate(self, system_prompt: str, prompt: str, is_retry: bool) -> GenerationResponse:
        request = GenerationRequest(
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=prompt + RETRY_REMINDER if is_retry else prompt),
            ],
            temperature=RETRY_TEMPERATURE if is_retry else FIRST_TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
        return await self.ai_service.generate(request)

    async def generate_marketing_content(
        self,
        analysis: ProjectAnalysis,
        options: ContentGenerationOptions | None = None,
    ) -> GeneratedContent:
        """Generate homepage, about and FAQ pages, plus a blog post for richer projects.

        Args:
            analysis: Project analysis
            options: Generation options

        Returns:
            GeneratedContent with every page and summary metadata
        """
        options = options or ContentGenerationOptions()
        logger.info("marketing_content_started", project=analysis.metadata.name)

        homepage = await self.generate_with_template("homepage", analysis, options)
        about = await self.generate_with_template("about", analysis, options)
        faq = await self.generate_with_template("faq", analysis, options)

        blog_posts = []
        if len(analysis.features) > BLOG_FEATURE_THRESHOLD:
            blog_posts.append(await self.generate_with_template("blog", analysis, options))

        pages = [homepage, about, faq, *blog_posts]
        keywords = list(dict.fromkeys(tech.language for tech in analysis.tech_stack))
        keywords.extend(k for k in analysis.metadata.keywords if k not in keywords)

        content = GeneratedContent(
            homepage=homepage,
            about=about,
            faq=faq,
            blog_posts=blog_posts,
            metadata=ContentMetadata(
                title=analysis.metadata.name,
                description=analysis.metadata.description or "An innovative software project",
                keywords=keywords[:10],
                average_score=sum(page.score for page in pages) / len(pages),
            ),
        )
        logger.info(
            "marketing_content_completed",
            project=analysis.metadata.name,
            pages=len(pages),
            average_score=round(content.metadata.average_score, 1),
        )
        return content

    def validate_existing_content(self, content: str, template_name: str) -> ValidationResult:
        """Validate a page that was written or edited outside the generator."""
        result = self.validator.validate(content, template_name)
        logger.info(
            "content_validated",
            template=template_name,
            score=result.score,
            errors=[error.message for error in result.errors],
            warnings=[warning.message for warning in result.warnings],
        )
        return result

    def generate_content_improvements(self, content: str, template_name: str) -> list[str]:
        result = self.validator.validate(content, template_name)
        return self.validator.generate_improvement_suggestions(result)

    def get_available_templates(self) -> list[dict[str, str | list[str]]]:
        return [
            self.templates.get_template_info(name)
            for name in self.templates.get_available_templates()
        ]
