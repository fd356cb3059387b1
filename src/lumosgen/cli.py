"""LumosGen command line interface."""

import asyncio
import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lumosgen.ai.errors import AllProvidersFailedError
from lumosgen.ai.service import AIService
from lumosgen.config import get_settings
from lumosgen.content.generator import MarketingContentGenerator
from lumosgen.content.models import ContentGenerationOptions, GeneratedArtifact
from lumosgen.content.project import ProjectAnalyzer
from lumosgen.content.templates import PromptTemplateLibrary, TemplateNotFoundError
from lumosgen.content.validator import ContentValidator
from lumosgen.utils.logging import configure_logging
from lumosgen.workflow.models import UpstreamFailurePolicy, WorkflowEvent
from lumosgen.workflow.pipeline import GENERATION_TASK, build_marketing_workflow

console = Console()
logger = structlog.get_logger()


@click.group()
@click.version_option(package_name="lumosgen")
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def main(log_level: str | None):
    """LumosGen - marketing content generation for software projects.

    Generates homepage, about, FAQ and blog pages from project metadata
    using DeepSeek, OpenAI or the local mock provider.
    """
    settings = get_settings()
    configure_logging(log_level or settings.log_level, settings.log_format)


def _score_style(score: int) -> str:
    if score >= 85:
        return "green"
    if score >= 70:
        return "yellow"
    return "red"


def _artifact_table(artifacts: list[GeneratedArtifact]) -> Table:
    table = Table(title="Generated Content", show_header=True, header_style="bold magenta")
    table.add_column("Template")
    table.add_column("Score", justify="right")
    table.add_column("Attempts", justify="right")
    table.add_column("Provider")
    table.add_column("Fallback")
    for artifact in artifacts:
        style = _score_style(artifact.score)
        table.add_row(
            artifact.template,
            f"[{style}]{artifact.score}[/{style}]",
            str(artifact.attempts),
            artifact.provider or "-",
            "yes" if artifact.used_fallback else "no",
        )
    return table


@main.command()
@click.argument("project_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--template", "-t", "templates", multiple=True,
    help="Template to generate (repeatable). Defaults to the full page set.",
)
@click.option(
    "--output", "-o", type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write Markdown files to",
)
@click.option("--tone", default="professional", help="Tone of the generated content")
def generate(project_dir: Path, templates: tuple[str, ...], output: Path | None, tone: str):
    """Generate marketing pages for PROJECT_DIR.

    Examples:
        lumosgen generate .
        lumosgen generate . -t homepage -t faq -o site/
    """
    settings = get_settings()
    analysis = ProjectAnalyzer(project_dir).analyze()
    options = ContentGenerationOptions(tone=tone)

    async def _generate() -> list[GeneratedArtifact]:
        service = AIService.from_settings(settings)
        await service.initialize()
        try:
            generator = MarketingContentGenerator(
                service, max_retries=settings.max_content_retries
            )
            if templates:
                return [
                    await generator.generate_with_template(name, analysis, options)
                    for name in templates
                ]
            content = await generator.generate_marketing_content(analysis, options)
            return content.artifacts()
        finally:
            console.print(f"[dim]Total cost: ${service.get_total_cost():.4f}[/dim]")
            await service.close()

    try:
        artifacts = asyncio.run(_generate())
    except TemplateNotFoundError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(2)
    except AllProvidersFailedError as e:
        logger.error("generation_failed", errors={k: str(v) for k, v in e.errors.items()})
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        sys.exit(1)

    console.print(_artifact_table(artifacts))

    if output is None:
        for artifact in artifacts:
            console.rule(artifact.template)
            console.print(artifact.content, markup=False)
        return

    output.mkdir(parents=True, exist_ok=True)
    for artifact in artifacts:
        path = output / f"{artifact.template}.md"
        path.write_text(artifact.content, encoding="utf-8")
        console.print(f"[green]✓[/green] Wrote {path}")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--template", "-t", default="homepage", help="Page type to validate against")
def validate(file: Path, template: str):
    """Validate an existing Markdown FILE.

    Exits with status 1 when the content is not valid.
    """
    validator = ContentValidator()
    result = validator.validate(file.read_text(encoding="utf-8"), template)

    style = _score_style(result.score)
    console.print(f"Score: [{style}]{result.score}/100[/{style}]")
    for error in result.errors:
        console.print(f"[red]✗ {error.severity}:[/red] {escape(error.message)}", highlight=False)
    for warning in result.warnings:
        console.print(f"[yellow]! {escape(warning.message)}[/yellow]", highlight=False)
    if result.suggestions:
        console.print("\n[bold]Suggestions:[/bold]")
        for suggestion in result.suggestions:
            console.print(f"  {suggestion}", markup=False)

    if not result.is_valid:
        sys.exit(1)


@main.command()
@click.argument("project_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--content-type", "-c", default="homepage", help="Page type to generate")
@click.option("--skip-on-failure", is_flag=True, help="Skip tasks whose dependency failed")
def workflow(project_dir: Path, content_type: str, skip_on_failure: bool):
    """Run the strategy -> generation workflow for PROJECT_DIR."""
    settings = get_settings()
    analysis = ProjectAnalyzer(project_dir).analyze()
    policy = UpstreamFailurePolicy.SKIP if skip_on_failure else UpstreamFailurePolicy.RUN

    def on_event(event: WorkflowEvent) -> None:
        if event.type == "task_started":
            console.print(f"[dim]→ {event.task_id}[/dim]")
        elif event.type == "task_completed":
            console.print(f"[green]✓ {event.task_id}[/green]")
        elif event.type in ("task_failed", "task_skipped"):
            console.print(f"[red]✗ {event.task_id}: {escape(event.result.error or '')}[/red]")

    async def _run():
        service = AIService.from_settings(settings)
        await service.initialize()
        try:
            engine = build_marketing_workflow(
                service,
                task_timeout=settings.workflow_task_timeout,
                max_retries=settings.max_content_retries,
                upstream_failure_policy=policy,
            )
            engine.add_listener(on_event)
            return await engine.execute(
                {"projectAnalysis": analysis, "contentType": content_type}
            )
        finally:
            await service.close()

    results = asyncio.run(_run())

    generation = results.get(GENERATION_TASK)
    if generation is None or not generation.success:
        sys.exit(1)
    artifact = GeneratedArtifact.model_validate(generation.data)
    console.print(_artifact_table([artifact]))
    console.print(artifact.content, markup=False)


@main.command()
def health():
    """Initialize providers and report their availability."""
    settings = get_settings()

    async def _check():
        service = AIService.from_settings(settings)
        await service.initialize()
        try:
            return await service.health_check()
        finally:
            await service.close()

    report = asyncio.run(_check())

    colors = {"healthy": "green", "degraded": "yellow", "unhealthy": "red"}
    color = colors[report.status]
    console.print(f"Status: [{color}]{report.status}[/{color}]")
    console.print(f"Current provider: {report.current_provider or '-'}")

    table = Table(title="Providers", show_header=True, header_style="bold magenta")
    table.add_column("Provider")
    table.add_column("Available")
    table.add_column("Errors", justify="right")
    for name, provider in report.providers.items():
        table.add_row(
            name,
            "[green]yes[/green]" if provider.available else "[red]no[/red]",
            str(provider.errors),
        )
    console.print(table)

    if report.status == "unhealthy":
        sys.exit(1)


@main.command(name="templates")
def list_templates():
    """List available content templates."""
    library = PromptTemplateLibrary()
    for name in library.get_available_templates():
        info = library.get_template_info(name)
        console.print(f"[green]• {name}[/green]: {info['description']}")
        for item in info["structure"]:
            console.print(f"    - {item}", markup=False)


if __name__ == "__main__":
    main()
