"""Prompt templates for each marketing page type."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from lumosgen.ai.errors import LumosGenError
from lumosgen.content.project import ProjectAnalysis

if TYPE_CHECKING:
    from lumosgen.content.models import ContentGenerationOptions


class TemplateNotFoundError(LumosGenError, KeyError):
    """Raised when a template name is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Template '{self.name}' not found"


class PromptTemplate(BaseModel):
    """A prompt plus the structure the generated page is expected to have."""

    name: str
    description: str
    template: str
    expected_structure: list[str] = Field(default_factory=list)
    validation_rules: list[str] = Field(default_factory=list)


HOMEPAGE_PROMPT = """\
Generate marketing homepage content in Markdown for the project.

PROJECT CONTEXT:
- Name: {{project_name}}
- Description: {{project_description}}
- Tech Stack: {{tech_stack}}
- Key Features: {{features}}
- Target Audience: {{target_audience}}

CONTENT REQUIREMENTS:
1. Write in a {{tone}} tone for {{target_audience}}
2. Focus on developer benefits and technical value
3. Use action-oriented language and keep sections scannable

REQUIRED STRUCTURE:
# {{project_name}} - [Compelling Headline]

[2-3 sentence hero description of what the project does and its main benefit]

## Features

- **[Feature Name]**: [Specific benefit and technical detail]
(at least three feature bullets)

## Why Choose {{project_name}}?

[2-3 short paragraphs with the unique value proposition]

## Getting Started

[2-3 simple steps using {{installation_method}}]

## Call to Action

[Invite the reader to get started, download or view the documentation]

FORMATTING RULES:
- Exactly one H1 heading
- Bold feature names in bullets
- Total length: 300-500 words
"""

ABOUT_PROMPT = """\
Generate an about page in Markdown for the project.

PROJECT CONTEXT:
- Name: {{project_name}}
- Description: {{project_description}}
- Tech Stack: {{tech_stack}}
- Author/Team: {{author}}
- Project Type: {{project_type}}

CONTENT REQUIREMENTS:
1. Tell the story behind the project
2. Explain the mission and vision
3. Highlight the technology and why it was chosen
4. Write in a {{tone}} tone

REQUIRED STRUCTURE:
# About {{project_name}}

## Our Mission

[2-3 sentences on the purpose of the project]

## The Story

[2-3 paragraphs on how the project started and its journey]

## Technology

[Why {{tech_stack}} was chosen and how the project is built]

## Our Values

- **[Value]**: [One sentence]

## Connect With Us

[How to reach the team, report issues and contribute]

FORMATTING RULES:
- Exactly one H1 heading
- Total length: 400-600 words
"""

FAQ_PROMPT = """\
Generate an FAQ page in Markdown for {{project_name}}.

PROJECT CONTEXT:
- Name: {{project_name}}
- Description: {{project_description}}
- Tech Stack: {{tech_stack}}
- Key Features: {{features}}
- Installation: {{installation_method}}

CONTENT REQUIREMENTS:
1. Cover the questions developers ask first: installation, usage, troubleshooting
2. Give clear, actionable answers
3. Write in a {{tone}} tone

REQUIRED STRUCTURE:
# Frequently Asked Questions

[One sentence introducing the questions and answers below]

## Getting Started

[One sentence introducing the group]

### [Question ending with a question mark?]
[Answer]

(group related questions under H2 headings; at least seven H3 questions in total)

---

**Still have questions?** Open an issue at {{repository_url}}.

FORMATTING RULES:
- Use H3 (###) for every question
- Every H2 group starts with a short sentence
- Total length: 500-800 words
"""

BLOG_PROMPT = """\
Generate a technical blog post in Markdown introducing {{project_name}}.

PROJECT CONTEXT:
- Name: {{project_name}}
- Description: {{project_description}}
- Tech Stack: {{tech_stack}}
- Key Features: {{features}}
- Keywords: {{keywords}}

CONTENT REQUIREMENTS:
1. Open with an introduction paragraph that hooks the reader
2. Include practical examples and use cases
3. Write in a {{tone}} tone

REQUIRED STRUCTURE:
# [Engaging Title Related to {{project_name}}]

[Introduction paragraph before any other heading]

## What Makes {{project_name}} Special?

[2-3 paragraphs]

## Key Features in Action

[One sentence introducing the features]

### [Feature Name]
[Explanation with a practical example]

## Getting Started

[Practical steps for readers to try it]

## Conclusion

[Summary and an invitation to try {{project_name}} at {{repository_url}}]

FORMATTING RULES:
- Exactly one H1 heading
- Total length: 600-1000 words
"""

DEFAULT_TEMPLATES = [
    PromptTemplate(
        name="homepage",
        description="Marketing homepage with hero section, features, and CTA",
        template=HOMEPAGE_PROMPT,
        expected_structure=[
            "H1 headline",
            "Hero description paragraph",
            "Features section with H2",
            "Value proposition section",
            "Getting started section",
            "Call-to-action",
        ],
        validation_rules=[
            "Must start with H1 (#)",
            "Must include at least 3 features with bullet points",
            "Must end with call-to-action",
            "Must be 300-500 words",
        ],
    ),
    PromptTemplate(
        name="about",
        description="About page with mission, story and technology",
        template=ABOUT_PROMPT,
        expected_structure=[
            "H1 About title",
            "Mission statement",
            "Story section",
            "Technology section",
            "Values section",
            "Contact section",
        ],
        validation_rules=[
            "Must start with H1 (#)",
            "Must include mission statement",
            "Must mention technology stack",
            "Must be 400-600 words",
        ],
    ),
    PromptTemplate(
        name="faq",
        description="Frequently asked questions in a clear Q&A format",
        template=FAQ_PROMPT,
        expected_structure=[
            "H1 FAQ title",
            "Introduction paragraph",
            "Q&A sections with H3 questions",
            "Contact line for more questions",
        ],
        validation_rules=[
            "Must start with H1 (#)",
            "Questions must use H3 (###)",
            "Must have at least 5 Q&A pairs",
        ],
    ),
    PromptTemplate(
        name="blog",
        description="Technical blog post with introduction, content, and conclusion",
        template=BLOG_PROMPT,
        expected_structure=[
            "H1 blog title",
            "Introduction paragraph",
            "Main content sections with H2/H3",
            "Conclusion",
        ],
        validation_rules=[
            "Must start with H1 (#)",
            "Must have clear introduction",
            "Must have conclusion section",
            "Should be 600-1000 words",
        ],
    ),
]


class PromptTemplateLibrary:
    """Registry of prompt templates keyed by page type."""

    def __init__(self, templates: list[PromptTemplate] | None = None):
        self._templates: dict[str, PromptTemplate] = {}
        for template in templates or DEFAULT_TEMPLATES:
            self.register(template)

    def register(self, template: PromptTemplate) -> None:
        self._templates[template.name] = template

    def get_template(self, name: str) -> PromptTemplate:
        """Look up a template.

        Raises:
            TemplateNotFoundError: If no template has that name
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name) from None

    def get_available_templates(self) -> list[str]:
        return list(self._templates)

    def get_template_info(self, name: str) -> dict[str, str | list[str]]:
        template = self.get_template(name)
        return {
            "name": template.name,
            "description": template.description,
            "structure": list(template.expected_structure),
        }

    def generate_prompt(
        self,
        name: str,
        analysis: ProjectAnalysis,
        options: "ContentGenerationOptions",
    ) -> str:
        """Fill a template with project data.

        Args:
            name: Template name
            analysis: Project analysis
            options: Generation options (tone is substituted)

        Returns:
            Prompt text with every ``{{variable}}`` replaced

        Raises:
            TemplateNotFoundError: If no template has that name
        """
        template = self.get_template(name)
        metadata = analysis.metadata
        variables = {
            "project_name": metadata.name,
            "project_description": metadata.description or "An innovative software project",
            "tech_stack": ", ".join(dict.fromkeys(tech.language for tech in analysis.tech_stack))
            or "Not specified",
            "features": ", ".join(feature.name for feature in analysis.features)
            or "Not specified",
            "author": metadata.author or "Development Team",
            "tone": options.tone,
            "target_audience": "developers and technical teams",
            "repository_url": metadata.repository_url or "#",
            "keywords": ", ".join(metadata.keywords) or "Not specified",
            "project_type": determine_project_type(analysis),
            "installation_method": determine_installation_method(analysis),
        }

        prompt = template.template
        for key, value in variables.items():
            prompt = prompt.replace("{{" + key + "}}", value)

        if options.language != "en":
            prompt += f"\nWrite the content in language: {options.language}\n"
        if options.include_code_examples:
            prompt += "\nInclude short code examples where they help.\n"
        return prompt


def _languages(analysis: ProjectAnalysis) -> set[str]:
    return {tech.language for tech in analysis.tech_stack}


def _is_vscode_extension(analysis: ProjectAnalysis) -> bool:
    return any(tech.framework and "VS Code" in tech.framework for tech in analysis.tech_stack)


def determine_project_type(analysis: ProjectAnalysis) -> str:
    languages = _languages(analysis)
    if _is_vscode_extension(analysis):
        return "VS Code Extension"
    if languages & {"JavaScript", "TypeScript"}:
        return "JavaScript/TypeScript Project"
    if "Python" in languages:
        return "Python Project"
    return "Software Project"


def determine_installation_method(analysis: ProjectAnalysis) -> str:
    languages = _languages(analysis)
    if _is_vscode_extension(analysis):
        return "VS Code Extension Marketplace"
    if languages & {"JavaScript", "TypeScript"}:
        return "npm install"
    if "Python" in languages:
        return "pip install"
    return "Download and install"
