"""Project metadata analysis feeding the prompt templates."""

import json
import re
import tomllib
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()


class ProjectMetadata(BaseModel):
    """Descriptive metadata about a project."""

    name: str
    description: str = ""
    version: str = "1.0.0"
    author: str | None = None
    license: str | None = None
    repository_url: str | None = None
    homepage: str | None = None
    keywords: list[str] = Field(default_factory=list)


class TechStack(BaseModel):
    """A detected language, optionally with a framework."""

    language: str
    framework: str | None = None
    category: Literal["frontend", "backend", "mobile", "desktop", "library", "tool"] = "library"
    confidence: float = 0.8


class ProjectFeature(BaseModel):
    """A feature advertised by the project."""

    name: str
    description: str
    category: str = "general"
    importance: float = 0.5


class ProjectAnalysis(BaseModel):
    """Everything the content generator knows about a project."""

    metadata: ProjectMetadata
    tech_stack: list[TechStack] = Field(default_factory=list)
    features: list[ProjectFeature] = Field(default_factory=list)


# Marker file -> detected technology
FILE_INDICATORS: list[tuple[str, TechStack]] = [
    ("package.json", TechStack(language="JavaScript", category="frontend", confidence=0.9)),
    ("tsconfig.json", TechStack(language="TypeScript", category="frontend", confidence=0.9)),
    ("pyproject.toml", TechStack(language="Python", category="backend", confidence=0.9)),
    ("requirements.txt", TechStack(language="Python", category="backend", confidence=0.8)),
    ("Cargo.toml", TechStack(language="Rust", category="backend", confidence=0.9)),
    ("go.mod", TechStack(language="Go", category="backend", confidence=0.9)),
    ("pom.xml", TechStack(language="Java", category="backend", confidence=0.8)),
    ("Gemfile", TechStack(language="Ruby", category="backend", confidence=0.8)),
    ("composer.json", TechStack(language="PHP", category="backend", confidence=0.8)),
]

JS_FRAMEWORKS = {
    "react": ("React", "frontend"),
    "vue": ("Vue.js", "frontend"),
    "@angular/core": ("Angular", "frontend"),
    "express": ("Express.js", "backend"),
    "next": ("Next.js", "frontend"),
    "nuxt": ("Nuxt.js", "frontend"),
}

PYTHON_FRAMEWORKS = {
    "django": ("Django", "backend"),
    "fastapi": ("FastAPI", "backend"),
    "flask": ("Flask", "backend"),
    "click": ("Click", "tool"),
    "streamlit": ("Streamlit", "frontend"),
}

FEATURE_LINE = re.compile(r"^\s*[-*]\s+(.+)$", re.MULTILINE)
README_NAMES = ("README.md", "readme.md", "Readme.md", "README.rst", "README.txt", "README")


def _requirement_name(requirement: str) -> str:
    return re.split(r"[\s<>=!~\[;]", requirement.strip(), maxsplit=1)[0].lower()


def extract_features(text: str) -> list[ProjectFeature]:
    """Extract features from bullet lines of a README.

    Args:
        text: README contents

    Returns:
        Features in document order, importance decaying with position
    """
    features = []
    for index, match in enumerate(FEATURE_LINE.finditer(text)):
        line = match.group(1).strip()
        if not 10 < len(line) < 200:
            continue
        name = line.split(".")[0].strip().strip("*").strip()
        if ":" in name:
            name = name.split(":")[0].strip().strip("*").strip()
        features.append(
            ProjectFeature(
                name=name or line,
                description=line,
                importance=max(0.5, 1 - index * 0.1),
            )
        )
    return features


class ProjectAnalyzer:
    """Reads a project directory into a ProjectAnalysis."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def analyze(self) -> ProjectAnalysis:
        """Analyze the project directory.

        Returns:
            ProjectAnalysis with metadata, tech stack and features
        """
        analysis = ProjectAnalysis(
            metadata=self.extract_metadata(),
            tech_stack=self.identify_tech_stack(),
            features=self.extract_features(),
        )
        logger.info(
            "project_analyzed",
            root=str(self.root),
            name=analysis.metadata.name,
            tech_stack=[tech.framework or tech.language for tech in analysis.tech_stack],
            features=len(analysis.features),
        )
        return analysis

    def _read_json(self, name: str) -> dict[str, Any] | None:
        path = self.root / name
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("project_file_unreadable", file=name, error=str(e))
            return None

    def _read_toml(self, name: str) -> dict[str, Any] | None:
        path = self.root / name
        if not path.is_file():
            return None
        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("project_file_unreadable", file=name, error=str(e))
            return None

    def extract_metadata(self) -> ProjectMetadata:
        metadata = ProjectMetadata(name=self.root.resolve().name)

        package_json = self._read_json("package.json")
        if package_json:
            repository = package_json.get("repository")
            if isinstance(repository, dict):
                repository = repository.get("url")
            author = package_json.get("author")
            if isinstance(author, dict):
                author = author.get("name")
            metadata = metadata.model_copy(
                update={
                    "name": package_json.get("name") or metadata.name,
                    "description": package_json.get("description") or "",
                    "version": package_json.get("version") or metadata.version,
                    "author": author,
                    "license": package_json.get("license"),
                    "repository_url": repository,
                    "homepage": package_json.get("homepage"),
                    "keywords": package_json.get("keywords") or [],
                }
            )

        pyproject = self._read_toml("pyproject.toml")
        project = (pyproject or {}).get("project") or {}
        if project:
            authors = project.get("authors") or []
            urls = project.get("urls") or {}
            license_value = project.get("license")
            if isinstance(license_value, dict):
                license_value = license_value.get("text")
            metadata = metadata.model_copy(
                update={
                    "name": project.get("name") or metadata.name,
                    "description": project.get("description") or metadata.description,
                    "version": project.get("version") or metadata.version,
                    "author": (authors[0].get("name") if authors else None) or metadata.author,
                    "license": license_value or metadata.license,
                    "repository_url": urls.get("Repository")
                    or urls.get("Source")
                    or metadata.repository_url,
                    "homepage": urls.get("Homepage") or metadata.homepage,
                    "keywords": project.get("keywords") or metadata.keywords,
                }
            )

        cargo = self._read_toml("Cargo.toml")
        package = (cargo or {}).get("package") or {}
        if package:
            metadata = metadata.model_copy(
                update={
                    "name": package.get("name") or metadata.name,
                    "description": package.get("description") or metadata.description,
                    "version": package.get("version") or metadata.version,
                }
            )

        return metadata

    def identify_tech_stack(self) -> list[TechStack]:
        tech_stack = [
            tech.model_copy() for name, tech in FILE_INDICATORS if (self.root / name).is_file()
        ]

        package_json = self._read_json("package.json") or {}
        js_deps = {**package_json.get("dependencies", {}), **package_json.get("devDependencies", {})}
        if "vscode" in package_json.get("engines", {}):
            tech_stack.append(
                TechStack(language="TypeScript", framework="VS Code Extension", category="tool")
            )
        for dep, (framework, category) in JS_FRAMEWORKS.items():
            if dep in js_deps:
                tech_stack.append(
                    TechStack(language="JavaScript", framework=framework, category=category)
                )

        pyproject = self._read_toml("pyproject.toml") or {}
        py_deps = {
            _requirement_name(requirement)
            for requirement in (pyproject.get("project") or {}).get("dependencies", [])
        }
        for dep, (framework, category) in PYTHON_FRAMEWORKS.items():
            if dep in py_deps:
                tech_stack.append(
                    TechStack(language="Python", framework=framework, category=category)
                )

        return tech_stack

    def extract_features(self) -> list[ProjectFeature]:
        for name in README_NAMES:
            path = self.root / name
            if path.is_file():
                try:
                    return extract_features(path.read_text(encoding="utf-8"))
                except OSError as e:
                    logger.warning("project_file_unreadable", file=name, error=str(e))
                    return []
        return []
