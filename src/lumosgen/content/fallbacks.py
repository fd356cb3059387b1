"""Static pages used when no generation attempt produced any text."""

FALLBACK_CONTENT: dict[str, str] = {
    "homepage": """\
# Welcome to {name}

{name} helps developers remove friction from their daily workflow.

## Features

- **Easy Integration**: Works alongside the tools you already use.
- **Automation**: Takes care of repetitive tasks so you can focus on code.
- **Developer Friendly**: Built by developers, for developers.

## Getting Started

1. Install {name}.
2. Configure your preferences.
3. Start building.

## Call to Action

Ready to get started? Download {name} and view the documentation today.
""",
    "about": """\
# About {name}

## Our Mission

We build tools that help developers ship better software with less effort.

## The Story

{name} started as a small set of helpers and grew with feedback from its users.

## Technology

{name} is built using modern, well tested technology.
""",
    "faq": """\
# Frequently Asked Questions

Quick answers to common questions.

## General

Basic questions and answers.

### What is {name}?
A developer tool that streamlines your workflow.

### How do I install it?
Follow the installation guide in the documentation.

### Where can I report problems?
Open an issue in the project repository.
""",
    "blog": """\
# Introducing {name}

This introduction explains what {name} does and why it matters.

## Highlights

{name} focuses on solving real developer problems with practical solutions.

## Conclusion

Try {name} today and see how it fits your workflow.
""",
}

GENERIC_FALLBACK = """\
# {name}

Fallback content generated for {template}.

## Next Steps

Please check the provider configuration and try again.
"""


def fallback_content(template: str, project_name: str) -> str:
    """Static page for a template, personalized with the project name."""
    text = FALLBACK_CONTENT.get(template)
    if text is None:
        return GENERIC_FALLBACK.replace("{name}", project_name).replace("{template}", template)
    return text.replace("{name}", project_name)
