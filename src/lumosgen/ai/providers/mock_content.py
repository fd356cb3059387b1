"""Canned responses returned by the mock provider."""

HOMEPAGE = """\
# Ship Better Software With Less Effort

Welcome to a toolkit that helps developers move from idea to production without the usual friction. It combines sensible defaults, clear documentation and a fast feedback loop so your team can focus on the work that matters.

## Features

- **Fast Setup**: Install in under a minute and start with a working configuration that follows community best practices.
- **Reliable Automation**: Repetitive chores such as formatting, testing and releasing run automatically on every change.
- **Clear Insights**: Readable reports show what changed, what broke and what needs attention next.
- **Flexible Integrations**: Connect the tools you already use through a small and well documented plugin interface.

## Why Developers Choose It

Modern projects juggle many moving parts. This toolkit keeps them in one place and gives every contributor the same dependable workflow, whether they joined yesterday or have maintained the code for years.

Teams report shorter review cycles and fewer surprises in production because problems surface early, while they are still cheap to fix.

## Getting Started

1. Install the package with your usual package manager.
2. Run the setup command inside your repository.
3. Commit the generated configuration and push your first change.

That is all it takes to get a consistent, automated workflow for your whole team.

## Call to Action

Ready to simplify your development process? Get started today, read the guides in the documentation, and join the community of developers who ship with confidence. Download the latest release and see the difference in your very first week."""

ABOUT = """\
# About the Project

This project exists to make everyday development work calmer and more predictable for teams of every size.

## Our Mission

Our mission is to remove the busywork that slows developers down. We believe good tooling should fade into the background and let people concentrate on solving real problems.

## The Story

The project started as a handful of scripts written to tame a growing codebase. Colleagues kept asking to borrow them, so the scripts were cleaned up, documented and shared. What began as a weekend experiment became a journey shaped by feedback from a friendly and curious community.

Every release since then has followed the same rule: listen to the people who use the tool and fix the things that get in their way.

## Technology

The project is built using a modern, well tested stack. A small core keeps behavior predictable, while a plugin layer lets teams adapt the framework to their own needs. Automated tests run on every change, and the documentation is generated from the same source as the code.

## Our Values

- **Developer First**: We build the tools we want to use ourselves.
- **Openness**: Decisions, roadmaps and discussions happen in public.
- **Quality**: Reliability matters more than novelty.

## Connect With Us

We love hearing from fellow developers. Open an issue, start a discussion or send a pull request, and help shape where the project goes next."""

BLOG = """\
# How Automation Turns Good Teams Into Great Ones

Every team wants to ship faster without breaking things. In this introduction to practical automation we look at how a few well chosen habits remove friction from daily development and free people to do their best work.

## The Cost of Manual Work

Manual steps are easy to skip when a deadline is close. A forgotten test run or an inconsistent release note rarely causes a disaster on its own, but small slips add up. Over months they erode trust in the codebase and slow every change down.

Automation replaces those fragile habits with repeatable processes. When formatting, testing and packaging happen on every commit, nobody has to remember them and nobody has to argue about them in code review.

## Key Features in Action

Three habits make the biggest difference for most teams.

### Consistent Formatting

A shared formatter ends style debates. Reviews focus on behavior and design instead of whitespace, and new contributors produce code that looks like everyone else's from their first pull request.

### Continuous Testing

Running the test suite on every change catches regressions while the context is still fresh. Fixing a problem five minutes after writing it is far cheaper than tracking it down weeks later in production.

### Painless Releases

Release automation builds artifacts, writes changelogs and publishes packages with a single command. Releases become routine events rather than stressful rituals that only one person knows how to perform.

## Real-World Use Cases

Small open source projects use automation to keep maintenance sustainable for volunteers with limited time. Larger companies use the same techniques to coordinate dozens of teams that share libraries and infrastructure. In both cases the goal is identical: make the right thing the easy thing.

## Getting Started

Pick the most painful manual step in your workflow and automate it first. Measure how much time it saves, share the result with your team, and then move on to the next step. Progress compounds quickly once the first wins are visible.

## What Comes Next

Once the basics are automated, look at the slower feedback loops. Preview environments, dependency updates and performance checks are natural next candidates. Each one follows the same pattern: notice the friction, script the fix, and let the machine repeat it reliably from then on.

## Conclusion

Automation is not about replacing developers. It is about removing the repetitive work that drains focus and energy. Start small, keep improving, and your team will ship better software with less stress. Try it on your next project and see the difference for yourself."""

FAQ = """\
# Frequently Asked Questions

Find quick answers to the questions developers ask most often. Each of the answers below is kept short and practical.

## Getting Started

The basics you need before your first run.

### What does this tool do?
It automates routine development chores such as formatting, testing and releasing, so you can focus on writing code.

### How do I install it?
Install the package with your usual package manager and run the setup command inside your repository.

### What are the system requirements?
Any recent operating system with a supported language runtime works. No extra services are required.

## Usage

Day to day questions about working with the tool.

### How do I configure it for my project?
Edit the generated configuration file. Every option is documented and has a sensible default.

### Can I use it with my existing tools?
Yes. The plugin interface connects to popular editors, continuous integration services and package registries.

## Support

Where to turn when something goes wrong.

### Where can I report a bug?
Open an issue in the project repository and include the steps needed to reproduce the problem.

### How can I contribute?
Read the contribution guide, pick an open issue and send a pull request. New contributors are always welcome."""

SEO = (
    "developer tools, software development platform, workflow automation, "
    "continuous integration, release automation, open source, developer experience"
)

PROJECT_ANALYSIS = """\
# Project Analysis Summary

## Technology Stack

- **Language**: Python
- **Framework**: None detected
- **Tooling**: Automated tests and packaging metadata

## Key Features

- **Automation**: Routine development chores run without manual steps.
- **Configuration**: Sensible defaults with documented overrides.

## Marketing Opportunities

- **Audience**: Individual developers and small engineering teams
- **Value**: Less busywork, faster and safer releases

## Recommendations

1. Lead with the time saved on routine work.
2. Show a short getting started example.
3. Highlight reliability and test coverage."""

GREETING = (
    "Hello! I'm a mock AI assistant ready to help you with content generation "
    "and project analysis."
)

DEFAULT = """\
Thank you for your request. I understand you're looking for assistance with: "{request}"

As a mock AI assistant, I provide realistic responses for testing and demonstration.
In production this request would be handled by DeepSeek or OpenAI.

I can help with:
- Content generation and marketing copy
- Project analysis and technical insights
- SEO optimization and keyword research
- Documentation and user guides"""
