"""
Detection service — work out a client project's technology stack.

Looks at a project's manifest files and evaluates a fixed, ordered list
of detection rules against them. Matching is a literal, case-sensitive
substring test on raw file text; no manifest is parsed. Quotes are part
of the needles, so ``'"laravel"'`` does not match ``"laravel/framework"``.

Pure logic — read-only filesystem access, never raises.
"""

from __future__ import annotations

import logging
from pathlib import Path

from agentconfig.core.models.stack import DetectionRule, StackLabel, StackResult

logger = logging.getLogger(__name__)

_PYTHON_MANIFESTS = ["requirements.txt", "pyproject.toml", "Pipfile"]


def build_rules(*, composer_implies_laravel: bool = False) -> tuple[DetectionRule, ...]:
    """Build the ordered rule list.

    Args:
        composer_implies_laravel: Treat any ``composer.json`` as Laravel,
            even when none of the Laravel/PHP needles appear in it.
    """
    laravel = DetectionRule(
        label=StackLabel.LARAVEL,
        files_any_of=["composer.json"],
        content_contains=(
            {}
            if composer_implies_laravel
            else {"composer.json": ['"laravel"', '"illuminate', '"php"']}
        ),
    )

    return (
        laravel,
        DetectionRule(
            label=StackLabel.NEXTJS,
            files_any_of=["next.config.js", "next.config.mjs", "next.config.ts"],
        ),
        DetectionRule(
            label=StackLabel.NODEJS,
            files_any_of=["package.json"],
            content_contains={
                "package.json": [
                    '"express"', '"fastify"', '"koa"', '"hapi"', '"nest"', '"nestjs"',
                ],
            },
            unless=[StackLabel.NEXTJS],
        ),
        DetectionRule(
            label=StackLabel.EXPO,
            files_any_of=["app.json"],
            content_contains={"app.json": ["expo"]},
        ),
        DetectionRule(
            label=StackLabel.REACTNATIVE,
            dirs_any_of=["android", "ios"],
            unless=[StackLabel.EXPO],
        ),
        # Django / Flask / FastAPI form an elif chain: first match wins.
        DetectionRule(
            label=StackLabel.DJANGO,
            files_any_of=_PYTHON_MANIFESTS,
            marker_files=["manage.py"],
            content_contains={"requirements.txt": ['"django"']},
        ),
        DetectionRule(
            label=StackLabel.FLASK,
            files_any_of=_PYTHON_MANIFESTS,
            content_contains={"requirements.txt": ['"flask"', '"Flask"']},
            unless=[StackLabel.DJANGO],
        ),
        DetectionRule(
            label=StackLabel.FASTAPI,
            files_any_of=_PYTHON_MANIFESTS,
            content_contains={"requirements.txt": ['"fastapi"', '"uvicorn"']},
            unless=[StackLabel.DJANGO, StackLabel.FLASK],
        ),
        DetectionRule(
            label=StackLabel.RAILS,
            files_any_of=["Gemfile"],
            content_contains={"Gemfile": ["'rails'"]},
        ),
        DetectionRule(
            label=StackLabel.GO,
            files_any_of=["go.mod"],
        ),
    )


DEFAULT_RULES: tuple[DetectionRule, ...] = build_rules()


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def _read_text(path: Path) -> str | None:
    """Read a manifest as text, or None if it can't be read."""
    if not _is_file(path):
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None


def _has_evidence(directory: Path, rule: DetectionRule) -> bool:
    """Marker files or content needles — either is enough."""
    if any(_is_file(directory / f) for f in rule.marker_files):
        return True

    for filename, needles in rule.content_contains.items():
        content = _read_text(directory / filename)
        if content is None:
            continue
        if any(needle in content for needle in needles):
            return True

    return False


def match_rule(
    directory: Path,
    rule: DetectionRule,
    found: list[StackLabel] | None = None,
) -> bool:
    """Check a single detection rule against a directory.

    Args:
        directory: Project root to inspect.
        rule: The rule to evaluate.
        found: Labels contributed so far, consulted for ``unless``.

    Returns:
        True if the rule contributes its label.
    """
    if found and any(label in found for label in rule.unless):
        return False

    if rule.files_any_of and not any(_is_file(directory / f) for f in rule.files_any_of):
        return False

    if rule.dirs_any_of and not any(_is_dir(directory / d) for d in rule.dirs_any_of):
        return False

    if rule.needs_evidence and not _has_evidence(directory, rule):
        return False

    return True


def detect_stack(
    project_root: Path | str,
    rules: tuple[DetectionRule, ...] | list[DetectionRule] | None = None,
) -> StackResult:
    """Detect the stack labels of a project directory.

    Every rule is evaluated in order; labels are collected in rule order
    and de-duplicated. A directory with no recognised manifests (or one
    that can't be read at all) yields ``[common]``.
    """
    directory = Path(project_root)
    if rules is None:
        rules = DEFAULT_RULES

    found: list[StackLabel] = []
    for rule in rules:
        if rule.label in found:
            continue
        if match_rule(directory, rule, found):
            logger.info("Detected: %s", rule.label.value)
            found.append(rule.label)

    result = StackResult(labels=found)
    if result.is_common_only:
        logger.info("No recognized tech stack in %s, using common only", directory)
    else:
        logger.info("Final tech stack: %s", result.as_csv())
    return result
