"""
Stack model — technology labels and how to detect them.

A stack label names a technology found in a client project. Detection
rules describe, as data, which files and file contents contribute a
label. The detector evaluates them in a fixed order.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class StackLabel(StrEnum):
    """Closed set of stack labels the detector can produce."""

    LARAVEL = "laravel"
    NEXTJS = "nextjs"
    NODEJS = "nodejs"
    EXPO = "expo"
    REACTNATIVE = "reactnative"
    DJANGO = "django"
    FLASK = "flask"
    FASTAPI = "fastapi"
    RAILS = "rails"
    GO = "go"
    COMMON = "common"


class DetectionRule(BaseModel):
    """How to detect one stack label in a directory.

    A rule matches when every configured gate holds:

    - files_any_of: at least one file must exist
    - dirs_any_of: at least one directory must exist
    - content_contains / marker_files: at least one needle is a literal
      substring of its file, or at least one marker file exists

    ``unless`` lists labels that, once contributed by an earlier rule,
    stop this rule from being evaluated at all.
    """

    label: StackLabel
    files_any_of: list[str] = Field(default_factory=list)
    dirs_any_of: list[str] = Field(default_factory=list)
    content_contains: dict[str, list[str]] = Field(default_factory=dict)
    # e.g. {"composer.json": ['"laravel"', '"illuminate']}; raw text, case-sensitive
    marker_files: list[str] = Field(default_factory=list)
    unless: list[StackLabel] = Field(default_factory=list)

    @property
    def needs_evidence(self) -> bool:
        """True when the rule requires content or marker evidence."""
        return bool(self.content_contains or self.marker_files)


class StackResult(BaseModel):
    """Ordered, de-duplicated stack labels for one project directory.

    An empty label list normalises to ``[common]``.
    """

    labels: list[StackLabel] = Field(default_factory=list, validate_default=True)

    @field_validator("labels")
    @classmethod
    def _dedupe_and_default(cls, value: list[StackLabel]) -> list[StackLabel]:
        unique = list(dict.fromkeys(value))
        return unique or [StackLabel.COMMON]

    @classmethod
    def from_labels(cls, labels: Iterable[StackLabel | str]) -> StackResult:
        return cls(labels=[StackLabel(label) for label in labels])

    def as_csv(self) -> str:
        """Render as ``laravel,nextjs`` — the detect command's output format."""
        return ",".join(label.value for label in self.labels)

    @property
    def is_common_only(self) -> bool:
        return self.labels == [StackLabel.COMMON]

    def __contains__(self, label: object) -> bool:
        return label in self.labels
