from __future__ import annotations


class PipelineError(Exception):
    """
    Base class for content pipeline failures.

    Every error carries enough context (source, slug, field or line) for a build
    report to point an author at the problem without re-running the build.
    """

    def __init__(
        self,
        message: str,
        *,
        source_id: str | None = None,
        slug: str | None = None,
        field: str | None = None,
        line: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.source_id = source_id
        self.slug = slug
        self.field = field
        self.line = line

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def location(self) -> str | None:
        if self.field:
            return f"field:{self.field}"
        if self.line is not None:
            return f"line:{self.line}"
        return None


class ParseError(PipelineError):
    pass


class ValidationError(ParseError):
    """Missing or malformed front-matter metadata."""


class MalformedDocumentError(ParseError):
    """Structural problem in the raw document (delimiters, fences, encoding)."""


class DuplicateSlugError(PipelineError):
    def __init__(self, slug: str, *, first_source_id: str, second_source_id: str):
        super().__init__(
            f"Duplicate slug {slug!r} in {first_source_id!r} and {second_source_id!r}",
            source_id=second_source_id,
            slug=slug,
        )
        self.first_source_id = first_source_id
        self.second_source_id = second_source_id


class RenderError(PipelineError):
    pass


class BuildCancelledError(PipelineError):
    pass


class NotFoundError(PipelineError, KeyError):
    def __init__(self, slug: str):
        super().__init__(f"No document with slug {slug!r}", slug=slug)

    def __str__(self) -> str:
        return self.message


class UnresolvedReferenceWarning(UserWarning):
    """A cross-reference that did not resolve; rendering degrades to literal text."""

    def __init__(self, *, slug: str, target: str, line: int | None = None):
        super().__init__(f"Unresolved reference {target!r} in {slug!r}")
        self.slug = slug
        self.target = target
        self.line = line
