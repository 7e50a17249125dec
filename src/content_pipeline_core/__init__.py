from content_pipeline_core.config import Settings, load_settings
from content_pipeline_core.errors import (
    BuildCancelledError,
    DuplicateSlugError,
    MalformedDocumentError,
    NotFoundError,
    ParseError,
    PipelineError,
    RenderError,
    UnresolvedReferenceWarning,
    ValidationError,
)
from content_pipeline_core.index import CorpusIndex, Page, build_index
from content_pipeline_core.models import CodeBlock, Document, RawDocument
from content_pipeline_core.parser import parse
from content_pipeline_core.pipeline import (
    BuildIssue,
    BuildReport,
    BuildResult,
    build_from_settings,
    export_build,
    load_raw_documents,
    run_build,
)
from content_pipeline_core.render import CodeNode, LinkSpan, ProseNode, RenderedOutput, TextSpan, render
from content_pipeline_core.writer import serialize

__all__ = [
    "__version__",
    "BuildCancelledError",
    "BuildIssue",
    "BuildReport",
    "BuildResult",
    "CodeBlock",
    "CodeNode",
    "CorpusIndex",
    "Document",
    "DuplicateSlugError",
    "LinkSpan",
    "MalformedDocumentError",
    "NotFoundError",
    "Page",
    "ParseError",
    "PipelineError",
    "ProseNode",
    "RawDocument",
    "RenderError",
    "RenderedOutput",
    "Settings",
    "TextSpan",
    "UnresolvedReferenceWarning",
    "ValidationError",
    "build_from_settings",
    "build_index",
    "export_build",
    "load_raw_documents",
    "load_settings",
    "parse",
    "render",
    "run_build",
    "serialize",
]

__version__ = "0.1.0"
