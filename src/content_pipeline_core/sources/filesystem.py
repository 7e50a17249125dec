from __future__ import annotations

from pathlib import Path

from content_pipeline_core.models import RawDocument

DEFAULT_SUFFIXES = (".md", ".mdx")


def _is_ignored(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def iter_directory(root: str | Path, *, suffixes: tuple[str, ...] = DEFAULT_SUFFIXES) -> list[RawDocument]:
    """
    Read every document under ``root``, sorted by relative path.

    ``source_id`` is the POSIX path relative to ``root`` (``cpp/auto.mdx``).
    Dotfiles and dot-directories are skipped.
    """
    base = Path(root)
    if not base.is_dir():
        raise ValueError(f"Content directory does not exist: {base}")

    wanted = {s.lower() for s in suffixes}
    docs: list[RawDocument] = []
    for path in sorted(base.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in wanted:
            continue
        rel = path.relative_to(base)
        if _is_ignored(rel):
            continue
        docs.append(RawDocument(source_id=rel.as_posix(), body=path.read_bytes()))
    return docs
