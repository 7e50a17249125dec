import pytest

from content_pipeline_core.util import corpus_fingerprint, sha256_bytes, slug_from_source_id, slugify


def test_sha256_bytes() -> None:
    assert (
        sha256_bytes(b"abc")
        == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Function Pointers", "function-pointers"),
        ("  C++ constexpr!  ", "c-constexpr"),
        ("exec()--family", "exec-family"),
        ("!!!", ""),
    ],
)
def test_slugify(value: str, expected: str) -> None:
    assert slugify(value) == expected


@pytest.mark.parametrize(
    ("source_id", "expected"),
    [
        ("auto.mdx", "auto"),
        ("cpp/Rvalue References.MD", "cpp/rvalue-references"),
        ("s3://bucket/blog/exec.md", "bucket/blog/exec"),
        ("windows\\path\\post.markdown", "windows/path/post"),
        ("notes.txt", "notes-txt"),
    ],
)
def test_slug_from_source_id(source_id: str, expected: str) -> None:
    assert slug_from_source_id(source_id) == expected


def test_corpus_fingerprint_ignores_order() -> None:
    a = corpus_fingerprint([("a", "one"), ("b", "two")])
    b = corpus_fingerprint([("b", "two"), ("a", "one")])
    assert a == b
    assert a != corpus_fingerprint([("a", "one"), ("b", "changed")])
