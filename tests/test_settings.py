import pydantic
import pytest

from content_pipeline_core.config import Settings


def test_settings_defaults() -> None:
    settings = Settings.model_validate({})
    assert settings.pipeline_version == "v1"
    assert settings.default_authors == ["default"]
    assert settings.link_prefix == "/blog/"
    assert settings.build_workers == 4
    assert settings.nats_url is None


def test_settings_parses_env_style_values() -> None:
    settings = Settings.model_validate(
        {
            "DEFAULT_AUTHORS": "alice, bob",
            "LINK_PREFIX": "posts",
            "BUILD_WORKERS": "8",
            "NATS_URL": "nats://localhost:4222",
        }
    )
    assert settings.default_authors == ["alice", "bob"]
    assert settings.link_prefix == "/posts/"
    assert settings.build_workers == 8


def test_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_AUTHORS", "carol")
    monkeypatch.setenv("POSTS_PER_PAGE", "10")
    settings = Settings()
    assert settings.default_authors == ["carol"]
    assert settings.posts_per_page == 10


@pytest.mark.parametrize("field", ["BUILD_WORKERS", "POSTS_PER_PAGE"])
def test_settings_rejects_non_positive(field: str) -> None:
    with pytest.raises(pydantic.ValidationError):
        Settings.model_validate({field: 0})
