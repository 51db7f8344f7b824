import json

import pytest

import blog_store.runner as runner
from blog_store.errors import ConfigurationError, NotFoundError
from blog_store.runner import RunConfig, execute


@pytest.fixture
def populated(content_dir, write_entry):
    write_entry("june.md", title="June", description="Older post", date="2023-06-05")
    write_entry(
        "october.md",
        body="Newest *public* post.\n",
        title="October",
        description="Newer post",
        date="2023-10-31",
    )
    write_entry(
        "upcoming.md",
        title="Upcoming",
        description="Not ready",
        date="2024-02-01",
        draft=True,
    )
    write_entry(
        "dev-to.md",
        body="",
        title="On DEV",
        description="Off-site",
        date="2023-07-01",
        external=True,
        url="https://dev.to/someone/post",
    )
    return content_dir


def test_execute_lists_published_entries(populated, site_env):
    result = execute(RunConfig(content_dir=str(populated)), environ=site_env)
    payload = json.loads(result.output_text)

    assert payload["site"]["base_url"] == "https://example.com"
    assert [item["id"] for item in payload["entries"]] == ["october", "dev-to", "june"]
    first = payload["entries"][0]
    assert first["date"] == "2023-10-31"
    assert first["link"] == "https://example.com/blog/october/"
    assert "body" not in first
    assert payload["entries"][1]["link"] == "https://dev.to/someone/post"


def test_execute_includes_drafts_when_requested(populated, site_env):
    result = execute(
        RunConfig(content_dir=str(populated), include_drafts=True), environ=site_env
    )

    ids = [item["id"] for item in result.payload["entries"]]
    assert ids[0] == "upcoming"
    assert result.payload["entries"][0]["draft"] is True


def test_execute_single_entry_includes_body(populated, site_env):
    result = execute(
        RunConfig(content_dir=str(populated), entry_id="october", posts_path="posts"),
        environ=site_env,
    )

    assert result.payload["body"] == "Newest *public* post.\n"
    assert result.payload["link"] == "https://example.com/posts/october/"


def test_execute_unknown_entry_raises(populated, site_env):
    with pytest.raises(NotFoundError):
        execute(RunConfig(content_dir=str(populated), entry_id="missing"), environ=site_env)


def test_execute_checks_site_url_before_loading_content(monkeypatch, tmp_path):
    def fail_load(*args, **kwargs):
        raise AssertionError("content should not be loaded")

    monkeypatch.setattr(runner, "load_content_index", fail_load)

    with pytest.raises(ConfigurationError):
        execute(RunConfig(content_dir=str(tmp_path / "missing")), environ={})


def test_execute_writes_output_file(populated, site_env, tmp_path):
    output = tmp_path / "out" / "listing.json"

    result = execute(
        RunConfig(content_dir=str(populated), output_path=str(output)), environ=site_env
    )

    assert json.loads(output.read_text(encoding="utf-8")) == result.payload
