import textwrap

import pytest


def _frontmatter(**fields):
    lines = ["---"]
    for key, value in fields.items():
        if isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n"


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def write_entry(content_dir):
    """Write a markdown entry below the content directory and return its path."""

    def _write(name, body="Some markdown body.\n", **fields):
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_frontmatter(**fields) + textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def site_env():
    return {"SITE": "https://example.com/base/"}
