import datetime
from pathlib import Path

import pytest

from blogsite.content import Post

NOW = datetime.datetime(2025, 1, 1)


def write(root: Path, rel: str, text: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def post_text(title: str, date: str, body: str = "Some text.", draft: bool = False,
              tags: list[str] | None = None, extra: str = "") -> str:
    tags_line = f"tags: [{', '.join(tags)}]\n" if tags else ""
    return (
        f"---\ntitle: {title}\ndate: {date}\ndraft: {'true' if draft else 'false'}\n"
        f"{tags_line}{extra}---\n\n{body}\n"
    )


def make_post(title: str, date: datetime.datetime | None, section: str = "posts", **kwargs) -> Post:
    slug = kwargs.pop("slug", title.lower().replace(" ", "-"))
    return Post(
        source=Path(f"content/{section}/{slug}.md"),
        section=section,
        filename=slug,
        slug=slug,
        title=title,
        date=date,
        **kwargs,
    )


@pytest.fixture
def site(tmp_path):
    """A small blog: three published posts, a draft, a future post, a broken post, a page and a bundle."""
    root = tmp_path / "site"
    write(root, "config.yaml", "title: Test Blog\nbase_url: https://example.org/\nauthor: Tester\n")
    write(root, "content/posts/first.md", post_text(
        "First Post", "2019-01-01", body="Hello from the first post.\n\n<!--more-->\n\nMore first text.",
        tags=["Hugo"],
    ))
    write(root, "content/posts/second.md", post_text(
        "Second Post", "2020-05-05", body="```python\nprint('hi')\n```",
        tags=["hugo", "Deployment"],
    ))
    write(root, "content/posts/draft.md", post_text("Secret Draft", "2020-06-01", draft=True, tags=["hidden"]))
    write(root, "content/posts/future.md", post_text("Future Post", "2999-01-01"))
    write(root, "content/posts/broken.md", "---\ntitle: [oops\n---\nBody\n")
    write(root, "content/posts/_index.md", "Section intro, not a post.\n")
    write(root, "content/about.md", "---\ntitle: About\n---\n\nAbout me.\n")
    write(root, "content/posts/bundle/index.md", post_text(
        "Bundled Post", "2019-06-01", body="![diagram](diagram.png)",
    ))
    write(root, "content/posts/bundle/notes.md", "Not a post of its own.\n")
    (root / "content/posts/bundle/diagram.png").write_bytes(b"\x89PNG fake")
    write(root, "static/css/style.css", "body { margin: 0; }\n")
    return root
