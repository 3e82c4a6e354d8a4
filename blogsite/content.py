import re
import html
import datetime
from dataclasses import dataclass, field
from pathlib import Path

import markdown as md_lib

from blogsite.config import SiteConfig
from blogsite.errors import FrontMatterError
from blogsite.frontmatter import (
    count_words,
    parse_date,
    split_front_matter,
    split_summary,
    to_bool,
    to_list,
    truncate_words,
)
from blogsite.permalinks import normalize_path, safe_slug

BUNDLE_INDEX = "index.md"
H1_RE = re.compile(r"^ {0,3}#[ \t]+(.+?)[ \t]*#*[ \t]*$")
FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
TAG_RE = re.compile(r"<[^>]+>")

# Average reading speed used for reading_time (minutes)
WORDS_PER_MINUTE = 213


@dataclass(eq=False)
class Post:
    source: Path
    section: str
    filename: str
    slug: str
    title: str
    date: datetime.datetime | None = None
    lastmod: datetime.datetime | None = None
    draft: bool = False
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    description: str = ""
    summary_html: str = ""
    body_html: str = ""
    truncated: bool = False
    word_count: int = 0
    url: str | None = None
    bundle_dir: Path | None = None
    params: dict = field(default_factory=dict)
    permalink: str = ""
    newer: "Post | None" = field(default=None, repr=False)
    older: "Post | None" = field(default=None, repr=False)

    @property
    def is_page(self) -> bool:
        return not self.section

    @property
    def reading_time(self) -> int:
        return max(1, (self.word_count + WORDS_PER_MINUTE - 1) // WORDS_PER_MINUTE)

    def taxonomy(self, name: str) -> list[str]:
        return getattr(self, name)

# ==============================
# Helpers
# ==============================

def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def write_text(path: Path, text: str):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def markdown_to_html(markdown_text: str) -> str:
    return md_lib.markdown(
        markdown_text,
        extensions=["extra", "toc", "fenced_code", "sane_lists", "smarty"],
        output_format="html5",
    )


def html_to_text(fragment: str) -> str:
    return html.unescape(TAG_RE.sub(" ", fragment))


def discover_content(content_dir: Path) -> list[Path]:
    """
    Every Markdown file under content_dir, sorted. Names starting with `_` or
    `.` are skipped, and so is any other Markdown inside a page bundle (it
    belongs to the bundle's index.md).
    """
    candidates = []
    for p in sorted(content_dir.rglob("*.md")):
        rel = p.relative_to(content_dir)
        if any(part.startswith(("_", ".")) for part in rel.parts):
            continue
        candidates.append(p)

    bundles = {p.parent for p in candidates if p.name == BUNDLE_INDEX and p.parent != content_dir}
    found = []
    for p in candidates:
        if p.name != BUNDLE_INDEX and any(parent in bundles for parent in p.parents):
            continue
        if p.name == BUNDLE_INDEX and any(parent in bundles for parent in p.parent.parents):
            continue
        found.append(p)
    return found


def locate(path: Path, content_dir: Path) -> tuple[str, str, Path | None]:
    """
    Returns (section, filename, bundle_dir):

      content/about.md                -> ("", "about", None)
      content/posts/hello.md          -> ("posts", "hello", None)
      content/posts/hugo/index.md     -> ("posts", "hugo", content/posts/hugo)
    """
    rel = path.relative_to(content_dir)
    if path.name == BUNDLE_INDEX and len(rel.parts) >= 2:
        dirs = rel.parts[:-1]
        section = dirs[0] if len(dirs) >= 2 else ""
        return section, dirs[-1], path.parent

    section = rel.parts[0] if len(rel.parts) >= 2 else ""
    return section, path.stem, None


def extract_title(body_md: str) -> tuple[str | None, str]:
    """
    First '# ' heading outside fenced code as the title; the heading line is
    removed from the body.
    """
    lines = body_md.split("\n")
    fence = None
    for i, line in enumerate(lines):
        f = FENCE_RE.match(line)
        if fence is None:
            if f:
                fence = f.group(1)
                continue
        else:
            # a fence closes with the same character, at least as long as it opened
            if f and f.group(1)[0] == fence[0] and len(f.group(1)) >= len(fence):
                fence = None
            continue
        m = H1_RE.match(line)
        if m:
            return m.group(1).strip(), "\n".join(lines[:i] + lines[i + 1:])
    return None, body_md

# ==============================
# Loading
# ==============================

def load_document(path: Path, content_dir: Path, config: SiteConfig) -> Post:
    raw = read_text(path)
    meta, body_md = split_front_matter(raw, path)
    section, filename, bundle_dir = locate(path, content_dir)

    title = meta.get("title")
    if title is None or not str(title).strip():
        h1, body_md = extract_title(body_md)
        title = h1 or filename
    title = str(title).strip()

    slug = safe_slug(meta.get("slug") or filename)
    if not slug:
        raise FrontMatterError(path, f"cannot derive a URL slug from {filename!r}")

    date = meta.get("date")
    if date is not None:
        date = parse_date(date, path)
    elif section:
        raise FrontMatterError(path, "missing 'date' (required for posts in a section)")

    lastmod = meta.get("lastmod")
    lastmod = parse_date(lastmod, path, "lastmod") if lastmod is not None else date

    summary_md, body_md = split_summary(body_md)
    body_html = markdown_to_html(body_md)
    body_text = html_to_text(body_html)

    if meta.get("summary"):
        summary_html = markdown_to_html(str(meta["summary"]))
        truncated = bool(body_text.strip())
    elif summary_md is not None:
        summary_html = markdown_to_html(summary_md)
        truncated = count_words(body_text) > count_words(html_to_text(summary_html))
    else:
        words, truncated = truncate_words(body_text, config.summary_length)
        summary_html = f"<p>{html.escape(words)}{'…' if truncated else ''}</p>" if words else ""

    description = meta.get("description")
    if description is None:
        description = " ".join(html_to_text(summary_html).split())

    url = meta.get("url")
    if url is not None:
        url = normalize_path(str(url))

    aliases = [normalize_path(a) for a in to_list(meta.get("aliases"), path, "aliases")]

    known = {"title", "slug", "date", "lastmod", "draft", "tags", "categories",
             "aliases", "description", "summary", "url"}

    return Post(
        source=path,
        section=section,
        filename=filename,
        slug=slug,
        title=title,
        date=date,
        lastmod=lastmod,
        draft=to_bool(meta.get("draft"), path),
        tags=to_list(meta.get("tags"), path, "tags"),
        categories=to_list(meta.get("categories"), path, "categories"),
        aliases=aliases,
        description=str(description),
        summary_html=summary_html,
        body_html=body_html,
        truncated=truncated,
        word_count=count_words(body_text),
        url=url,
        bundle_dir=bundle_dir,
        params={k: v for k, v in meta.items() if k not in known},
    )


def bundle_resources(post: Post) -> list[Path]:
    """Non-Markdown files that sit next to a bundle's index.md."""
    if post.bundle_dir is None:
        return []
    return sorted(
        p for p in post.bundle_dir.rglob("*")
        if p.is_file() and p.suffix.lower() != ".md" and not p.name.startswith(".")
    )
