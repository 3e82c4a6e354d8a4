import re
from urllib.parse import urljoin, urlsplit

from blogsite.errors import ConfigError, FrontMatterError

PERMALINK_TOKEN_RE = re.compile(r":([a-z]+)")
DATE_TOKENS = ("year", "month", "monthname", "day")


def safe_slug(s: str) -> str:
    s = str(s).strip().lower()
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"[^a-z0-9\-_]", "", s)
    s = re.sub(r"-{2,}", "-", s)
    return s.strip("-")


def prettify_term(term: str) -> str:
    # "Artificial_Intelligence" -> "Artificial Intelligence"
    return str(term).strip().replace("_", " ")


def term_slug(term: str) -> str:
    return safe_slug(prettify_term(term))


def normalize_path(path: str) -> str:
    """'posts//x' -> '/posts/x/'"""
    parts = [p for p in str(path).split("/") if p]
    if not parts:
        return "/"
    return "/" + "/".join(parts) + "/"


def expand_permalink(pattern: str, post) -> str:
    """
    Fills a permalink pattern from a post:

      /:year/:month/:slug/  ->  /2019/03/deploying-hugo/
      /:section/:title/     ->  /posts/deploying-hugo-to-github-pages/
    """

    def repl(m):
        token = m.group(1)
        if token in DATE_TOKENS:
            if post.date is None:
                raise FrontMatterError(post.source, f"permalink uses :{token} but the page has no date")
            if token == "year":
                return f"{post.date.year:04d}"
            if token == "month":
                return f"{post.date.month:02d}"
            if token == "monthname":
                return post.date.strftime("%B").lower()
            return f"{post.date.day:02d}"
        if token == "slug":
            return post.slug
        if token == "title":
            return safe_slug(post.title) or post.slug
        if token == "section":
            return post.section
        if token == "filename":
            return safe_slug(post.filename)
        raise ConfigError(f"unknown permalink token ':{token}' in {pattern!r}")

    return normalize_path(PERMALINK_TOKEN_RE.sub(repl, pattern))


def output_path_for(permalink: str) -> str:
    """Relative file path a permalink is written to: /a/b/ -> a/b/index.html"""
    return permalink.strip("/") + "/index.html" if permalink.strip("/") else "index.html"


def base_path(base_url: str) -> str:
    """Path part of the base URL, e.g. https://x.github.io/blog/ -> /blog/"""
    return normalize_path(urlsplit(base_url).path)


def relative_url(base_url: str, permalink: str) -> str:
    """Site-absolute link for use inside pages; honors sites served from a sub-directory."""
    prefix = base_path(base_url).rstrip("/")
    return f"{prefix}{permalink}"


def absolute_url(base_url: str, permalink: str) -> str:
    if not base_url.endswith("/"):
        base_url += "/"
    return urljoin(base_url, permalink.lstrip("/"))
