import json
import shutil
import datetime
from dataclasses import dataclass, field
from pathlib import Path

from blogsite.config import TAXONOMIES, SiteConfig, load_config
from blogsite.content import Post, bundle_resources, discover_content, html_to_text, load_document, write_text
from blogsite.errors import PermalinkCollisionError, SiteError
from blogsite.feeds import render_rss, render_sitemap
from blogsite.index import group_by_taxonomy, link_neighbours, paginate, published
from blogsite.permalinks import expand_permalink, output_path_for
from blogsite.photos import load_photos, photos_json
from blogsite.templates import (
    SiteContext,
    render_alias,
    render_list,
    render_photos,
    render_single,
    render_term,
    render_terms,
)

PHOTOS_PERMALINK = "/photos/"
STYLESHEET = "css/style.css"


@dataclass
class BuildResult:
    output_dir: Path
    pages: list[Path] = field(default_factory=list)
    errors: dict[Path, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    posts: list[Post] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class SiteWriter:
    """Writes rendered documents under the output directory and remembers what went where."""

    def __init__(self, output_dir: Path, result: BuildResult, verbose: bool):
        self.output_dir = output_dir
        self.result = result
        self.verbose = verbose
        # permalink -> lastmod, for the sitemap
        self.html_pages: dict[str, datetime.datetime | None] = {}
        # output paths that came from static/
        self.static_files: set[Path] = set()

    def copy_static(self, static_dir: Path):
        for src in static_dir.rglob("*"):
            if src.is_file():
                self.static_files.add(self.output_dir / src.relative_to(static_dir))
        shutil.copytree(static_dir, self.output_dir, dirs_exist_ok=True)
        if self.verbose:
            print(f"[OK] Copied static files from {static_dir}")

    def _write(self, out_path: Path, text: str):
        if out_path in self.static_files:
            msg = f"{out_path}: generated file replaces the copy from static/"
            self.result.warnings.append(msg)
            print(f"[WARN] {msg}")
            self.static_files.discard(out_path)
        write_text(out_path, text)
        self.result.pages.append(out_path)

    def page(self, permalink: str, text: str, lastmod=None, label: str = "page") -> Path:
        out_path = self.output_dir / output_path_for(permalink)
        self._write(out_path, text)
        self.html_pages.setdefault(permalink, lastmod)
        if self.verbose:
            print(f"[OK] Generated {label}: {out_path}")
        return out_path

    def file(self, rel_path: str, text: str, label: str = "file") -> Path:
        out_path = self.output_dir / rel_path.lstrip("/")
        self._write(out_path, text)
        if self.verbose:
            print(f"[OK] Wrote {label}: {out_path}")
        return out_path

# ==============================
# Steps
# ==============================

def load_all(content_dir: Path, config: SiteConfig, result: BuildResult) -> list[Post]:
    docs = []
    for path in discover_content(content_dir):
        try:
            docs.append(load_document(path, content_dir, config))
        except SiteError as exc:
            result.errors[path] = str(exc)
            print(f"[ERROR] {exc}")
    return docs


def assign_permalinks(docs: list[Post], config: SiteConfig, reserved: dict[str, str],
                      result: BuildResult) -> list[Post]:
    """
    Sets `permalink` on every doc. Docs are claimed in source-path order; a
    doc whose permalink is already taken fails and is dropped.
    """
    claimed: dict[str, Path] = {k: Path(v) for k, v in reserved.items()}
    kept = []
    for p in sorted(docs, key=lambda d: str(d.source)):
        try:
            permalink = p.url or expand_permalink(config.permalink_for(p.section), p)
            if permalink in claimed:
                raise PermalinkCollisionError(permalink, claimed[permalink], p.source)
        except SiteError as exc:
            result.errors[p.source] = str(exc)
            print(f"[ERROR] {exc}")
            continue
        claimed[permalink] = p.source
        p.permalink = permalink
        kept.append(p)
    return kept


def build_nav(sections: list[str], pages: list[Post], has_tags: bool, has_photos: bool) -> list[tuple[str, str]]:
    nav = [("Home", "/")]
    nav += [(s.replace("-", " ").title(), f"/{s}/") for s in sections]
    if has_tags:
        nav.append(("Tags", "/tags/"))
    if has_photos:
        nav.append(("Photos", PHOTOS_PERMALINK))
    nav += [(p.title, p.permalink) for p in sorted(pages, key=lambda p: p.title.lower())]
    return nav


def copy_bundle_resources(post: Post, writer: SiteWriter):
    target_dir = writer.output_dir / output_path_for(post.permalink)
    target_dir = target_dir.parent
    for res in bundle_resources(post):
        dest = target_dir / res.relative_to(post.bundle_dir)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(res, dest)


def write_lists(writer: SiteWriter, site: SiteContext, heading: str, posts: list[Post],
                per_page: int, base: str, active: str = ""):
    for pager in paginate(posts, per_page, base):
        writer.page(pager.permalink, render_list(site, heading, pager, active=active), label="list")


def index_records(posts: list[Post]) -> list[dict]:
    return [
        {
            "title": p.title,
            "permalink": p.permalink,
            "section": p.section,
            "date": p.date.isoformat() if p.date else None,
            "tags": p.tags,
            "categories": p.categories,
            "summary": " ".join(html_to_text(p.summary_html).split()),
            "reading_time": p.reading_time,
        }
        for p in posts
    ]

# ==============================
# MAIN
# ==============================

def build_site(site_dir: Path, config: SiteConfig | None = None, output_dir: Path | None = None,
               now: datetime.datetime | None = None, clean: bool = False,
               verbose: bool = True) -> BuildResult:
    """
    Builds the site rooted at site_dir:

      site_dir/config.yaml          optional
      site_dir/content/**/*.md      posts and pages
      site_dir/static/              copied as-is
      site_dir/data/photos.csv      optional photo listing

    A content file that fails (bad front matter, bad date, taken permalink)
    is reported in BuildResult.errors and left out; the rest still builds.
    """
    site_dir = Path(site_dir)
    config = config or load_config(site_dir)
    content_dir = site_dir / config.content_dir
    static_dir = site_dir / config.static_dir
    photos_path = site_dir / config.data_dir / config.photos_file
    out = Path(output_dir) if output_dir else site_dir / config.output_dir

    if not content_dir.exists():
        raise FileNotFoundError(f"Content directory not found: {content_dir}")

    if clean and out.exists():
        shutil.rmtree(out)
    out.mkdir(parents=True, exist_ok=True)

    result = BuildResult(output_dir=out)
    writer = SiteWriter(out, result, verbose)
    if static_dir.exists():
        writer.copy_static(static_dir)

    # -------- Load & index --------
    docs = load_all(content_dir, config, result)
    visible = published(docs, config.build_drafts, config.build_future, now)

    photos = []
    if photos_path.exists():
        try:
            photos = load_photos(photos_path, verbose=verbose)
        except SiteError as exc:
            result.errors[photos_path] = str(exc)
            print(f"[ERROR] {exc}")

    generated_roots = set(TAXONOMIES) | {"page"}
    if photos:
        generated_roots.add(PHOTOS_PERMALINK.strip("/"))
    for p in visible:
        if p.section in generated_roots:
            msg = f"{p.source}: section '{p.section}' clashes with the generated /{p.section}/ pages"
            result.errors[p.source] = msg
            print(f"[ERROR] {msg}")
    visible = [p for p in visible if p.section not in generated_roots]

    sections = sorted({p.section for p in visible if p.section})
    reserved = {"/": "<home page>"}
    reserved.update({f"/{s}/": f"<{s} list>" for s in sections})
    reserved.update({f"/{t}/": f"<{t} list>" for t in TAXONOMIES})
    if photos:
        reserved[PHOTOS_PERMALINK] = "<photo page>"

    kept = assign_permalinks(visible, config, reserved, result)
    visible = [p for p in visible if p in kept]
    posts = [p for p in visible if not p.is_page]
    pages = [p for p in visible if p.is_page]
    link_neighbours(posts)
    result.posts = posts

    taxonomies = {name: group_by_taxonomy(posts, name) for name in TAXONOMIES}

    site = SiteContext(
        title=config.title,
        base_url=config.base_url,
        language=config.language,
        author=config.author,
        nav=build_nav(sections, pages, bool(taxonomies["tags"]), bool(photos)),
        stylesheet=f"/{STYLESHEET}" if (static_dir / STYLESHEET).exists() else None,
    )

    # -------- Single pages --------
    for p in visible:
        writer.page(p.permalink, render_single(site, p), lastmod=p.lastmod,
                    label="page" if p.is_page else "post")
        copy_bundle_resources(p, writer)

    # -------- Home & section lists --------
    write_lists(writer, site, config.title, posts, config.paginate, "/")
    for s in sections:
        section_posts = [p for p in posts if p.section == s]
        write_lists(writer, site, s.replace("-", " ").title(), section_posts, config.paginate, f"/{s}/")
        writer.file(f"{s}/index.xml", render_rss(site, section_posts, f"{s.title()} on {config.title}",
                                                 f"/{s}/", config.rss_limit), label="feed")

    # -------- Taxonomies --------
    for name, terms in taxonomies.items():
        if not terms:
            continue
        writer.page(f"/{name}/", render_terms(site, name, terms), label="taxonomy")
        for term in terms:
            base = f"/{name}/{term.slug}/"
            for pager in paginate(term.posts, config.paginate, base):
                writer.page(pager.permalink, render_term(site, name, term, pager), label="term page")
            writer.file(f"{base}index.xml", render_rss(site, term.posts, f"{term.name} on {config.title}",
                                                       base, config.rss_limit), label="feed")

    # -------- Photos --------
    if photos:
        writer.page(PHOTOS_PERMALINK, render_photos(site, photos, PHOTOS_PERMALINK), label="photo page")
        writer.file(f"{PHOTOS_PERMALINK}photos.json", photos_json(photos), label="photo index")

    # -------- Aliases --------
    aliases_written = set()
    for p in visible:
        for alias in p.aliases:
            if alias in writer.html_pages or alias in reserved or alias in aliases_written:
                msg = f"{p.source}: alias {alias} clashes with an existing page; skipped"
                result.warnings.append(msg)
                print(f"[WARN] {msg}")
                continue
            aliases_written.add(alias)
            writer.file(output_path_for(alias), render_alias(site, p.permalink), label="alias")

    # -------- Feeds, sitemap, JSON index --------
    writer.file("index.xml", render_rss(site, posts, config.title, "/", config.rss_limit), label="feed")
    writer.file("sitemap.xml", render_sitemap(site, list(writer.html_pages.items())), label="sitemap")
    writer.file("index.json", json.dumps(index_records(posts), indent=2), label="JSON index")

    if not posts:
        msg = "No posts published; the home page is empty."
        result.warnings.append(msg)
        print(f"[WARN] {msg}")

    return result
