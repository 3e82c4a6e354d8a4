import datetime
from dataclasses import dataclass, field
from html import escape

from blogsite.content import Post
from blogsite.index import Pager, Term
from blogsite.permalinks import absolute_url, relative_url, term_slug


@dataclass
class SiteContext:
    title: str
    base_url: str
    language: str = "en"
    author: str = ""
    # (label, permalink) pairs shown in the navbar
    nav: list[tuple[str, str]] = field(default_factory=list)
    stylesheet: str | None = None

    def url(self, permalink: str) -> str:
        return relative_url(self.base_url, permalink)

    def abs_url(self, permalink: str) -> str:
        return absolute_url(self.base_url, permalink)


def format_date(dt: datetime.datetime | datetime.date | None) -> str:
    if dt is None:
        return ""
    return f"{dt:%B} {dt.day}, {dt.year}"


def iso_date(dt: datetime.datetime | None) -> str:
    return dt.strftime("%Y-%m-%d") if dt else ""

# ==============================
# BASE LAYOUT
# ==============================

def navbar_html(site: SiteContext, active: str) -> str:
    links = []
    for label, permalink in site.nav:
        cls = ' class="active"' if permalink == active else ""
        links.append(f'<a href="{escape(site.url(permalink))}"{cls}>{escape(label)}</a>')
    return "\n    ".join(links)


def wrap_page(site: SiteContext, title: str, main_html: str, active: str = "",
              description: str = "", extra_head: str = "") -> str:
    page_title = f"{escape(title)} | {escape(site.title)}" if title and title != site.title else escape(site.title)
    desc_html = f'\n  <meta name="description" content="{escape(description)}">' if description else ""
    css_html = f'\n  <link rel="stylesheet" href="{escape(site.url(site.stylesheet))}">' if site.stylesheet else ""
    feed_url = escape(site.url("/index.xml"))

    return f"""<!DOCTYPE html>
<html lang="{escape(site.language)}">
<head>
  <meta charset="UTF-8">
  <title>{page_title}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">{desc_html}{css_html}
  <link rel="alternate" type="application/rss+xml" title="{escape(site.title)}" href="{feed_url}">{extra_head}
</head>

<body>

<header class="navbar">
  <a href="{escape(site.url('/'))}" class="logo">{escape(site.title)}</a>
  <nav class="navbar-right">
    {navbar_html(site, active)}
  </nav>
</header>

<main>
{main_html}
</main>

<footer class="site-footer">
  © {datetime.date.today().year} {escape(site.author or site.title)}.
</footer>

</body>
</html>
"""

# ==============================
# SINGLE PAGE
# ==============================

def terms_html(site: SiteContext, taxonomy: str, terms: list[str]) -> str:
    return ", ".join(
        f'<a href="{escape(site.url(f"/{taxonomy}/{term_slug(t)}/"))}">{escape(t.replace("_", " "))}</a>'
        for t in terms
    )


def make_post_header_block(site: SiteContext, post: Post) -> str:
    date_html = (
        f'<time class="post-date" datetime="{iso_date(post.date)}">{format_date(post.date)}</time>'
        if post.date and not post.is_page else ""
    )
    tags_html = f'<div class="post-tags">{terms_html(site, "tags", post.tags)}</div>' if post.tags else ""
    meta_html = ""
    if not post.is_page:
        meta_html = f'<div class="post-meta">{post.reading_time} min read</div>'
    draft_html = '<div class="post-draft">DRAFT</div>' if post.draft else ""

    return f"""
<section class="post-hero">
  {draft_html}
  <h1 class="post-title">{escape(post.title)}</h1>
  {date_html}
  {meta_html}
  {tags_html}
</section>
"""


def neighbours_html(site: SiteContext, post: Post) -> str:
    parts = []
    if post.newer:
        parts.append(f'<a class="newer" href="{escape(site.url(post.newer.permalink))}">← {escape(post.newer.title)}</a>')
    if post.older:
        parts.append(f'<a class="older" href="{escape(site.url(post.older.permalink))}">{escape(post.older.title)} →</a>')
    if not parts:
        return ""
    return '<nav class="post-nav">\n  ' + "\n  ".join(parts) + "\n</nav>"


def render_single(site: SiteContext, post: Post) -> str:
    back_html = ""
    if not post.is_page:
        back_html = f'<a class="back-link" href="{escape(site.url(f"/{post.section}/"))}">← Back to {escape(post.section.title())}</a>'

    main_html = f"""<article class="post">
{make_post_header_block(site, post)}
<div class="post-body">
{post.body_html}
</div>
{neighbours_html(site, post)}
{back_html}
</article>"""

    active = f"/{post.section}/" if post.section else post.permalink
    canonical = f'\n  <link rel="canonical" href="{escape(site.abs_url(post.permalink))}">'
    return wrap_page(site, post.title, main_html, active=active,
                     description=post.description, extra_head=canonical)

# ==============================
# LIST PAGES (home, sections, taxonomy terms)
# ==============================

def summary_card(site: SiteContext, post: Post) -> str:
    href = escape(site.url(post.permalink))
    more_html = f'<a class="read-more" href="{href}">Read more →</a>' if post.truncated else ""
    return f"""
<article class="summary">
  <h2 class="summary-title"><a href="{href}">{escape(post.title)}</a></h2>
  <time class="summary-date" datetime="{iso_date(post.date)}">{format_date(post.date)}</time>
  <div class="summary-body">{post.summary_html}</div>
  {more_html}
</article>"""


def pagination_html(site: SiteContext, pager: Pager) -> str:
    if pager.total <= 1:
        return ""
    prev_html = f'<a class="prev" href="{escape(site.url(pager.prev_permalink))}">Newer</a>' if pager.prev_permalink else ""
    next_html = f'<a class="next" href="{escape(site.url(pager.next_permalink))}">Older</a>' if pager.next_permalink else ""
    return f"""<nav class="pagination">
  {prev_html}
  <span class="page-number">Page {pager.number} of {pager.total}</span>
  {next_html}
</nav>"""


def render_list(site: SiteContext, heading: str, pager: Pager, active: str = "") -> str:
    cards = "\n".join(summary_card(site, p) for p in pager.items)
    if not cards:
        cards = '<p class="empty">Nothing published yet.</p>'
    main_html = f"""<section class="list">
<h1 class="list-title">{escape(heading)}</h1>
{cards}
{pagination_html(site, pager)}
</section>"""
    title = heading if pager.number == 1 else f"{heading} (page {pager.number})"
    return wrap_page(site, title, main_html, active=active or pager.permalink)


def render_terms(site: SiteContext, taxonomy: str, terms: list[Term]) -> str:
    items = "\n".join(
        f'  <li><a href="{escape(site.url(f"/{taxonomy}/{t.slug}/"))}">{escape(t.name)}</a> '
        f'<span class="count">({len(t.posts)})</span></li>'
        for t in terms
    )
    heading = taxonomy.title()
    main_html = f"""<section class="terms">
<h1 class="list-title">{escape(heading)}</h1>
<ul class="term-list">
{items}
</ul>
</section>"""
    return wrap_page(site, heading, main_html, active=f"/{taxonomy}/")


def render_term(site: SiteContext, taxonomy: str, term: Term, pager: Pager) -> str:
    return render_list(site, term.name, pager, active=f"/{taxonomy}/")

# ==============================
# PHOTOS
# ==============================

def render_photos(site: SiteContext, photos: list[dict], permalink: str = "/photos/") -> str:
    items = []
    for ph in photos:
        album_html = f'<span class="photo-album">{escape(ph["album"])}</span>' if ph.get("album") else ""
        items.append(f"""
  <li class="photo">
    <a href="{escape(ph["url"])}">{escape(ph["caption"])}</a>
    <time datetime="{iso_date(ph["date"])}">{format_date(ph["date"])}</time>
    {album_html}
  </li>""")
    main_html = f"""<section class="photos">
<h1 class="list-title">Photos</h1>
<ul class="photo-list">{"".join(items)}
</ul>
</section>"""
    return wrap_page(site, "Photos", main_html, active=permalink)

# ==============================
# ALIASES
# ==============================

def render_alias(site: SiteContext, target_permalink: str) -> str:
    url = escape(site.url(target_permalink))
    canonical = escape(site.abs_url(target_permalink))
    return f"""<!DOCTYPE html>
<html lang="{escape(site.language)}">
<head>
  <title>{canonical}</title>
  <link rel="canonical" href="{canonical}">
  <meta name="robots" content="noindex">
  <meta charset="utf-8">
  <meta http-equiv="refresh" content="0; url={url}">
</head>
</html>
"""
