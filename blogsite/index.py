import datetime
from dataclasses import dataclass, field

from blogsite.content import Post
from blogsite.permalinks import prettify_term, term_slug


@dataclass
class Term:
    name: str
    slug: str
    posts: list[Post] = field(default_factory=list)


@dataclass
class Pager:
    number: int
    total: int
    items: list[Post]
    permalink: str
    prev_permalink: str | None = None
    next_permalink: str | None = None


def sort_by_date(posts: list[Post]) -> list[Post]:
    """Newest first; equal dates fall back to title, then source path."""
    ordered = sorted(posts, key=lambda p: (p.title.lower(), str(p.source)))
    return sorted(ordered, key=lambda p: p.date or datetime.datetime.min, reverse=True)


def published(posts: list[Post], build_drafts: bool = False, build_future: bool = False,
              now: datetime.datetime | None = None) -> list[Post]:
    now = now or datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
    keep = []
    for p in posts:
        if p.draft and not build_drafts:
            continue
        if p.date is not None and p.date > now and not build_future:
            continue
        keep.append(p)
    return sort_by_date(keep)


def link_neighbours(posts: list[Post]):
    """Sets newer/older on every post, within its own section, following the list order."""
    by_section: dict[str, list[Post]] = {}
    for p in posts:
        by_section.setdefault(p.section, []).append(p)

    for plist in by_section.values():
        for i, p in enumerate(plist):
            p.newer = plist[i - 1] if i > 0 else None
            p.older = plist[i + 1] if i + 1 < len(plist) else None


def group_by_taxonomy(posts: list[Post], name: str) -> list[Term]:
    """
    Terms are matched by slug, so "Hugo" and "hugo" are one term; the first
    spelling seen becomes the display name. Posts keep the input order.
    """
    terms: dict[str, Term] = {}
    for p in posts:
        seen = set()
        for raw in p.taxonomy(name):
            slug = term_slug(raw)
            if not slug or slug in seen:
                continue
            seen.add(slug)
            term = terms.setdefault(slug, Term(name=prettify_term(raw), slug=slug))
            term.posts.append(p)
    return sorted(terms.values(), key=lambda t: t.name.lower())


def page_permalink(base: str, number: int) -> str:
    if number == 1:
        return base
    return f"{base}page/{number}/"


def paginate(posts: list[Post], per_page: int, base: str = "/") -> list[Pager]:
    if per_page < 1:
        raise ValueError(f"per_page must be at least 1, got {per_page}")

    chunks = [posts[i:i + per_page] for i in range(0, len(posts), per_page)] or [[]]
    total = len(chunks)
    pagers = []
    for i, chunk in enumerate(chunks, start=1):
        pagers.append(Pager(
            number=i,
            total=total,
            items=chunk,
            permalink=page_permalink(base, i),
            prev_permalink=page_permalink(base, i - 1) if i > 1 else None,
            next_permalink=page_permalink(base, i + 1) if i < total else None,
        ))
    return pagers
