import datetime
import xml.etree.ElementTree as ET
from email.utils import format_datetime

from blogsite.content import Post
from blogsite.templates import SiteContext


def rfc822(dt: datetime.datetime) -> str:
    return format_datetime(dt.replace(tzinfo=datetime.timezone.utc))


def to_xml(root: ET.Element) -> str:
    ET.indent(root)
    return '<?xml version="1.0" encoding="utf-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def render_rss(site: SiteContext, posts: list[Post], title: str, permalink: str = "/",
               limit: int = 20) -> str:
    """RSS 2.0 of the newest `limit` posts; `posts` must already be newest first."""
    items = posts[:limit]

    rss = ET.Element("rss", {"version": "2.0", "xmlns:atom": "http://www.w3.org/2005/Atom"})
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = title
    ET.SubElement(channel, "link").text = site.abs_url(permalink)
    ET.SubElement(channel, "description").text = f"Recent content on {site.title}"
    ET.SubElement(channel, "language").text = site.language
    if items and items[0].date:
        ET.SubElement(channel, "lastBuildDate").text = rfc822(items[0].date)
    ET.SubElement(channel, "atom:link", {
        "href": site.abs_url(f"{permalink}index.xml"),
        "rel": "self",
        "type": "application/rss+xml",
    })

    for p in items:
        item = ET.SubElement(channel, "item")
        link = site.abs_url(p.permalink)
        ET.SubElement(item, "title").text = p.title
        ET.SubElement(item, "link").text = link
        if p.date:
            ET.SubElement(item, "pubDate").text = rfc822(p.date)
        ET.SubElement(item, "guid").text = link
        ET.SubElement(item, "description").text = p.summary_html

    return to_xml(rss)


def render_sitemap(site: SiteContext, entries: list[tuple[str, datetime.datetime | None]]) -> str:
    """entries: (permalink, lastmod) pairs; each permalink appears once."""
    urlset = ET.Element("urlset", {"xmlns": "http://www.sitemaps.org/schemas/sitemap/0.9"})
    seen = set()
    for permalink, lastmod in entries:
        if permalink in seen:
            continue
        seen.add(permalink)
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = site.abs_url(permalink)
        if lastmod:
            ET.SubElement(url, "lastmod").text = lastmod.strftime("%Y-%m-%dT%H:%M:%SZ")
    return to_xml(urlset)
