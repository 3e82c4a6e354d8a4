import sys
import argparse
import datetime
from pathlib import Path

import yaml

from blogsite import __version__
from blogsite.build import build_site
from blogsite.config import load_config
from blogsite.content import write_text
from blogsite.errors import ConfigError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="blogsite", description="Build a static blog from Markdown content.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="render the site into the output directory")
    b.add_argument("site_dir", nargs="?", default=".", help="site root holding config.yaml and content/")
    b.add_argument("-o", "--output", help="output directory (default: <site>/public)")
    b.add_argument("-D", "--drafts", action="store_true", default=None, help="include draft content")
    b.add_argument("-F", "--future", action="store_true", default=None, help="include content dated in the future")
    b.add_argument("-b", "--base-url", help="override base_url from config.yaml")
    b.add_argument("--clean", action="store_true", help="remove the output directory before building")
    b.add_argument("-q", "--quiet", action="store_true", help="only print warnings and errors")

    n = sub.add_parser("new", help="create a content file with front matter")
    n.add_argument("path", help="path under content/, e.g. posts/deploying-hugo.md")
    n.add_argument("-s", "--site", default=".", help="site root (default: current directory)")
    n.add_argument("-t", "--title", help="post title (default: derived from the file name)")
    n.add_argument("--draft", action=argparse.BooleanOptionalAction, default=True,
                   help="mark the new file as a draft (default: yes)")
    return parser


def new_content_text(title: str, date: datetime.datetime, draft: bool) -> str:
    fm = {"title": title, "date": date.isoformat(timespec="seconds"), "draft": draft, "tags": []}
    yaml_txt = yaml.safe_dump(fm, allow_unicode=True, sort_keys=False, default_flow_style=False)
    return f"---\n{yaml_txt}---\n\nSummary goes here.\n\n<!--more-->\n\nThe rest of the post.\n"


def cmd_new(args) -> int:
    site_dir = Path(args.site)
    config = load_config(site_dir)
    rel = Path(args.path)
    if rel.suffix != ".md":
        rel = rel.with_suffix(".md")
    target = site_dir / config.content_dir / rel

    if target.exists():
        print(f"[ERROR] {target} already exists")
        return 1

    stem = target.parent.name if target.name == "index.md" else target.stem
    title = args.title or stem.replace("-", " ").replace("_", " ").strip().capitalize()
    now = datetime.datetime.now().astimezone()
    write_text(target, new_content_text(title, now, args.draft))
    print(f"[OK] Created {target}")
    return 0


def cmd_build(args) -> int:
    site_dir = Path(args.site_dir)
    config = load_config(site_dir).with_overrides(
        build_drafts=args.drafts,
        build_future=args.future,
        base_url=args.base_url,
    )
    result = build_site(
        site_dir,
        config=config,
        output_dir=Path(args.output) if args.output else None,
        clean=args.clean,
        verbose=not args.quiet,
    )

    print(f"[OK] Built {len(result.posts)} posts, {len(result.pages)} files into {result.output_dir}")
    if not result.ok:
        print(f"[ERROR] {len(result.errors)} file(s) failed to build:")
        for msg in result.errors.values():
            print(f"  - {msg}")
        return 1
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "new":
            return cmd_new(args)
        return cmd_build(args)
    except (ConfigError, FileNotFoundError) as exc:
        print(f"[ERROR] {exc}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
