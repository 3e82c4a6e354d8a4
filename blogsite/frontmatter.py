import re
import datetime

import pandas as pd
import yaml

from blogsite.errors import FrontMatterError

# ==============================
# Front matter
# ==============================

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", flags=re.S | re.M)
MORE_RE = re.compile(r"<!--\s*more\s*-->", flags=re.I)
WORD_RE = re.compile(r"\S+")

TRUE_STRINGS = {"y", "yes", "true", "on", "1"}
FALSE_STRINGS = {"n", "no", "false", "off", "0", ""}

# pandas resolves these against the clock, which would change the date on every build
RELATIVE_DATE_WORDS = {"now", "today", "yesterday", "tomorrow"}


def split_front_matter(text: str, path=None) -> tuple[dict, str]:
    """
    Splits a content file into (metadata, body):
    ---
    title: Deploying Hugo to GitHub Pages
    date: 2019-03-10
    draft: false
    tags: [hugo, deployment]
    ---
    Body text...

    Files without a leading `---` line have no metadata.
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    if not re.match(r"---[ \t]*\n", text):
        return {}, text

    m = FRONT_MATTER_RE.match(text)
    if not m:
        raise FrontMatterError(path, "front matter is not terminated by a '---' line")

    try:
        data = yaml.safe_load(m.group(1))
    except yaml.YAMLError as exc:
        raise FrontMatterError(path, f"invalid YAML in front matter: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(path, "front matter must be a mapping of keys to values")

    metadata = {str(k).strip().lower(): v for k, v in data.items()}
    return metadata, text[m.end():]


def split_summary(body: str) -> tuple[str | None, str]:
    """
    Returns (summary, body) where summary is the Markdown before the first
    <!--more--> marker, or None when the body has no marker. The returned
    body never contains the marker.
    """
    m = MORE_RE.search(body)
    if not m:
        return None, body
    summary = body[:m.start()].strip()
    return summary, body[:m.start()] + body[m.end():]


def truncate_words(text: str, limit: int) -> tuple[str, bool]:
    words = WORD_RE.findall(text)
    if len(words) <= limit:
        return " ".join(words), False
    return " ".join(words[:limit]), True


def count_words(text: str) -> int:
    return len(WORD_RE.findall(text))

# ==============================
# Value coercion
# ==============================

def to_bool(value, path=None, key: str = "draft") -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    s = str(value).strip().lower()
    if s in TRUE_STRINGS:
        return True
    if s in FALSE_STRINGS:
        return False
    raise FrontMatterError(path, f"'{key}' must be true or false, got {value!r}")


def to_list(value, path=None, key: str = "tags") -> list[str]:
    """tags: [a, b] / tags: a, b / tags: a"""
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if isinstance(value, (list, tuple)):
        return [str(t).strip() for t in value if t is not None and str(t).strip()]
    raise FrontMatterError(path, f"'{key}' must be a list or a comma separated string")


def parse_date(value, path=None, key: str = "date") -> datetime.datetime:
    """
    Turns a front matter date into a naive UTC datetime.

    PyYAML already converts unquoted ISO dates into date/datetime objects;
    quoted strings go through pandas, which understands most formats people
    actually write ("2019-03-10T09:00:00-05:00", "March 10, 2019", ...).
    """
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    elif isinstance(value, str) and value.strip():
        if value.strip().lower() in RELATIVE_DATE_WORDS:
            raise FrontMatterError(path, f"{key} must be an actual date, not {value!r}")
        try:
            ts = pd.to_datetime(value.strip())
        except (ValueError, OverflowError) as exc:
            raise FrontMatterError(path, f"cannot parse {key} {value!r}") from exc
        if pd.isna(ts):
            raise FrontMatterError(path, f"cannot parse {key} {value!r}")
        dt = ts.to_pydatetime()
    else:
        raise FrontMatterError(path, f"cannot parse {key} {value!r}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return dt
