import json
from pathlib import Path

import pandas as pd

from blogsite.errors import ConfigError

REQUIRED_COLUMNS = ["url", "caption", "date"]


def read_listing(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix not in (".xlsx", ".xls", ".csv"):
        raise ConfigError(f"Unsupported photo listing format: {path.name} (use .csv or .xlsx)")
    try:
        if suffix == ".csv":
            return pd.read_csv(path)
        return pd.read_excel(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, ValueError) as exc:
        raise ConfigError(f"Cannot read photo listing {path.name}: {exc}") from exc


def load_photos(path: Path, verbose: bool = True) -> list[dict]:
    """
    Reads the photography listing, one row per photo:

      url,caption,date,album
      https://flickr.com/p/1,Morning fog over the bay,2018-11-03,Coast

    Returns dicts ordered newest first. Rows with an unreadable date are
    skipped with a warning.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Photo listing not found: {path}")

    df = read_listing(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    for c in REQUIRED_COLUMNS:
        if c not in df.columns:
            raise ConfigError(f"Missing required column in photo listing {path.name}: {c}")

    df = df.dropna(subset=["url"]).copy()
    df["url"] = df["url"].astype(str).str.strip()
    df["caption"] = df["caption"].fillna("").astype(str).str.strip()
    # offsets and plain dates can mix in one listing; compare everything as naive UTC
    df["parsed_date"] = pd.to_datetime(df["date"], errors="coerce", utc=True, format="mixed").dt.tz_convert(None)

    bad = df[df["parsed_date"].isna()]
    for _, row in bad.iterrows():
        if verbose:
            print(f"[WARN] Skipping photo with unreadable date {row['date']!r}: {row['url']}")
    df = df[df["parsed_date"].notna()].copy()

    if "album" not in df.columns:
        df["album"] = ""
    df["album"] = df["album"].fillna("").astype(str).str.strip()

    df = df.sort_values(["parsed_date", "caption"], ascending=[False, True], kind="stable")

    photos = []
    for _, row in df.iterrows():
        photos.append({
            "url": row["url"],
            "caption": row["caption"] or row["url"],
            "date": row["parsed_date"].to_pydatetime(),
            "album": row["album"],
        })
    return photos


def photos_json(photos: list[dict]) -> str:
    return json.dumps(
        [{**p, "date": p["date"].strftime("%Y-%m-%d")} for p in photos],
        indent=2,
    )
