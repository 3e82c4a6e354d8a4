from pathlib import Path


class SiteError(Exception):
    """Base class for everything the site builder raises on purpose."""


class ConfigError(SiteError):
    pass


class FrontMatterError(SiteError):
    def __init__(self, path: Path | str | None, message: str):
        self.path = path
        self.message = message
        where = f"{path}: " if path else ""
        super().__init__(f"{where}{message}")


class PermalinkCollisionError(SiteError):
    def __init__(self, permalink: str, first: Path, second: Path):
        self.permalink = permalink
        self.first = first
        self.second = second
        super().__init__(f"{second}: permalink {permalink} already used by {first}")
