import datetime
import json

import pandas as pd
import pytest

from blogsite.errors import ConfigError
from blogsite.photos import load_photos, photos_json
from tests.conftest import write

LISTING = """url,caption,date,album
https://photos.example/1,Morning fog,2018-11-03,Coast
https://photos.example/2,Night market,2020-02-14,
https://photos.example/3,Lost roll,someday,Film
https://photos.example/4,,2019-07-01,Coast
"""


def test_load_photos_orders_newest_first(tmp_path, capsys):
    path = write(tmp_path, "photos.csv", LISTING)
    photos = load_photos(path)

    assert [p["url"] for p in photos] == [
        "https://photos.example/2",
        "https://photos.example/4",
        "https://photos.example/1",
    ]
    assert photos[0]["date"] == datetime.datetime(2020, 2, 14)
    assert photos[0]["album"] == ""
    assert photos[2]["album"] == "Coast"
    # empty caption falls back to the link itself
    assert photos[1]["caption"] == "https://photos.example/4"
    assert "[WARN] Skipping photo" in capsys.readouterr().out


def test_album_column_is_optional(tmp_path):
    path = write(tmp_path, "photos.csv", "URL,Caption,Date\nhttps://p/1,One,2021-01-01\n")
    photos = load_photos(path, verbose=False)
    assert photos == [{"url": "https://p/1", "caption": "One", "date": datetime.datetime(2021, 1, 1), "album": ""}]


def test_missing_column(tmp_path):
    path = write(tmp_path, "photos.csv", "url,caption\nhttps://p/1,One\n")
    with pytest.raises(ConfigError, match="date"):
        load_photos(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_photos(tmp_path / "nope.csv")


def test_unsupported_format(tmp_path):
    path = write(tmp_path, "photos.txt", "whatever")
    with pytest.raises(ConfigError, match="Unsupported"):
        load_photos(path)


def test_excel_listing(tmp_path):
    path = tmp_path / "photos.xlsx"
    pd.DataFrame({
        "url": ["https://p/1", "https://p/2"],
        "caption": ["Old", "New"],
        "date": ["2010-05-05", "2015-05-05"],
    }).to_excel(path, index=False)

    photos = load_photos(path, verbose=False)
    assert [p["caption"] for p in photos] == ["New", "Old"]


def test_photos_json(tmp_path):
    path = write(tmp_path, "photos.csv", LISTING)
    data = json.loads(photos_json(load_photos(path, verbose=False)))
    assert data[0] == {
        "url": "https://photos.example/2",
        "caption": "Night market",
        "date": "2020-02-14",
        "album": "",
    }


def test_offsets_and_plain_dates_mix(tmp_path):
    path = write(tmp_path, "photos.csv", (
        "url,caption,date\n"
        "https://p/1,A,2019-09-09T10:00:00+02:00\n"
        "https://p/2,B,2019-09-10\n"
    ))
    photos = load_photos(path, verbose=False)

    assert [p["url"] for p in photos] == ["https://p/2", "https://p/1"]
    assert photos[1]["date"] == datetime.datetime(2019, 9, 9, 8, 0)


def test_empty_listing(tmp_path):
    path = write(tmp_path, "photos.csv", "")
    with pytest.raises(ConfigError, match="Cannot read photo listing"):
        load_photos(path)


def test_header_only_listing(tmp_path):
    path = write(tmp_path, "photos.csv", "url,caption,date\n")
    assert load_photos(path, verbose=False) == []
