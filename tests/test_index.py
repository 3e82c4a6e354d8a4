import datetime

import pytest

from blogsite.index import group_by_taxonomy, link_neighbours, paginate, published, sort_by_date
from tests.conftest import NOW, make_post


def d(*args):
    return datetime.datetime(*args)


class TestPublished:
    def test_drafts_never_listed(self):
        posts = [make_post("Public", d(2020, 1, 1)), make_post("Draft", d(2020, 2, 1), draft=True)]
        assert [p.title for p in published(posts, now=NOW)] == ["Public"]

    def test_drafts_listed_when_asked(self):
        posts = [make_post("Public", d(2020, 1, 1)), make_post("Draft", d(2020, 2, 1), draft=True)]
        assert [p.title for p in published(posts, build_drafts=True, now=NOW)] == ["Draft", "Public"]

    def test_future_posts_held_back(self):
        posts = [make_post("Past", d(2024, 12, 31)), make_post("Tomorrow", d(2025, 1, 2))]
        assert [p.title for p in published(posts, now=NOW)] == ["Past"]
        assert [p.title for p in published(posts, build_future=True, now=NOW)] == ["Tomorrow", "Past"]

    def test_descending_date_order(self):
        posts = [
            make_post("Old", d(2018, 5, 1)),
            make_post("Newest", d(2021, 1, 1)),
            make_post("Middle", d(2019, 7, 4)),
        ]
        result = published(posts, now=NOW)
        assert [p.title for p in result] == ["Newest", "Middle", "Old"]
        dates = [p.date for p in result]
        assert dates == sorted(dates, reverse=True)

    def test_same_date_ties_break_on_title(self):
        posts = [make_post("Beta", d(2020, 1, 1)), make_post("alpha", d(2020, 1, 1))]
        assert [p.title for p in sort_by_date(posts)] == ["alpha", "Beta"]

    def test_undated_pages_sort_last(self):
        posts = [make_post("About", None, section=""), make_post("Post", d(2020, 1, 1))]
        assert [p.title for p in published(posts, now=NOW)] == ["Post", "About"]


def test_link_neighbours_stays_within_section():
    a = make_post("A", d(2021, 1, 1))
    b = make_post("B", d(2020, 1, 1), section="notes")
    c = make_post("C", d(2019, 1, 1))
    link_neighbours([a, b, c])

    assert a.newer is None and a.older is c
    assert c.newer is a and c.older is None
    assert b.newer is None and b.older is None


def test_group_by_taxonomy_merges_spellings():
    p1 = make_post("One", d(2021, 1, 1), tags=["Hugo", "Case_Report"])
    p2 = make_post("Two", d(2020, 1, 1), tags=["hugo"])
    terms = group_by_taxonomy([p1, p2], "tags")

    assert [t.name for t in terms] == ["Case Report", "Hugo"]
    hugo = terms[1]
    assert hugo.slug == "hugo"
    assert [p.title for p in hugo.posts] == ["One", "Two"]


def test_group_by_taxonomy_ignores_duplicate_terms_on_one_post():
    p = make_post("One", d(2021, 1, 1), tags=["hugo", "Hugo"])
    terms = group_by_taxonomy([p], "tags")
    assert len(terms) == 1
    assert len(terms[0].posts) == 1


class TestPaginate:
    def test_pages_and_links(self):
        posts = [make_post(f"P{i}", d(2020, 1, i + 1)) for i in range(5)]
        pagers = paginate(posts, 2, "/posts/")

        assert [p.permalink for p in pagers] == ["/posts/", "/posts/page/2/", "/posts/page/3/"]
        assert [len(p.items) for p in pagers] == [2, 2, 1]
        assert pagers[0].prev_permalink is None
        assert pagers[0].next_permalink == "/posts/page/2/"
        assert pagers[1].prev_permalink == "/posts/"
        assert pagers[2].next_permalink is None
        assert all(p.total == 3 for p in pagers)

    def test_empty_list_still_has_one_page(self):
        pagers = paginate([], 10)
        assert len(pagers) == 1
        assert pagers[0].items == []
        assert pagers[0].permalink == "/"

    def test_rejects_zero_page_size(self):
        with pytest.raises(ValueError):
            paginate([], 0)
