import datetime

import pytest

from blog_store.content import ContentIndex, entry_link
from blog_store.errors import ContentValidationError, NotFoundError
from blog_store.models import ContentEntry, SiteConfig


def _entry(identifier, day, draft=False, external=False):
    return ContentEntry(
        identifier=identifier,
        title=identifier.title(),
        description="d",
        date=datetime.date.fromisoformat(day),
        draft=draft,
        external=external,
        url="https://elsewhere.example.com/" + identifier if external else None,
        body=None if external else "Body",
    )


@pytest.fixture
def site():
    return SiteConfig(
        title="Site",
        description="Desc",
        author_name="Author",
        social_handle="@author",
        base_url="https://example.com",
    )


@pytest.fixture
def index():
    return ContentIndex(
        [
            _entry("june", "2023-06-05"),
            _entry("october", "2023-10-31"),
            _entry("secret", "2024-01-01", draft=True),
            _entry("alpha", "2023-08-01"),
            _entry("beta", "2023-08-01", external=True),
        ]
    )


def test_list_published_orders_newest_first(index):
    identifiers = [entry.identifier for entry in index.list_published()]

    assert identifiers == ["october", "beta", "alpha", "june"]


def test_list_published_excludes_drafts_but_list_all_keeps_them(index):
    published = [entry.identifier for entry in index.list_published()]
    everything = [entry.identifier for entry in index.list_all()]

    assert "secret" not in published
    assert everything[0] == "secret"
    assert all(not entry.draft for entry in index.list_published())


def test_list_all_is_date_descending_with_reverse_identifier_ties(index):
    entries = list(index.list_all())

    for earlier, later in zip(entries, entries[1:]):
        assert earlier.date >= later.date
        if earlier.date == later.date:
            assert earlier.identifier > later.identifier


def test_two_posts_later_date_listed_first():
    index = ContentIndex([_entry("a", "2023-06-05"), _entry("b", "2023-10-31")])

    assert next(index.list_published()).identifier == "b"


def test_listings_are_restartable(index):
    listing = index.list_published()
    first = list(listing)

    assert list(listing) == []
    assert list(index.list_published()) == first


def test_listings_filter_external(index):
    assert [e.identifier for e in index.list_published(external=True)] == ["beta"]
    assert "beta" not in [e.identifier for e in index.list_all(external=False)]


def test_get_by_identifier_is_stable(index):
    first = index.get_by_identifier("june")
    second = index.get_by_identifier("june")

    assert first == second
    assert first.date == datetime.date(2023, 6, 5)


def test_get_by_identifier_returns_drafts(index):
    assert index.get_by_identifier("secret").draft is True


def test_get_by_identifier_missing_raises(index):
    with pytest.raises(NotFoundError) as excinfo:
        index.get_by_identifier("nope")

    assert excinfo.value.identifier == "nope"


def test_index_rejects_duplicate_identifiers():
    with pytest.raises(ContentValidationError):
        ContentIndex([_entry("same", "2023-01-01"), _entry("same", "2023-02-01")])


def test_index_supports_len_iter_and_contains(index):
    assert len(index) == 5
    assert "alpha" in index
    assert "missing" not in index
    assert [entry.identifier for entry in index][0] == "secret"


def test_paginate_splits_published_listing(index):
    first = index.paginate(1, per_page=3)
    second = index.paginate(2, per_page=3)

    assert [e.identifier for e in first.entries] == ["october", "beta", "alpha"]
    assert [e.identifier for e in second.entries] == ["june"]
    assert first.total_pages == 2
    assert not first.has_previous and first.has_next
    assert second.has_previous and not second.has_next


def test_paginate_with_drafts(index):
    page = index.paginate(1, per_page=10, include_drafts=True)

    assert page.entries[0].identifier == "secret"
    assert page.total_pages == 1


def test_paginate_empty_index_has_one_empty_page():
    page = ContentIndex([]).paginate(1, per_page=5)

    assert page.entries == []
    assert page.total_pages == 1


@pytest.mark.parametrize("page", [0, 3])
def test_paginate_out_of_range(index, page):
    with pytest.raises(NotFoundError):
        index.paginate(page, per_page=3)


def test_paginate_rejects_bad_page_size(index):
    with pytest.raises(ValueError):
        index.paginate(1, per_page=0)


def test_entry_link_for_local_and_external(index, site):
    assert entry_link(site, index.get_by_identifier("june")) == (
        "https://example.com/blog/june/"
    )
    assert entry_link(site, index.get_by_identifier("beta")) == (
        "https://elsewhere.example.com/beta"
    )
    assert entry_link(site, index.get_by_identifier("june"), posts_path="") == (
        "https://example.com/june/"
    )


def test_entry_link_escapes_identifier(site):
    entry = _entry("notes/my post", "2023-06-05")

    assert entry_link(site, entry) == "https://example.com/blog/notes/my%20post/"
