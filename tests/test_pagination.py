import pytest

from app.services.errors import InvalidArgument
from app.services.pagination import Page, page_count, paginate


def test_page_count_is_ceiling():
    assert page_count(0, 10) == 0
    assert page_count(1, 10) == 1
    assert page_count(10, 10) == 1
    assert page_count(11, 10) == 2


def test_paginate_slices_and_reports_totals():
    page = paginate(list(range(25)), page=3, page_size=10)

    assert page.items == [20, 21, 22, 23, 24]
    assert page.total == 25
    assert page.pages == 3


def test_page_beyond_last_is_empty():
    page = paginate(list(range(5)), page=4, page_size=2)

    assert page.items == []
    assert page.total == 5
    assert page.pages == 3


@pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (1, 101)])
def test_invalid_paging(page, page_size):
    with pytest.raises(InvalidArgument):
        paginate([], page, page_size)


def test_empty_page_defaults():
    assert Page().pages == 0
