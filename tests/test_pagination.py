import pytest

from rabbitmq_http.errors import InvalidArgument
from rabbitmq_http.pagination import PaginationParams


def test_defaults_to_no_query():
    assert PaginationParams().to_query_params() is None
    assert PaginationParams().to_query_string() is None


def test_first_page():
    params = PaginationParams.first_page()
    assert params.to_query_string() == "page=1&page_size=100"
    assert params == PaginationParams(page=1, page_size=100)


@pytest.mark.parametrize(
    "page, page_size, expected",
    [(2, None, "page=2"), (None, 500, "page_size=500"), (3, 1, "page=3&page_size=1")],
)
def test_only_given_fields_are_emitted(page, page_size, expected):
    assert PaginationParams(page, page_size).to_query_string() == expected


@pytest.mark.parametrize("page_size", [0, 501, 10000])
def test_page_size_out_of_range(page_size):
    with pytest.raises(InvalidArgument, match="page_size"):
        PaginationParams(page=1, page_size=page_size)


def test_pages_are_one_indexed():
    with pytest.raises(ValueError):
        PaginationParams(page=0)
