"""
Listing utility tests: filtering, sorting and pagination of plain records.
"""

from datetime import date, datetime

import pytest

from numberflow.services.listing import (
    ALL,
    ListingQuery,
    contains,
    exact,
    filter_by_predicate,
    paginate,
    sort_records,
    total_pages,
)


RECORDS = [
    {"id": 1, "mobile": "9876543210", "status": "RTS", "assigned_to": "banana", "price": 30},
    {"id": 2, "mobile": "9123456780", "status": "Non-RTS", "assigned_to": "Apple", "price": None},
    {"id": 3, "mobile": "9988776655", "status": "RTS", "assigned_to": "cherry", "price": 10},
    {"id": 4, "mobile": "9000000001", "status": "Non-RTS", "assigned_to": None, "price": 30},
]


def ids(rows):
    return [r["id"] for r in rows]


class TestSortRecords:

    def test_strings_sort_case_insensitively(self):
        rows = sort_records(RECORDS, "assigned_to")
        assert ids(rows) == [2, 1, 3, 4]

    def test_nulls_last_in_both_directions(self):
        assert ids(sort_records(RECORDS, "price"))[-1] == 2
        assert ids(sort_records(RECORDS, "price", "descending"))[-1] == 2

    def test_descending_keeps_input_order_for_ties(self):
        rows = sort_records(RECORDS, "price", "descending")
        assert ids(rows) == [1, 4, 3, 2]

    def test_dates_and_datetimes_compare(self):
        rows = [
            {"id": 1, "when": datetime(2024, 6, 2, 9, 0)},
            {"id": 2, "when": date(2024, 6, 1)},
            {"id": 3, "when": datetime(2024, 6, 1, 12, 0)},
        ]
        assert ids(sort_records(rows, "when")) == [2, 3, 1]

    def test_does_not_mutate_input(self):
        before = list(RECORDS)
        sort_records(RECORDS, "mobile", "descending")
        assert RECORDS == before

    def test_rejects_unknown_direction(self):
        with pytest.raises(ValueError):
            sort_records(RECORDS, "mobile", "sideways")

    @pytest.mark.parametrize("key", ["id", "mobile"])
    def test_descending_reverses_ascending_without_ties(self, key):
        ascending = sort_records(RECORDS, key, "ascending")
        descending = sort_records(RECORDS, key, "descending")
        assert descending == list(reversed(ascending))


class TestPaginate:

    def test_slices_pages(self):
        assert paginate(list(range(25)), 1, 10) == list(range(10))
        assert paginate(list(range(25)), 3, 10) == [20, 21, 22, 23, 24]

    @pytest.mark.parametrize("page", [0, -1, 4])
    def test_out_of_range_pages_are_empty(self, page):
        assert paginate(list(range(25)), page, 10) == []

    @pytest.mark.parametrize("length", [0, 1, 9, 10, 11, 25, 30])
    @pytest.mark.parametrize("page_size", [1, 3, 10])
    def test_pages_rebuild_the_list(self, length, page_size):
        records = list(range(length))
        pages = total_pages(length, page_size)

        joined = []
        for page in range(1, pages + 1):
            joined.extend(paginate(records, page, page_size))
        assert joined == records

        for page in range(1, pages + 3):
            empty = paginate(records, page, page_size) == []
            assert empty == ((page - 1) * page_size >= length)

    def test_total_pages(self):
        assert total_pages(0, 10) == 0
        assert total_pages(10, 10) == 1
        assert total_pages(11, 10) == 2


class TestFilter:

    def test_all_is_a_wildcard(self):
        assert filter_by_predicate(RECORDS, [exact("status", ALL)]) == RECORDS

    def test_exact_match(self):
        assert ids(filter_by_predicate(RECORDS, [exact("status", "RTS")])) == [1, 3]

    def test_contains_is_case_insensitive(self):
        assert ids(filter_by_predicate(RECORDS, [contains("assigned_to", "APP")])) == [2]

    def test_predicates_combine_with_and(self):
        rows = filter_by_predicate(RECORDS, [exact("status", "RTS"), contains("mobile", "9876")])
        assert ids(rows) == [1]

    def test_accepts_callables(self):
        rows = filter_by_predicate(RECORDS, [lambda r: (r["price"] or 0) > 20])
        assert ids(rows) == [1, 4]


class TestListingQuery:

    def test_filter_sort_then_page(self):
        query = ListingQuery(
            predicates=[exact("status", "RTS")],
            sort_key="price",
            sort_direction="ascending",
            page=1,
            page_size=1,
        )
        result = query.apply(RECORDS)
        assert ids(result["items"]) == [3]
        assert result["count"] == 2
        assert result["total_pages"] == 2
        assert result["page"] == 1
