from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from ledger_api.features.transactions.coordinator import normalize_tag_names
from ledger_api.features.transactions.filters import MAX_ITEMS_PER_PAGE, TransactionFilters
from ledger_api.models import TAG_NAME_MAX_LENGTH


def test_defaults() -> None:
    filters = TransactionFilters()
    assert filters.sort_by == "timestamp"
    assert filters.sort_order == "DESC"
    assert filters.page == 1
    assert filters.items_per_page == 10
    assert filters.offset == 0
    assert filters.tags == []


def test_offset_follows_page_size() -> None:
    assert TransactionFilters(page=3, items_per_page=25).offset == 50


def test_dates_are_normalized_to_utc() -> None:
    naive = TransactionFilters(start_date=datetime(2024, 1, 1, 12, 0))
    assert naive.start_date == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    shifted = TransactionFilters(
        end_date=datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    )
    assert shifted.end_date == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_sort_order_is_case_insensitive() -> None:
    assert TransactionFilters(sort_order="asc").sort_order == "ASC"


def test_blank_tags_and_description_are_dropped() -> None:
    filters = TransactionFilters(tags=[" food ", "", "  "], description="   ")
    assert filters.tags == ["food"]
    assert filters.description is None


@pytest.mark.parametrize(
    "params",
    [
        {"items_per_page": MAX_ITEMS_PER_PAGE + 1},
        {"page": 0},
        {"sort_by": "user_id"},
        {"min_amount": 5, "max_amount": 1},
        {"start_date": datetime(2024, 2, 1), "end_date": datetime(2024, 1, 1)},
    ],
)
def test_invalid_combinations(params: dict) -> None:
    with pytest.raises(ValidationError):
        TransactionFilters(**params)


def test_tag_names_are_trimmed_and_deduplicated() -> None:
    assert normalize_tag_names(["food", "food", " ", " food ", "Food"]) == ["food", "Food"]
    assert normalize_tag_names([]) == []


def test_overlong_tag_name_is_rejected() -> None:
    with pytest.raises(HTTPException) as excinfo:
        normalize_tag_names(["x" * (TAG_NAME_MAX_LENGTH + 1)])
    assert excinfo.value.status_code == 400
