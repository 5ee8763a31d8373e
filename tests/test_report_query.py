"""Report query builder tests: filters, ordering and pagination."""

import pytest

from civicdesk.core.exceptions import ValidationFailure
from civicdesk.models import ReportStatus
from civicdesk.services.report_service import (
    ReportFilter,
    list_reports,
    list_reports_by_status,
    list_reports_by_user,
)


def test_first_page_of_45(make_report, minutes, db):
    for i in range(45):
        make_report(created_at=minutes(i))

    items, meta = list_reports(db, ReportFilter(page=1, limit=20))

    assert len(items) == 20
    assert meta.model_dump() == {"page": 1, "limit": 20, "total": 45, "total_pages": 3}
    assert meta.model_dump(by_alias=True)["totalPages"] == 3


def test_last_page_holds_remainder(make_report, minutes, db):
    reports = [make_report(created_at=minutes(i)) for i in range(45)]

    items, meta = list_reports(db, ReportFilter(page=3, limit=20))

    assert len(items) == 5
    assert meta.page == 3
    # oldest five, still newest first
    assert [r.id for r in items] == [r.id for r in reversed(reports[:5])]


def test_page_past_the_end_is_empty(make_report, db):
    make_report()
    items, meta = list_reports(db, ReportFilter(page=4, limit=20))
    assert items == []
    assert meta.total == 1
    assert meta.total_pages == 1


def test_empty_result_still_has_one_page(db):
    items, meta = list_reports(db)
    assert items == []
    assert meta.total == 0
    assert meta.total_pages == 1
    assert meta.page == 1
    assert meta.limit == 20


def test_newest_first_with_ties_in_insertion_order(make_report, minutes, db):
    old = make_report(created_at=minutes(0))
    tie_a = make_report(created_at=minutes(5))
    tie_b = make_report(created_at=minutes(5))
    tie_c = make_report(created_at=minutes(5))
    new = make_report(created_at=minutes(9))

    items, _ = list_reports(db)

    assert [r.id for r in items] == [new.id, tie_a.id, tie_b.id, tie_c.id, old.id]


def test_filters_combine_with_and(make_report, make_user, minutes, db):
    alice = make_user()
    bob = make_user()
    match = make_report(user=alice, status=ReportStatus.IN_PROGRESS, created_at=minutes(10))
    make_report(user=alice, status=ReportStatus.PENDING, created_at=minutes(10))
    make_report(user=bob, status=ReportStatus.IN_PROGRESS, created_at=minutes(10))
    make_report(user=alice, status=ReportStatus.IN_PROGRESS, created_at=minutes(100))

    items, meta = list_reports(
        db,
        ReportFilter(
            status=ReportStatus.IN_PROGRESS,
            user_id=alice.id,
            date_from=minutes(0),
            date_to=minutes(50),
        ),
    )

    assert [r.id for r in items] == [match.id]
    assert meta.total == 1


def test_absent_filters_do_not_constrain(make_report, make_user, db):
    make_report(user=make_user(), status=ReportStatus.PENDING)
    make_report(user=make_user(), status=ReportStatus.CLOSED)

    items, meta = list_reports(db, ReportFilter(status=None, user_id=None))

    assert meta.total == 2
    assert len(items) == 2


def test_date_bounds_are_inclusive(make_report, minutes, db):
    at_start = make_report(created_at=minutes(10))
    at_end = make_report(created_at=minutes(20))
    make_report(created_at=minutes(9))
    make_report(created_at=minutes(21))

    items, _ = list_reports(db, ReportFilter(date_from=minutes(10), date_to=minutes(20)))

    assert {r.id for r in items} == {at_start.id, at_end.id}


def test_status_filter_accepts_wire_value(make_report, db):
    reviewed = make_report(status=ReportStatus.REVIEWED)
    make_report(status=ReportStatus.PENDING)

    items, _ = list_reports(db, ReportFilter(status="reviewed"))

    assert [r.id for r in items] == [reviewed.id]


@pytest.mark.parametrize("page,limit", [(0, 20), (1, 0), (1, 101), (-1, 10)])
def test_out_of_range_pagination_rejected(db, page, limit):
    with pytest.raises(ValidationFailure):
        list_reports(db, ReportFilter(page=page, limit=limit))


def test_unknown_status_rejected(db):
    with pytest.raises(ValidationFailure):
        list_reports(db, ReportFilter(status="archived"))


def test_inverted_date_range_matches_nothing(make_report, minutes, db):
    make_report(created_at=minutes(5))

    items, meta = list_reports(db, ReportFilter(date_from=minutes(10), date_to=minutes(0)))

    assert items == []
    assert (meta.total, meta.total_pages) == (0, 1)


def test_list_by_user_and_status(make_report, make_user, minutes, db):
    alice = make_user()
    first = make_report(user=alice, created_at=minutes(1))
    second = make_report(user=alice, status=ReportStatus.RESOLVED, created_at=minutes(2))
    make_report(user=make_user(), status=ReportStatus.RESOLVED, created_at=minutes(3))

    assert [r.id for r in list_reports_by_user(db, alice.id)] == [second.id, first.id]
    assert len(list_reports_by_status(db, ReportStatus.RESOLVED)) == 2
    assert list_reports_by_status(db, "closed") == []
