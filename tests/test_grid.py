"""Weekly grid arithmetic: day conventions, hour walks and slot priority"""

from datetime import date, datetime

from raid_ledger.domain.game_time.grid import (
    committed_storage_keys,
    compose_slots,
    event_day_spans,
    expand_dates,
    iter_hours,
    local_cells,
    to_display_day,
    to_storage_day,
)

# Sunday
WEEK_START = datetime(2026, 2, 8)


class TestDayConventions:
    def test_sunday_is_last_in_storage(self):
        assert to_storage_day(0) == 6

    def test_monday_is_first_in_storage(self):
        assert to_storage_day(1) == 0

    def test_storage_to_display(self):
        assert to_display_day(0) == 1
        assert to_display_day(6) == 0

    def test_conversions_are_inverse(self):
        for day in range(7):
            assert to_display_day(to_storage_day(day)) == day


class TestIterHours:
    def test_starts_on_the_hour(self):
        hours = list(iter_hours(datetime(2026, 2, 9, 19), datetime(2026, 2, 9, 21)))
        assert hours == [datetime(2026, 2, 9, 19), datetime(2026, 2, 9, 20)]

    def test_partial_first_hour_is_skipped(self):
        hours = list(iter_hours(datetime(2026, 2, 9, 19, 30), datetime(2026, 2, 9, 22)))
        assert hours == [datetime(2026, 2, 9, 20), datetime(2026, 2, 9, 21)]

    def test_partial_last_hour_is_counted(self):
        hours = list(iter_hours(datetime(2026, 2, 9, 19), datetime(2026, 2, 9, 20, 15)))
        assert hours == [datetime(2026, 2, 9, 19), datetime(2026, 2, 9, 20)]

    def test_empty_range(self):
        assert list(iter_hours(datetime(2026, 2, 9, 19), datetime(2026, 2, 9, 19))) == []


def test_committed_storage_keys_use_monday_first_days():
    keys = committed_storage_keys([(datetime(2026, 2, 8, 20), datetime(2026, 2, 8, 22))])
    # 2026-02-08 is a Sunday -> storage day 6
    assert keys == {(6, 20), (6, 21)}


class TestLocalCells:
    def test_utc_viewer(self):
        cells = list(local_cells(datetime(2026, 2, 9, 20), datetime(2026, 2, 9, 22), WEEK_START))
        assert cells == [(1, 20), (1, 21)]

    def test_offset_shifts_the_hour(self):
        # tzOffset=300 is UTC-5: 01:00 UTC shows as 20:00 local
        cells = list(local_cells(datetime(2026, 2, 9, 1), datetime(2026, 2, 9, 3), WEEK_START, 300))
        assert cells == [(1, 20), (1, 21)]

    def test_event_before_week_is_clamped(self):
        cells = list(local_cells(datetime(2026, 2, 7, 22), datetime(2026, 2, 8, 2), WEEK_START))
        assert cells == [(0, 0), (0, 1)]

    def test_event_after_week_end_is_clamped(self):
        cells = list(local_cells(datetime(2026, 2, 14, 23), datetime(2026, 2, 15, 2), WEEK_START))
        assert cells == [(6, 23)]

    def test_event_outside_week(self):
        assert list(local_cells(datetime(2026, 2, 20, 20), datetime(2026, 2, 20, 22), WEEK_START)) == []


class TestEventDaySpans:
    def test_single_day(self):
        spans = event_day_spans(datetime(2026, 2, 10, 19), datetime(2026, 2, 10, 23), WEEK_START)
        assert spans == [(2, 19, 23)]

    def test_midnight_spanning_event_splits(self):
        spans = event_day_spans(datetime(2026, 2, 9, 22), datetime(2026, 2, 10, 2), WEEK_START)
        assert spans == [(1, 22, 24), (2, 0, 2)]

    def test_sub_hour_event_has_no_span(self):
        spans = event_day_spans(datetime(2026, 2, 9, 20, 15), datetime(2026, 2, 9, 20, 45), WEEK_START)
        assert spans == []


def test_expand_dates_is_inclusive():
    assert list(expand_dates(date(2026, 2, 10), date(2026, 2, 12))) == [
        date(2026, 2, 10),
        date(2026, 2, 11),
        date(2026, 2, 12),
    ]


class TestComposeSlots:
    def test_priority_absence_override_committed_available(self):
        template = [(1, 20), (2, 20), (3, 20), (4, 20)]
        committed = {(2, 20), (3, 20)}
        absences = {date(2026, 2, 9)}  # Monday
        overrides = {(date(2026, 2, 11), 20): "blocked"}  # Wednesday

        slots = compose_slots(template, committed, WEEK_START, absences, overrides)
        statuses = {(s["dayOfWeek"], s["hour"]): s["status"] for s in slots}

        assert statuses[(1, 20)] == "blocked"
        assert statuses[(2, 20)] == "committed"
        assert statuses[(3, 20)] == "blocked"
        assert statuses[(4, 20)] == "available"
        assert all(s["fromTemplate"] for s in slots)

    def test_override_beats_commitment(self):
        slots = compose_slots(
            [(3, 20)], {(3, 20)}, WEEK_START, overrides={(date(2026, 2, 11), 20): "available"}
        )
        assert slots == [{"dayOfWeek": 3, "hour": 20, "status": "available", "fromTemplate": True}]

    def test_absence_beats_override(self):
        slots = compose_slots(
            [(3, 20)],
            set(),
            WEEK_START,
            absence_dates={date(2026, 2, 11)},
            overrides={(date(2026, 2, 11), 20): "available"},
        )
        assert slots[0]["status"] == "blocked"

    def test_off_template_commitments_are_appended(self):
        slots = compose_slots([(1, 20)], {(1, 20), (5, 22), (5, 21)}, WEEK_START)
        assert slots == [
            {"dayOfWeek": 1, "hour": 20, "status": "committed", "fromTemplate": True},
            {"dayOfWeek": 5, "hour": 21, "status": "committed", "fromTemplate": False},
            {"dayOfWeek": 5, "hour": 22, "status": "committed", "fromTemplate": False},
        ]

    def test_empty_inputs(self):
        assert compose_slots([], set(), WEEK_START) == []
