from datetime import date

from weekplanner.engine.busy_map import build_initial_busy, free_intervals
from weekplanner.engine.placement import (
    color_from_priority,
    schedule_task_continuous,
    schedule_task_split,
)
from weekplanner.models.entities import TaskSource
from weekplanner.utils.dates import list_week_dates


MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
SUNDAY_BEFORE = date(2023, 12, 31)


def empty_busy():
    return build_initial_busy([], [], list_week_dates(MONDAY))


class TestBusyMap:
    """Unit tests for seeding per-day occupancy."""

    def test_seeds_events_and_blocks(self, standup, existing_block):
        """Events and existing blocks land on their own day, merged."""
        busy = build_initial_busy([standup], [existing_block], list_week_dates(MONDAY))
        assert busy[MONDAY] == [(600, 660)]
        assert busy[TUESDAY] == [(540, 600)]
        assert len(busy) == 7

    def test_ignores_items_outside_week(self, standup):
        """Busy time dated outside the target week is dropped."""
        busy = build_initial_busy([standup], [], list_week_dates(date(2024, 1, 8)))
        assert all(v == [] for v in busy.values())

    def test_free_intervals_today_clamp(self, working_hours):
        """On today free time starts at now rounded up to the half hour."""
        busy = empty_busy()
        assert free_intervals(busy, MONDAY, working_hours, MONDAY, 790, 30) == [(810, 1050)]
        assert free_intervals(busy, TUESDAY, working_hours, MONDAY, 790, 30) == [(540, 1050)]

    def test_free_intervals_before_working_hours(self, working_hours):
        """An early "now" never pulls the start before working hours."""
        busy = empty_busy()
        assert free_intervals(busy, MONDAY, working_hours, MONDAY, 420, 30) == [(540, 1050)]


class TestContinuousPlacement:
    """Unit tests for single-span placement."""

    def test_skips_occupied_slot(self, standup, report_task, working_hours):
        """A 90-minute task after a 10:00-11:00 event lands at 11:00-12:30."""
        busy = build_initial_busy([standup], [], list_week_dates(MONDAY))
        block = schedule_task_continuous(report_task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0)

        assert block is not None
        assert (block.start_minutes, block.end_minutes) == (660, 750)
        assert block.date == MONDAY

    def test_first_fit_takes_earliest_interval(self, report_task, working_hours):
        """First interval long enough wins, even if a tighter one exists later."""
        busy = empty_busy()
        busy[MONDAY] = [(660, 1000)]  # free: 540-660 (120), 1000-1050 (50)
        block = schedule_task_continuous(report_task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0)
        assert (block.start_minutes, block.end_minutes) == (540, 630)

    def test_moves_to_next_day(self, task_factory, working_hours):
        """A task that fits nowhere on day one goes to day two."""
        task = task_factory("long", 240, TUESDAY)
        busy = empty_busy()
        busy[MONDAY] = [(700, 900)]  # free: 160 + 150
        block = schedule_task_continuous(task, busy, [MONDAY, TUESDAY], working_hours, SUNDAY_BEFORE, 0)
        assert block.date == TUESDAY
        assert block.start_minutes == 540

    def test_does_not_reserve(self, report_task, working_hours):
        """Continuous placement leaves the busy map to the caller."""
        busy = empty_busy()
        schedule_task_continuous(report_task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0)
        assert busy[MONDAY] == []

    def test_today_clamp(self, task_factory, working_hours):
        """At 13:10 a one-hour task due today starts at 13:30."""
        task = task_factory("call", 60, MONDAY)
        block = schedule_task_continuous(task, empty_busy(), [MONDAY], working_hours, MONDAY, 790)
        assert (block.start_minutes, block.end_minutes) == (810, 870)

    def test_no_fit_returns_none(self, task_factory, working_hours):
        """A task longer than working hours has no placement."""
        task = task_factory("huge", 600, MONDAY)
        assert schedule_task_continuous(task, empty_busy(), [MONDAY], working_hours, SUNDAY_BEFORE, 0) is None

    def test_block_identity_and_color(self, report_task, working_hours):
        """Block id is task:date:start and colour follows priority."""
        block = schedule_task_continuous(report_task, empty_busy(), [MONDAY], working_hours, SUNDAY_BEFORE, 0)
        assert block.id == "report:2024-01-01:540"
        assert block.source == TaskSource(task_id="report")
        assert block.color == color_from_priority(3) == "#f59e0b"
        assert block.fixed is False


class TestSplitPlacement:
    """Unit tests for chunked placement."""

    def test_spreads_over_intervals_and_days(self, task_factory, working_hours):
        """Chunks fill gaps in order, then continue on the next day."""
        task = task_factory("essay", 120, TUESDAY, can_split=True)
        busy = empty_busy()
        busy[MONDAY] = [(600, 1020)]  # free: 540-600, 1020-1050
        blocks = schedule_task_split(task, busy, [MONDAY, TUESDAY], working_hours, SUNDAY_BEFORE, 0)

        assert [(b.date, b.start_minutes, b.end_minutes) for b in blocks] == [
            (MONDAY, 540, 600),
            (MONDAY, 1020, 1050),
            (TUESDAY, 540, 570),
        ]
        assert sum(b.duration_minutes for b in blocks) == task.duration_minutes

    def test_reserves_on_success(self, task_factory, working_hours):
        """A successful split commits its chunks to the busy map."""
        task = task_factory("essay", 60, MONDAY, can_split=True)
        busy = empty_busy()
        schedule_task_split(task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0)
        assert busy[MONDAY] == [(540, 600)]

    def test_chunks_are_granularity_aligned(self, task_factory, working_hours):
        """Gaps shorter than a chunk are skipped and chunk lengths are multiples of 30."""
        task = task_factory("essay", 60, MONDAY, can_split=True)
        busy = empty_busy()
        busy[MONDAY] = [(560, 700), (745, 1000)]  # free: 540-560 (20), 700-745 (45), 1000-1050 (50)
        blocks = schedule_task_split(task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0)

        assert [(b.start_minutes, b.end_minutes) for b in blocks] == [(700, 730), (1000, 1030)]

    def test_only_aligned_capacity_counts(self, task_factory, working_hours):
        """115 free minutes in odd gaps hold only 60 aligned minutes, too few for 90."""
        task = task_factory("essay", 90, MONDAY, can_split=True)
        busy = empty_busy()
        busy[MONDAY] = [(560, 700), (745, 1000)]
        assert schedule_task_split(task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0) is None
        assert busy[MONDAY] == [(560, 700), (745, 1000)]

    def test_failure_leaves_busy_map_untouched(self, task_factory, working_hours):
        """Not enough room: no chunks and no reservations."""
        task = task_factory("thesis", 600, MONDAY, can_split=True)
        busy = empty_busy()
        assert schedule_task_split(task, busy, [MONDAY], working_hours, SUNDAY_BEFORE, 0) is None
        assert busy[MONDAY] == []

    def test_remainder_below_chunk_is_unplaceable(self, task_factory, working_hours):
        """A 45-minute split task leaves a 15-minute remainder that no chunk can hold."""
        task = task_factory("odd", 45, MONDAY, can_split=True)
        assert schedule_task_split(task, empty_busy(), [MONDAY], working_hours, SUNDAY_BEFORE, 0) is None

    def test_chunk_ids_unique(self, task_factory, working_hours):
        task = task_factory("essay", 240, TUESDAY, can_split=True)
        busy = empty_busy()
        busy[MONDAY] = [(600, 700), (800, 900)]
        blocks = schedule_task_split(task, busy, [MONDAY, TUESDAY], working_hours, SUNDAY_BEFORE, 0)
        ids = [b.id for b in blocks]
        assert len(ids) == len(set(ids))

    def test_today_clamp_applies(self, task_factory, working_hours):
        """Chunks on today never start before now rounded up."""
        task = task_factory("essay", 60, MONDAY, can_split=True)
        blocks = schedule_task_split(task, empty_busy(), [MONDAY], working_hours, MONDAY, 790)
        assert [(b.start_minutes, b.end_minutes) for b in blocks] == [(810, 870)]
