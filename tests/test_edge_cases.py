from datetime import date, datetime

from weekplanner.engine.scheduler import auto_schedule
from weekplanner.models.entities import EventSource, FixedEvent, ScheduledBlock, TaskSource, WorkingHours


MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)
BEFORE_WEEK = datetime(2023, 12, 31, 8, 0)


class TestEdgeCases:
    """Test edge cases and boundary conditions."""

    def test_no_tasks(self, working_hours):
        assert auto_schedule([], [], [], MONDAY, working_hours, now=BEFORE_WEEK) == []

    def test_exact_fit(self, task_factory):
        """A task exactly as long as working hours fills the day."""
        hours = WorkingHours(540, 600)
        blocks = auto_schedule([task_factory("t", 60, MONDAY)], [], [], MONDAY, hours, now=BEFORE_WEEK)
        assert [(b.start_minutes, b.end_minutes) for b in blocks] == [(540, 600)]

    def test_inverted_event_is_ignored(self, task_factory, working_hours):
        """Busy time with start >= end occupies nothing."""
        bad = FixedEvent(id="bad", title="Bad", date=MONDAY, start_minutes=700, end_minutes=600)
        blocks = auto_schedule([task_factory("t", 510, MONDAY)], [bad], [], MONDAY, working_hours, now=BEFORE_WEEK)
        assert [(b.start_minutes, b.end_minutes) for b in blocks] == [(540, 1050)]

    def test_event_outside_working_hours(self, task_factory, working_hours):
        """Early-morning events do not eat into working hours."""
        gym = FixedEvent(id="gym", title="Gym", date=MONDAY, start_minutes=420, end_minutes=540)
        blocks = auto_schedule([task_factory("t", 60, MONDAY)], [gym], [], MONDAY, working_hours, now=BEFORE_WEEK)
        assert blocks[0].start_minutes == 540

    def test_now_after_working_hours(self, task_factory, working_hours):
        """Late in the day, a task due today has nowhere to go."""
        blocks = auto_schedule(
            [task_factory("t", 30, MONDAY)], [], [], MONDAY, working_hours, now=datetime(2024, 1, 1, 17, 45)
        )
        assert blocks == []

    def test_now_after_hours_rolls_to_tomorrow(self, task_factory, working_hours):
        blocks = auto_schedule(
            [task_factory("t", 30, SUNDAY)], [], [], MONDAY, working_hours, now=datetime(2024, 1, 1, 17, 45)
        )
        assert blocks[0].date == date(2024, 1, 2)

    def test_now_on_grid_is_not_rounded_further(self, task_factory, working_hours):
        blocks = auto_schedule(
            [task_factory("t", 30, MONDAY)], [], [], MONDAY, working_hours, now=datetime(2024, 1, 1, 12, 0)
        )
        assert blocks[0].start_minutes == 720

    def test_due_after_week_uses_whole_week(self, task_factory, working_hours):
        """A task due next month is still eligible on every day of this week."""
        tasks = [task_factory(f"t{i}", 510, date(2024, 2, 1)) for i in range(8)]
        blocks = auto_schedule(tasks, [], [], MONDAY, working_hours, now=BEFORE_WEEK)
        assert sorted(b.date for b in blocks) == [date(2024, 1, d) for d in range(1, 8)]

    def test_event_sourced_existing_block_is_busy_but_not_dedup(self, task_factory, working_hours):
        """Existing blocks of any source seed busy time; only task blocks mark tasks as placed."""
        event_block = ScheduledBlock(
            id="event:t", source=EventSource(event_id="t"), title="Evt", date=MONDAY,
            start_minutes=540, end_minutes=600, color="#6b7280", fixed=True,
        )
        blocks = auto_schedule([task_factory("t", 60, MONDAY)], [], [event_block], MONDAY, working_hours, now=BEFORE_WEEK)
        assert [(b.task_id, b.start_minutes) for b in blocks] == [("t", 600)]

    def test_block_from_other_week_counts_as_placed(self, task_factory, working_hours):
        """An old block for a task still counts as placed, even from another week."""
        old = ScheduledBlock(
            id="t:2023-12-25:540", source=TaskSource(task_id="t"), title="T", date=date(2023, 12, 25),
            start_minutes=540, end_minutes=600, color="#3b82f6",
        )
        assert auto_schedule([task_factory("t", 60, SUNDAY)], [], [old], MONDAY, working_hours, now=BEFORE_WEEK) == []

    def test_non_monday_week_start(self, task_factory, working_hours):
        """Any day can start the seven-day window."""
        wednesday = date(2024, 1, 3)
        blocks = auto_schedule(
            [task_factory("t", 60, date(2024, 1, 9))], [], [], wednesday, working_hours, now=BEFORE_WEEK
        )
        assert blocks[0].date == wednesday
