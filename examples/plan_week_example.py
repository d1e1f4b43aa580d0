"""
Example: Auto-scheduling a week with WeekPlanner

This example builds a small week by hand, runs the engine, and prints the
resulting calendar. Run it from the repository root:

    python examples/plan_week_example.py
"""

from datetime import date, datetime

from weekplanner.engine import planner
from weekplanner.models.entities import FixedEvent, Priority, Task, WorkingHours
from weekplanner.utils.dates import human_duration, minutes_to_time_string


monday = date(2024, 1, 1)

# 1. Start from an empty planner on the target week
state = planner.new_state(monday)
state = planner.update_working_hours(state, WorkingHours(start_minutes=9 * 60, end_minutes=17 * 60 + 30))

# 2. Fixed events are never moved
state = planner.add_event(state, FixedEvent(
    id="standup", title="Standup", date=monday, start_minutes=10 * 60, end_minutes=11 * 60,
))
state = planner.add_event(state, FixedEvent(
    id="review", title="Design review", date=date(2024, 1, 2), start_minutes=13 * 60, end_minutes=15 * 60,
))

# 3. Tasks are placed by due date, then priority, then duration
state = planner.add_task(state, Task(
    id="report", title="Quarterly report", duration_minutes=90,
    due_date=monday, priority=Priority.HIGH,
))
state = planner.add_task(state, Task(
    id="slides", title="Slides", duration_minutes=240,
    due_date=date(2024, 1, 3), priority=Priority.MEDIUM, can_split=True,
))
state = planner.add_task(state, Task(
    id="offsite", title="Plan offsite", duration_minutes=600,
    due_date=monday, priority=Priority.LOW,
))

# 4. Run the engine as if it were Monday 08:00
state = planner.auto_schedule_all(state, now=datetime(2024, 1, 1, 8, 0))

for block in planner.visible_blocks(state):
    kind = "event" if block.fixed else "task "
    print(
        f"{block.date:%a %d} {minutes_to_time_string(block.start_minutes)}-"
        f"{minutes_to_time_string(block.end_minutes)} [{kind}] {block.title} "
        f"({human_duration(block.duration_minutes)})"
    )

placed = {b.task_id for b in state.scheduled}
for task in state.tasks:
    if task.id not in placed:
        print(f"unscheduled: {task.title} ({human_duration(task.duration_minutes)})")
