"""
Scheduling core

Pure, synchronous building blocks for availability:
- Interval arithmetic (intervals.py)
- Working hours resolution (working_hours.py)
- Slot generation (slot_generator.py)
- Conflict detection (conflict_checker.py)

Nothing in this package touches the database.
"""
