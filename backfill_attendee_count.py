#!/usr/bin/env python3
"""
Recompute attendee_count for every event from its attendee rows.
Safe to run repeatedly; only events whose count drifted are changed.
"""
import sys

from eventify.database import SessionLocal
from eventify.maintenance import recount_attendee_counts


def backfill_attendee_count():
    db = SessionLocal()
    try:
        changed = recount_attendee_counts(db)
        for event_id, old, new in changed:
            print(f"Event {event_id}: {old} -> {new}")
        return len(changed)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("Recounting attendees...")
    try:
        count = backfill_attendee_count()
        print(f"✅ Completed! {count} event(s) updated.")
    except Exception as e:
        print(f"❌ Failed to recount attendees: {e}")
        sys.exit(1)
