#!/usr/bin/env python3
"""
Repair user profiles: fill missing names and roles, recompute profile_complete.
"""
import sys

from eventify.database import SessionLocal
from eventify.maintenance import fix_user_profiles


if __name__ == "__main__":
    print("Starting user profile fix...")
    db = SessionLocal()
    try:
        fixed = fix_user_profiles(db)
        print(f"✅ Fixed: {fixed} user(s)")
    except Exception as e:
        db.rollback()
        print(f"❌ Error fixing user profiles: {e}")
        sys.exit(1)
    finally:
        db.close()
