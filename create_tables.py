#!/usr/bin/env python3
"""
Script to create database tables
Run this after the database is created to set up all tables.
Set ADMIN_EMAIL and ADMIN_PASSWORD to also create (or promote) an admin account.
"""
import os
import sys

from eventify.database import Base, engine, SessionLocal
from eventify.maintenance import create_admin


def create_tables():
    """Create all database tables"""
    try:
        print("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully!")
        return True
    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        return False


def ensure_admin():
    email = os.getenv("ADMIN_EMAIL")
    if not email:
        return
    db = SessionLocal()
    try:
        admin = create_admin(db, email, os.getenv("ADMIN_PASSWORD"), os.getenv("ADMIN_NAME", "Administrator"))
        print(f"✅ Admin account ready: {admin.email}")
    finally:
        db.close()


if __name__ == "__main__":
    if not create_tables():
        sys.exit(1)
    ensure_admin()
