#!/usr/bin/env python3
"""
Print the table layout the application expects.
"""
from eventify.maintenance import describe_schema


if __name__ == "__main__":
    for table, columns in describe_schema().items():
        print(f"{table}:")
        for name, column_type, nullable in columns:
            print(f"  {name:<24} {column_type:<16} {'NULL' if nullable else 'NOT NULL'}")
        print()
