#!/usr/bin/env python3
"""
Create the directory tables in a local database.

Usage:
    DATABASE_URL=sqlite:///./directory.db python setup_local_db.py [--demo]

Production databases should use `alembic upgrade head` instead.
"""
import sys

from app.db import Base, engine, SessionLocal
from app.models import Tool

DEMO_TOOLS = [
    {
        "title": "Five Senses Grounding",
        "url": "https://example.org/tools/five-senses",
        "category": "mindfulness",
        "description": "Name five things you see, four you hear, three you can touch, two you smell and one you taste.",
        "creator_name": "Example Clinic",
    },
    {
        "title": "TIPP Skills Card",
        "url": "https://example.org/tools/tipp",
        "category": "distress-tolerance",
        "description": "Temperature, intense exercise, paced breathing and paired muscle relaxation for acute distress.",
        "creator_name": "Example Clinic",
    },
    {
        "title": "DEAR MAN Worksheet",
        "url": "https://example.org/tools/dear-man",
        "category": "interpersonal-effectiveness",
        "description": "Script a request step by step before a difficult conversation.",
        "creator_name": "Example Clinic",
    },
]


def main():
    if engine is None:
        print("✗ DATABASE_URL is not set")
        sys.exit(1)

    Base.metadata.create_all(bind=engine)
    print(f"✓ Tables created on {engine.url.render_as_string(hide_password=True)}")

    if "--demo" not in sys.argv[1:]:
        return

    db = SessionLocal()
    try:
        if db.query(Tool).count():
            print("✓ Tools already present, skipping demo data")
            return
        for data in DEMO_TOOLS:
            db.add(Tool(approved=True, **data))
        db.commit()
        print(f"✓ Added {len(DEMO_TOOLS)} demo tools")
    except Exception as e:
        db.rollback()
        print(f"✗ Error: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
