"""CLI script to insert the default book categories into an empty DB.
Usage: python scripts/seed_categories.py
"""
import sys
import pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from bookstore.database import engine, create_db_and_tables
from bookstore.seed import seed_categories

if __name__ == '__main__':
    create_db_and_tables()
    with Session(engine) as session:
        inserted = seed_categories(session)
    print(f'Inserted {inserted} categories' if inserted else 'Categories already present; nothing to do')
