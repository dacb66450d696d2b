"""
Reset the database and load demo data.

Run this from the backend root:

    (.venv) python init_database.py

It drops every table, recreates the schema and inserts the demo admin,
a test user, sample complaints and news updates. All existing data is lost.
"""

from tazasu.core.config import settings
from tazasu.core.logging import setup_logging
from tazasu.db.init_db import drop_db, init_db, seed_initial_data
from tazasu.db.session import Database, session_scope


def main() -> None:
    setup_logging(settings.log_level)
    database = Database(settings.database_url)
    try:
        print("[INFO] Dropping existing tables...")
        drop_db(database)

        print("[INFO] Creating schema...")
        init_db(database)

        with session_scope(database) as db:
            counts = seed_initial_data(db, settings)

        print("[DONE] Database initialized.")
        for table, count in counts.items():
            print(f"  {table}: {count}")
        print()
        print("Test accounts:")
        print("  admin: admin@tazasu.kz / admin123")
        print("  user:  user@test.com / user123")
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
