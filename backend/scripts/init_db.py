"""Create (or recreate) the survey tables, optionally loading demo data."""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, Base
import app.models  # noqa: F401 - registers all models


def init_db(reset: bool = False, seed: bool = False):
    if reset:
        print("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)
    print("Creating tables: " + ", ".join(sorted(Base.metadata.tables)))
    Base.metadata.create_all(bind=engine)
    print(f"Database ready: {engine.url.render_as_string(hide_password=True)}")

    if seed:
        from scripts.seed_data import seed as run_seed

        run_seed()


def main():
    parser = argparse.ArgumentParser(description="Initialize the survey database.")
    parser.add_argument("--reset", action="store_true", help="drop every table before creating it again")
    parser.add_argument("--seed", action="store_true", help="load demo users and a sample survey")
    args = parser.parse_args()
    init_db(reset=args.reset, seed=args.seed)


if __name__ == "__main__":
    main()
