#!/usr/bin/env python3
"""
Create the PromptForms tables (users, forms, submissions, audit_log).

Existing tables are left untouched, so the script can be re-run after
adding a model.

Usage:
    python -m scripts.init_db          # from the project root
"""

import sys

from sqlalchemy import inspect
from sqlalchemy.engine import make_url

from promptforms.config import get_settings
from promptforms.db.connection import get_engine
from promptforms.db.models import Base


def main() -> int:
    settings = get_settings()
    print(f"Database: {make_url(settings.database_url).render_as_string(hide_password=True)}")

    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    present = set(inspect(engine).get_table_names())
    expected = sorted(Base.metadata.tables)
    for name in expected:
        print(f"  {'ok' if name in present else 'MISSING':8} {name}")

    missing = [name for name in expected if name not in present]
    if missing:
        print(f"\n{len(missing)} table(s) could not be created.")
        return 1

    print("\nDatabase ready.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
