"""Create the schema and the default accounts, systems and scenarios."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from aibvs.config import get_settings
from aibvs.db import build_engine, build_sessionmaker, create_all
from aibvs.services.bootstrap import seed_defaults


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    engine = build_engine(settings.database_url)
    create_all(engine)
    session = build_sessionmaker(engine)()

    try:
        created = seed_defaults(session, settings)
        if any(created.values()):
            print(f"Seed data inserted: {', '.join(name for name, done in created.items() if done)}.")
        else:
            print("Nothing to seed; defaults already present.")
    finally:
        session.close()
        engine.dispose()


if __name__ == "__main__":
    main()
