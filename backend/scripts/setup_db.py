"""Create the database schema and optionally provision a project.

Usage:
    python scripts/setup_db.py
    python scripts/setup_db.py --project "My Site"
    python scripts/setup_db.py --reset --project "My Site"
"""
import argparse
import sys
from typing import Optional

from sqlalchemy.orm import Session

from nomadai.database import Base, SessionLocal, engine
from nomadai.models import Project
from nomadai.utils.hashing import generate_api_key
from nomadai.utils.logger import logger


def create_schema(reset: bool = False) -> None:
    """Create all tables, dropping existing ones first when ``reset`` is set."""
    if reset:
        logger.warning("Dropping existing tables")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema is up to date")


def create_project(db: Session, name: str, api_key: Optional[str] = None) -> Project:
    """Insert a project with a generated (or supplied) API key."""
    project = Project(name=name, api_key=api_key or generate_api_key())
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Set up the NomadAI database")
    parser.add_argument("--project", help="Create a project with this name")
    parser.add_argument("--api-key", help="Use this API key instead of generating one")
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args(argv)

    create_schema(reset=args.reset)

    if args.project:
        db = SessionLocal()
        try:
            project = create_project(db, args.project, args.api_key)
        finally:
            db.close()
        print(f"Project {project.id} ({project.name}) API key: {project.api_key}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
