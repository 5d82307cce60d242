"""
Versioned schema migrations, managed with Alembic.

Revisions live in `versions/`; the server never migrates on its own. Run
`todo-api migrate` (or `todo-api serve`, which migrates before listening).
The same environment works with the plain `alembic` command through the
repository's `alembic.ini`.
"""
from __future__ import annotations

import logging
import os
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from ..db import Database

logger = logging.getLogger(__name__)

SCRIPT_LOCATION = os.path.dirname(os.path.abspath(__file__))


# PUBLIC_INTERFACE
def alembic_config(database: Optional[Database] = None) -> Config:
    """
    Alembic configuration pointing at this package's revisions.

    When a database is given its URL is used for offline (`--sql`) runs;
    online runs get the live connection through `Config.attributes`.
    """
    cfg = Config()
    cfg.set_main_option("script_location", SCRIPT_LOCATION)
    if database is not None:
        # ConfigParser interpolation treats '%' specially
        cfg.set_main_option("sqlalchemy.url", database.url.replace("%", "%%"))
    return cfg


def head_revision() -> Optional[str]:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


# PUBLIC_INTERFACE
def current_revision(database: Database) -> Optional[str]:
    """Return the revision the database is stamped with, or None for a fresh database."""
    with database.engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


# PUBLIC_INTERFACE
def pending(database: Database) -> List[str]:
    """Return revisions not yet applied, oldest first."""
    current = current_revision(database)
    script = ScriptDirectory.from_config(alembic_config())
    outstanding: List[str] = []
    for rev in script.walk_revisions():
        if rev.revision == current:
            break
        outstanding.append(rev.revision)
    return list(reversed(outstanding))


# PUBLIC_INTERFACE
def upgrade(database: Database) -> List[str]:
    """
    Upgrade the database to the head revision.

    Returns:
        The revisions applied by this call (empty when already up to date).
    """
    outstanding = pending(database)
    cfg = alembic_config(database)
    with database.engine.begin() as conn:
        cfg.attributes["connection"] = conn
        command.upgrade(cfg, "head")
    if outstanding:
        logger.info("Database migrated to revision %s", outstanding[-1])
    else:
        logger.info("Database schema is up to date (revision %s)", current_revision(database))
    return outstanding
