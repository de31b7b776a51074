"""Create the notes schema in the configured database."""

import logging
import sys

from clients.postgres_client import PostgresClient
from clients.vault_client import get_database_url
from core.note_store import NoteStore

logger = logging.getLogger("migrate")


def migrate() -> int:
    """Run schema initialization. Returns a process exit code."""
    database_url = get_database_url()
    if not database_url:
        logger.error("No database configured; set DATABASE_URL or Vault credentials")
        return 1

    client = PostgresClient(database_url)
    try:
        logger.info("Starting database migration...")
        NoteStore(client).initialize_schema()
        logger.info("Migration completed successfully")
        return 0
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(migrate())
