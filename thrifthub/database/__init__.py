import logging
from sqlmodel import SQLModel

from thrifthub.configuration.settings import Configuration
from thrifthub.database.connection import engine, session_scope

# Registers every table on the metadata
import thrifthub.models  # noqa: F401

configuration = Configuration()


def init_db():
    SQLModel.metadata.create_all(engine)
    logging.info("SYSTEM >>> Tables created")

    if configuration.seed_database:
        from thrifthub.database.populate import populate_database

        with session_scope() as session:
            populate_database(session)
        logging.info("SYSTEM >>> Seed data loaded")
