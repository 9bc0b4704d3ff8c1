import logging

import peewee
from playhouse.db_url import connect

logger = logging.getLogger(__name__)
db_proxy = peewee.Proxy()

SQLITE_PRAGMAS = {"journal_mode": "wal", "cache_size": -1024 * 64}


class DatabaseSession:
    """
    Administrador de contexto para la base de datos del índice.
    Acepta cualquier URL soportada por `playhouse.db_url` (sqlite, postgres, mysql).
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.db = None

    def _connect_kwargs(self) -> dict:
        if self.database_url.startswith("sqlite"):
            return {"pragmas": SQLITE_PRAGMAS, "timeout": 10}
        return {}

    def __enter__(self):
        if db_proxy.obj is not None and not db_proxy.obj.is_closed():
            return db_proxy.obj

        logger.info(f"Iniciando base de datos en {self.database_url.split('@')[-1]}")

        self.db = connect(self.database_url, **self._connect_kwargs())

        db_proxy.initialize(self.db)
        self.db.connect(reuse_if_open=True)

        from filerelay.store.models import FileRecord, UserAccount

        db_proxy.create_tables([UserAccount, FileRecord], safe=True)
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.db and not self.db.is_closed():
            self.db.close()
