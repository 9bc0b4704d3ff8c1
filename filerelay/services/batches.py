import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, Optional

from filerelay.core.consts import BATCH_ID_PREFIX
from filerelay.core.enums import BatchRestartPolicy
from filerelay.core.schemas import BatchSession
from filerelay.store.models import FileRecord

logger = logging.getLogger(__name__)


class BatchAlreadyActive(Exception):
    def __init__(self, session: BatchSession):
        self.session = session
        super().__init__(f"El usuario {session.user_id} ya tiene el lote {session.batch_id}")


class BatchSessionStore:
    """
    Lotes en curso, uno por usuario, solo en memoria.

    Un reinicio del proceso pierde los lotes abiertos; los archivos ya subidos
    siguen guardados como archivos sueltos.
    """

    def __init__(
        self,
        restart_policy: BatchRestartPolicy = BatchRestartPolicy.DISCARD,
        clock: Callable[[], float] = time.time,
    ):
        self.restart_policy = restart_policy
        self._clock = clock
        self._sessions: Dict[int, BatchSession] = {}
        self._locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Dict[int, int] = {}

    @asynccontextmanager
    async def locked(self, user_id: int) -> AsyncIterator[None]:
        """
        Serializa registro y cierre de lote de un mismo usuario.

        El lock se descarta cuando nadie lo tiene ni lo espera, así el mapa solo
        guarda a los usuarios con trabajo en curso.
        """
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    @property
    def pending_locks(self) -> int:
        return len(self._locks)

    def new_batch_id(self, user_id: int) -> str:
        return f"{BATCH_ID_PREFIX}-{int(self._clock() * 1000)}-{user_id}"

    def get(self, user_id: int) -> Optional[BatchSession]:
        return self._sessions.get(user_id)

    def is_active(self, user_id: int) -> bool:
        return user_id in self._sessions

    def start(self, user_id: int) -> BatchSession:
        """
        Abre un lote nuevo para el usuario.

        Raises:
            BatchAlreadyActive: Si hay un lote abierto y la política es REJECT.
        """
        previous = self._sessions.get(user_id)
        if previous is not None:
            if self.restart_policy == BatchRestartPolicy.REJECT:
                raise BatchAlreadyActive(previous)
            logger.warning(
                f"Lote {previous.batch_id} descartado con {len(previous.files)} archivos sin cerrar."
            )

        session = BatchSession(batch_id=self.new_batch_id(user_id), user_id=user_id)
        self._sessions[user_id] = session
        logger.info(f"Lote iniciado: {session.batch_id}")
        return session

    def add(self, user_id: int, record: FileRecord) -> bool:
        """Agrega el archivo al lote activo. False si el usuario no tiene lote."""
        session = self._sessions.get(user_id)
        if session is None:
            return False
        session.files.append(record)
        return True

    def end(self, user_id: int) -> Optional[BatchSession]:
        """
        Cierra el lote y lo devuelve para finalizarlo.

        Devuelve None si no hay lote o si está vacío; en ese caso el lote sigue abierto.
        """
        session = self._sessions.get(user_id)
        if session is None or session.is_empty:
            return None
        return self._sessions.pop(user_id)

    def restore(self, session: BatchSession):
        """Vuelve a abrir un lote cuyo cierre no pudo guardarse."""
        self._sessions.setdefault(session.user_id, session)
