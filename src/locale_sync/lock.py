"""
Verrou exclusif asynchrone partagé par les deux points d'entrée.

La traduction déclenchée à la sauvegarde et la synchronisation complète
écrivent dans les mêmes fichiers de langue et le même cache : elles ne
doivent jamais exécuter leur section critique en même temps. Les demandes
qui arrivent pendant que le verrou est tenu attendent dans une file FIFO.
"""

import asyncio
from collections import deque
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class ExclusiveLock:
    """
    Mutex asynchrone non réentrant avec file d'attente FIFO.

    Au relâchement, le verrou est transmis directement au plus ancien
    attendant : il ne repasse jamais à l'état libre entre deux détenteurs,
    ce qui interdit à un nouvel arrivant de doubler la file.

    Example:
        >>> lock = ExclusiveLock()
        >>> async def body():
        ...     return 42
        >>> await lock.run_exclusive(body)
        42
    """

    def __init__(self) -> None:
        self._locked = False
        self._waiters: deque[asyncio.Future[None]] = deque()

    def is_locked(self) -> bool:
        """
        Indique si le verrou est tenu.

        Réservé à l'affichage d'un statut "en file d'attente" : ne jamais
        s'en servir pour décider d'entrer en section critique.
        """
        return self._locked

    @property
    def waiting_count(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self) -> None:
        """Suspend l'appelant jusqu'à ce qu'il devienne l'unique détenteur."""
        if not self._locked:
            self._locked = True
            return

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Le verrou a déjà été transmis : on le passe au suivant
                self.release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def release(self) -> None:
        """Transmet le verrou au plus ancien attendant, sinon le libère."""
        if not self._locked:
            raise RuntimeError("release() appelé sur un verrou libre")

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._locked = False

    async def run_exclusive(self, body: Callable[[], Awaitable[T]]) -> T:
        """
        Exécute body() en section critique.

        Le verrou est relâché quelle que soit l'issue ; l'exception
        éventuelle de body() est propagée après le relâchement.
        """
        await self.acquire()
        try:
            return await body()
        finally:
            self.release()

    async def __aenter__(self) -> "ExclusiveLock":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"ExclusiveLock(locked={self._locked}, waiting={self.waiting_count})"
