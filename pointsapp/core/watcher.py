# pointsapp/core/watcher.py
from __future__ import annotations
import asyncio, logging, threading
from typing import Callable

from pointsapp.core.config import settings
from pointsapp.domain.errors import NotFound
from pointsapp.domain.models import Snapshot
from pointsapp.domain.players import uid
from pointsapp.domain.snapshots import get_snapshot

log = logging.getLogger(__name__)

OnChange = Callable[[Snapshot], None]


class Subscription:
    def __init__(self, watcher: "BalanceWatcher", user_id: str, callback: OnChange, baseline: Snapshot):
        self._watcher = watcher
        self.user_id = user_id
        self.callback = callback
        self.last: Snapshot = baseline
        self.active = True

    def cancel(self) -> None:
        self._watcher.unsubscribe(self)


class BalanceWatcher:
    """
    Notifications de changement par polling + diff des snapshots.
    Livraison au moins une fois, fusionnée: seul le dernier état est envoyé.
    """

    def __init__(self, interval_s: float | None = None, fetch: Callable[[str], Snapshot] = get_snapshot):
        self.interval_s = float(interval_s if interval_s is not None else settings.poll_interval_s)
        self._fetch = fetch
        self._subs: dict[str, list[Subscription]] = {}
        self._lock = threading.Lock()  # registre des abonnés uniquement
        self._task: asyncio.Task | None = None

    def subscribe(self, user_id: int | str, on_change: OnChange) -> Subscription:
        u = uid(user_id)
        sub = Subscription(self, u, on_change, self._fetch(u))
        with self._lock:
            self._subs.setdefault(u, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.user_id, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subs.pop(sub.user_id, None)
        sub.active = False

    def subscriber_count(self) -> int:
        with self._lock:
            return sum(len(s) for s in self._subs.values())

    def _drop_user(self, user_id: str) -> None:
        with self._lock:
            subs = self._subs.pop(user_id, [])
        for sub in subs:
            sub.active = False

    def _collect(self) -> list[tuple[Subscription, Snapshot]]:
        with self._lock:
            watched = {u: list(subs) for u, subs in self._subs.items()}
        due: list[tuple[Subscription, Snapshot]] = []
        for u, subs in watched.items():
            try:
                snap = self._fetch(u)
            except NotFound:
                log.warning("Utilisateur %s disparu: %d abonnement(s) fermé(s)", u, len(subs))
                self._drop_user(u)
                continue
            except Exception:
                # un utilisateur en erreur ne bloque pas les autres; réessayé au prochain poll
                log.exception("BalanceWatcher: lecture du snapshot de %s en erreur", u)
                continue
            due.extend((sub, snap) for sub in subs if sub.last != snap)
        return due

    def _deliver(self, due: list[tuple[Subscription, Snapshot]]) -> int:
        delivered = 0
        for sub, snap in due:
            if not sub.active:
                continue
            try:
                sub.callback(snap)
            except Exception:
                # pas de maj de `last`: le prochain poll relivrera
                log.exception("Callback d'abonnement en erreur (user=%s)", sub.user_id)
                continue
            sub.last = snap
            delivered += 1
        return delivered

    def check_now(self) -> int:
        """Un cycle de poll synchrone. Renvoie le nombre de notifications envoyées."""
        return self._deliver(self._collect())

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self):
        while True:
            try:
                due = await asyncio.to_thread(self._collect)
                self._deliver(due)
                await asyncio.sleep(self.interval_s)
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("BalanceWatcher: erreur boucle")
                await asyncio.sleep(self.interval_s)
