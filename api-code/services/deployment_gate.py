from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Set


logger = logging.getLogger("commit-deploy.gate")

GateObserver = Callable[[Set[str]], None]


class DeploymentGate:
    """Advisory per-project lock shared by every caller of one process.

    Maps project name to the caller that is deploying it. Observers receive
    the set of active project names after every change.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: Dict[str, str] = {}
        self._observers: List[GateObserver] = []

    def subscribe(self, observer: GateObserver) -> Callable[[], None]:
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def can_deploy(self, project_name: str, caller_id: str) -> bool:
        with self._lock:
            owner = self._active.get(project_name)
        return owner is None or owner == caller_id

    def begin(self, project_name: str, caller_id: str) -> None:
        with self._lock:
            self._active[project_name] = caller_id
        self._broadcast()

    def try_begin(self, project_name: str, caller_id: str) -> bool:
        """Check and claim ``project_name`` atomically."""
        with self._lock:
            owner = self._active.get(project_name)
            if owner is not None and owner != caller_id:
                return False
            self._active[project_name] = caller_id
        self._broadcast()
        return True

    def end(self, project_name: str) -> None:
        with self._lock:
            self._active.pop(project_name, None)
        self._broadcast()

    def release_caller(self, caller_id: str) -> List[str]:
        """Drop every project held by ``caller_id`` (e.g. a disconnected client)."""
        with self._lock:
            released = [name for name, owner in self._active.items() if owner == caller_id]
            for name in released:
                del self._active[name]
        if released:
            self._broadcast()
        return released

    def list_active(self) -> Set[str]:
        with self._lock:
            return set(self._active)

    def _broadcast(self) -> None:
        with self._lock:
            active = set(self._active)
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(set(active))
            except Exception:  # pylint: disable=broad-except
                logger.exception("Deployment status observer failed")
