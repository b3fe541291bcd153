"""
Bus de refresco entre vistas

Cuando una operación cambia datos que otra vista muestra (por ejemplo, crear
o unirse a una empresa cambia el selector de empresas), la operación publica
un tópico y los suscriptores recargan lo suyo. La aplicación tiene un único
bus en `app.state.refresh_bus`.
"""
from collections import defaultdict
from typing import Any, Callable, Dict, List
import inspect
import logging

logger = logging.getLogger(__name__)

COMPANIES_CHANGED = "companies.changed"
INVOICES_CHANGED = "invoices.changed"
CONTACTS_CHANGED = "contacts.changed"

Subscriber = Callable[..., Any]


class RefreshBus:
    """Registro publicar/suscribir de callbacks de refresco"""

    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        """Registrar un callback y devolver la función que lo da de baja"""
        self._subscribers[topic].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    async def publish(self, topic: str, **payload: Any) -> int:
        """
        Notificar a todos los suscriptores del tópico.

        Acepta callbacks síncronos y asíncronos. Si uno falla se registra
        el error y se sigue con los demás. Devuelve cuántos terminaron bien.
        """
        delivered = 0
        for callback in list(self._subscribers.get(topic, [])):
            try:
                result = callback(**payload)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.error(f"Refresh subscriber for '{topic}' failed: {e}")
        logger.debug(f"Published '{topic}' to {delivered} subscriber(s)")
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))
