# app/api/message_router.py
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from app.domain.errors import UnknownPattern
from app.utils.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any, Session], Any]


class MessageRouter:
    """
    Odpowiednik APIRouter dla kanalu komend TCP.
    Handler dostaje `data` z wiadomosci i sesje DB, zwraca cos co da sie zserializowac do JSON.
    """

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    def pattern(self, cmd: str):
        def decorator(func: Handler) -> Handler:
            if cmd in self._handlers:
                raise ValueError(f"Handler for {cmd!r} already registered")
            self._handlers[cmd] = func
            return func

        return decorator

    @property
    def commands(self):
        return sorted(self._handlers)

    def dispatch(self, cmd, data: Any, db: Session) -> Any:
        #komenda to zawsze string, wszystko inne (lista, dict, None) to nieznany wzorzec
        handler = self._handlers.get(cmd) if isinstance(cmd, str) else None
        if handler is None:
            raise UnknownPattern(cmd)
        logger.info(f"Dispatch {cmd}")
        return handler(data, db)
