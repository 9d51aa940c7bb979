# session tokens -> participant names
import uuid
from threading import Lock
from typing import Dict, Optional, Tuple

from .errors import NoActiveSession
from .models import SessionResult
from .state import SelectionRegistry


class SessionStore:
    """
    Binds each client's session token to the participant name it entered,
    so concurrent clients sharing one registry each select as themselves.
    A participant keeps the same token across sessions.
    """

    def __init__(self, registry: SelectionRegistry):
        self.registry = registry
        self._tokens: Dict[str, str] = {}
        self._by_participant: Dict[str, str] = {}
        self._lock = Lock()

    def begin(self, name: str) -> Tuple[str, SessionResult]:
        result = self.registry.begin_session(name)
        with self._lock:
            token = self._by_participant.get(result.participant)
            if token is None:
                token = str(uuid.uuid4())
                self._tokens[token] = result.participant
                self._by_participant[result.participant] = token
        return token, result

    def participant_for(self, token: Optional[str]) -> str:
        with self._lock:
            participant = self._tokens.get(token) if token else None
        if participant is None:
            raise NoActiveSession("Unknown or missing session token")
        return participant
