from typing import Any, Dict, Optional


class PresenceRegistry:
    """Which live connection (sid) belongs to which user.

    One sid per user; a newer announce from the same user replaces the older
    mapping (last connection wins). Releasing a sid only clears the user's
    mapping if it still points at that sid, so a stale disconnect cannot
    evict a fresh reconnect.

    User ids are matched by their string form: clients send them as JSON
    strings or numbers interchangeably.
    """

    def __init__(self):
        self._sid_by_user: Dict[str, str] = {}
        self._user_by_sid: Dict[str, Any] = {}

    def announce(self, user_id: Any, sid: str) -> None:
        previous = self._user_by_sid.get(sid)
        if previous is not None and self._sid_by_user.get(str(previous)) == sid:
            del self._sid_by_user[str(previous)]
        self._user_by_sid[sid] = user_id
        self._sid_by_user[str(user_id)] = sid

    def sid_for(self, user_id: Any) -> Optional[str]:
        if user_id is None:
            return None
        return self._sid_by_user.get(str(user_id))

    def user_for(self, sid: str) -> Optional[Any]:
        return self._user_by_sid.get(sid)

    def release(self, sid: str) -> Optional[Any]:
        """Forget ``sid``. Returns the user it belonged to, if any."""
        user_id = self._user_by_sid.pop(sid, None)
        if user_id is not None and self._sid_by_user.get(str(user_id)) == sid:
            del self._sid_by_user[str(user_id)]
        return user_id

    def is_online(self, user_id: Any) -> bool:
        return self.sid_for(user_id) is not None

    def __len__(self) -> int:
        return len(self._sid_by_user)
