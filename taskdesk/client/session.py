import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = Path.home() / ".taskdesk" / "session.json"


@dataclass
class ClientSession:
    """Login state of one API user, kept between runs in a small JSON file.

    Callers hand the session to ``TaskDeskClient`` explicitly; nothing reads it
    from ambient global state.
    """

    token: Optional[str] = None
    role: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    path: Optional[Path] = None

    @classmethod
    def load(cls, path: Path | str = DEFAULT_SESSION_PATH) -> "ClientSession":
        path = Path(path)
        session = cls(path=path)
        if not path.exists():
            return session
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = None
        if not isinstance(data, dict):
            logger.warning("Ignoring unreadable session file %s", path)
            return session
        known = {f.name for f in fields(cls)} - {"path"}
        for key, value in data.items():
            if key in known:
                setattr(session, key, value)
        return session

    def save(self, path: Path | str | None = None) -> None:
        target = Path(path) if path is not None else self.path
        if target is None:
            return
        self.path = target
        target.parent.mkdir(parents=True, exist_ok=True)
        data = asdict(self)
        data.pop("path")
        target.write_text(json.dumps(data), encoding="utf-8")

    def clear(self) -> None:
        """Forget the login and delete the persisted copy."""
        self.token = None
        self.role = None
        self.user_id = None
        self.user_name = None
        if self.path is not None and self.path.exists():
            self.path.unlink()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def dashboard(self) -> Optional[str]:
        """Which dashboard the logged-in user belongs on."""
        if not self.is_authenticated:
            return None
        return self.role if self.role in ("admin", "employee") else None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
