"""
Durable storage for the client's session token.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from loguru import logger

TOKEN_KEY = "token"
DEFAULT_SESSION_FILE = Path.home() / ".tasklist" / "session.json"


class TokenStorage(ABC):

    @abstractmethod
    def load(self) -> Optional[str]:
        ...

    @abstractmethod
    def save(self, token: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryTokenStorage(TokenStorage):

    def __init__(self, token: Optional[str] = None):
        self._data = {TOKEN_KEY: token} if token else {}

    def load(self) -> Optional[str]:
        return self._data.get(TOKEN_KEY)

    def save(self, token: str) -> None:
        self._data[TOKEN_KEY] = token

    def clear(self) -> None:
        self._data.pop(TOKEN_KEY, None)


class FileTokenStorage(TokenStorage):
    """
    Keeps the token in a small JSON document under ``TOKEN_KEY`` so it
    survives process restarts. Other keys in the file are preserved.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else DEFAULT_SESSION_FILE

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        # Owner-only from creation; the file holds a bearer token
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def load(self) -> Optional[str]:
        token = self._read().get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        data = self._read()
        data[TOKEN_KEY] = token
        self._write(data)

    def clear(self) -> None:
        data = self._read()
        if TOKEN_KEY in data:
            del data[TOKEN_KEY]
            self._write(data)
