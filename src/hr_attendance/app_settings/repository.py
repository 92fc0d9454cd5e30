from __future__ import annotations

from typing import Optional, Protocol


class AppSettingsRepository(Protocol):
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError
