from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class ProviderPort(Protocol):
    provider_name: str

    def call(self, source_url: str, provider_options: Optional[Dict[str, Any]] = None) -> Any:
        ...
