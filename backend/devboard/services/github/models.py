from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class RepositoryDescriptor:
    """Minimal key needed to address one repository's commit listing."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "RepositoryDescriptor":
        owner = (payload.get("owner") or {}).get("login")
        name = payload.get("name")
        if not owner or not name:
            full_name = payload.get("full_name") or ""
            owner, _, name = full_name.partition("/")
        return cls(owner=owner, name=name)
