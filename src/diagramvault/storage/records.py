"""Record types persisted by the diagram and collection stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

THEMES = ("light", "dark")
DEFAULT_THEME = "light"

DEFAULT_COLLECTION_COLOR = "#3B82F6"
DEFAULT_COLLECTION_ICON = "folder"


@dataclass
class DiagramRecord:
    id: str
    name: str
    code: str
    theme: str = DEFAULT_THEME
    created_at: int = 0
    updated_at: int = 0
    collection_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used on disk and in backups."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "theme": self.theme,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.collection_ids:
            data["collectionIds"] = list(self.collection_ids)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiagramRecord:
        """Build a record from stored data, filling defaults for absent keys."""
        theme = data.get("theme")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            code=str(data.get("code", "")),
            theme=theme if theme in THEMES else DEFAULT_THEME,
            created_at=int(data.get("createdAt", 0)),
            updated_at=int(data.get("updatedAt", 0)),
            collection_ids=list(data.get("collectionIds") or []),
        )


@dataclass
class CollectionRecord:
    id: str
    name: str
    description: str | None = None
    color: str | None = DEFAULT_COLLECTION_COLOR
    icon: str | None = DEFAULT_COLLECTION_ICON
    diagram_ids: list[str] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "diagramIds": list(self.diagram_ids),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectionRecord:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            description=data.get("description"),
            color=data.get("color"),
            icon=data.get("icon"),
            diagram_ids=list(data.get("diagramIds") or []),
            created_at=int(data.get("createdAt", 0)),
            updated_at=int(data.get("updatedAt", 0)),
        )
