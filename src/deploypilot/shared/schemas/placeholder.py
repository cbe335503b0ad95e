"""Placeholder schemas produced by template scanning."""

from enum import Enum

from pydantic import BaseModel, Field


class PlaceholderCategory(str, Enum):
    """Semantic group a placeholder is presented under."""

    BASIC = "basic"
    IMAGE = "image"
    SERVICE = "service"
    RESOURCES = "resources"
    DEPLOYMENT = "deployment"
    NODE = "node"
    MISC = "misc"


class Placeholder(BaseModel):
    """A named substitution point in a template."""

    name: str = Field(..., description="Canonical (lower-case) placeholder name")
    category: PlaceholderCategory
    default_values: list[str] = Field(
        default_factory=list, description="Suggested values in declaration order"
    )
    resolved_value: str | None = Field(None, description="Value applied during materialization")


class PlaceholderCatalog(BaseModel):
    """All placeholders of one template, in first-discovery order."""

    placeholders: list[Placeholder] = Field(default_factory=list)

    def names(self) -> list[str]:
        return [p.name for p in self.placeholders]

    def get(self, name: str) -> Placeholder | None:
        lowered = name.lower()
        return next((p for p in self.placeholders if p.name == lowered), None)

    def by_category(self) -> dict[PlaceholderCategory, list[Placeholder]]:
        """
        Group placeholders by category.

        Categories appear in enum order and only when non-empty; placeholders
        keep their discovery order inside each group.
        """
        grouped: dict[PlaceholderCategory, list[Placeholder]] = {}
        for category in PlaceholderCategory:
            members = [p for p in self.placeholders if p.category == category]
            if members:
                grouped[category] = members
        return grouped

    def with_values(self, values: dict[str, str]) -> "PlaceholderCatalog":
        """Return a copy with resolved values filled in from a name -> value map."""
        lowered = {k.lower(): v for k, v in values.items()}
        return PlaceholderCatalog(
            placeholders=[
                p.model_copy(update={"resolved_value": lowered.get(p.name) or None})
                for p in self.placeholders
            ]
        )
