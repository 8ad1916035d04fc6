"""Analysis contract and partial capability contributions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict

from ..models import CAPABILITY_SLOTS, CapabilitySlot
from ..scanner import ProjectLayout


@dataclass
class Contribution:
    """Slots one analysis has something to say about."""

    slots: Dict[str, CapabilitySlot] = field(default_factory=dict)
    hints: Dict[str, str] = field(default_factory=dict)

    def slot(self, name: str) -> CapabilitySlot:
        if name not in CAPABILITY_SLOTS:
            raise KeyError(f"Unknown capability slot: {name}")
        return self.slots.setdefault(name, CapabilitySlot())

    def configure(
        self,
        name: str,
        *,
        source: str,
        provider: str | None = None,
        quantity: int | None = None,
    ) -> CapabilitySlot:
        slot = self.slot(name)
        slot.configured = True
        if provider is not None:
            slot.provider = provider
        if quantity is not None:
            slot.quantity = (slot.quantity or 0) + quantity
        if source not in slot.sources:
            slot.sources.append(source)
        return slot


class Analysis(ABC):
    """Contract for one independent inspection of a project directory."""

    name: str = ""

    @abstractmethod
    def analyze(self, layout: ProjectLayout) -> Contribution:
        """Return this analysis' partial view of the capability model."""
