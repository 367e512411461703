"""Material sustainability result."""

from dataclasses import dataclass, field
from typing import List

DEFAULT_EXPLANATION = "Could not analyze the sustainability of this material."
DEFAULT_TIPS = [
    "Wash at lower temperatures",
    "Repair instead of replace",
    "Donate when no longer needed",
]


@dataclass
class MaterialSustainability:
    material: str
    score: int = 60
    explanation: str = DEFAULT_EXPLANATION
    tips: List[str] = field(default_factory=lambda: list(DEFAULT_TIPS))


__all__ = ["MaterialSustainability", "DEFAULT_EXPLANATION", "DEFAULT_TIPS"]
