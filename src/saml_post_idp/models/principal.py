"""Authenticated principal model.

The surrounding authentication process produces the principal; this package
only reads it when a username policy resolves the NameID value.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Principal:
    """Authenticated user.

    Attributes:
        id: Principal identifier as established by authentication
        attributes: Released attributes (single value or list of values)
    """

    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    def get_attribute(self, name: str) -> Optional[str]:
        """Return the first value of an attribute, or None if absent/empty."""
        value = self.attributes.get(name)
        if isinstance(value, (list, tuple)):
            values: List[Any] = [v for v in value if v not in (None, "")]
            return str(values[0]) if values else None
        if value in (None, ""):
            return None
        return str(value)
