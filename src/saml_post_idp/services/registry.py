"""Registered services and username resolution policies.

The identity provider only issues assertions to services that are
registered. Each registered service carries a username policy deciding which
identifier ends up in the assertion's NameID.
"""

import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Pattern, Protocol

from ..models.principal import Principal

if TYPE_CHECKING:
    from ..models.binding import ServiceBinding

logger = logging.getLogger(__name__)


class UsernameProvider(Protocol):
    """Resolves the identifier released to a service for a principal."""

    def resolve_username(
        self, principal: Principal, binding: "ServiceBinding"
    ) -> Optional[str]:
        ...


class DefaultUsernameProvider:
    """Release the principal id unchanged."""

    def resolve_username(
        self, principal: Principal, binding: "ServiceBinding"
    ) -> Optional[str]:
        return principal.id or None


class PrincipalAttributeUsernameProvider:
    """Release the value of a principal attribute.

    Attributes:
        attribute: Attribute name to release (e.g. "mail")
        fallback_to_id: Use the principal id when the attribute is missing
    """

    def __init__(self, attribute: str, fallback_to_id: bool = False) -> None:
        if not attribute:
            raise ValueError("attribute must be a non-empty attribute name")
        self.attribute = attribute
        self.fallback_to_id = fallback_to_id

    def resolve_username(
        self, principal: Principal, binding: "ServiceBinding"
    ) -> Optional[str]:
        value = principal.get_attribute(self.attribute)
        if value is not None:
            return value

        if self.fallback_to_id:
            logger.debug(
                f"Attribute {self.attribute} not released for principal, "
                f"falling back to principal id"
            )
            return principal.id or None

        logger.warning(
            f"Attribute {self.attribute} missing for principal; "
            f"no username for service {binding.id}"
        )
        return None


class AnonymousUsernameProvider:
    """Release a stable, opaque per-service identifier.

    The identifier is SHA-256(salt | service id | principal id), so the same
    user maps to the same value for one service and unrelated values across
    services.
    """

    def __init__(self, salt: str) -> None:
        if not salt:
            raise ValueError("salt must be a non-empty string")
        self.salt = salt

    def resolve_username(
        self, principal: Principal, binding: "ServiceBinding"
    ) -> Optional[str]:
        if not principal.id:
            return None
        digest = hashlib.sha256(
            "|".join((self.salt, binding.id, principal.id)).encode("utf-8")
        )
        return digest.hexdigest()


@dataclass
class RegisteredService:
    """Service definition known to the identity provider.

    Attributes:
        service_id: Exact service id, or a regular expression when
            ``is_pattern`` is set
        name: Human-readable name
        username_provider: Policy resolving the NameID value
        is_pattern: Treat service_id as a full-match regular expression
        evaluation_order: Lower values are tried first
    """

    service_id: str
    name: str = ""
    username_provider: UsernameProvider = field(default_factory=DefaultUsernameProvider)
    is_pattern: bool = False
    evaluation_order: int = 0
    _compiled: Optional[Pattern[str]] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.service_id:
            raise ValueError("service_id must be a non-empty string")
        if self.is_pattern:
            self._compiled = re.compile(self.service_id)

    def matches(self, service_id: str) -> bool:
        if self._compiled is not None:
            return self._compiled.fullmatch(service_id) is not None
        return self.service_id == service_id

    def resolve_username(
        self, principal: Principal, binding: "ServiceBinding"
    ) -> Optional[str]:
        return self.username_provider.resolve_username(principal, binding)


class ServicesManager(Protocol):
    """Registry lookup contract consumed by the assertion builder."""

    def find_service_by(self, binding: "ServiceBinding") -> Optional[RegisteredService]:
        ...


class InMemoryServicesManager:
    """Services manager over a fixed list of service definitions.

    Exact ids are checked before patterns; patterns are evaluated by
    ``evaluation_order``.

    Example:
        >>> manager = InMemoryServicesManager([
        ...     RegisteredService(service_id="https://svc.example.org/acs"),
        ... ])
        >>> manager.find_service_by(binding) is not None
        True
    """

    def __init__(self, services: Optional[List[RegisteredService]] = None) -> None:
        self._exact: Dict[str, RegisteredService] = {}
        self._patterns: List[RegisteredService] = []
        for service in services or []:
            self.register(service)

    def register(self, service: RegisteredService) -> None:
        if service.is_pattern:
            self._patterns.append(service)
            self._patterns.sort(key=lambda s: s.evaluation_order)
        else:
            self._exact[service.service_id] = service
        logger.debug(
            f"Registered service {service.service_id} "
            f"({'pattern' if service.is_pattern else 'exact'})"
        )

    def find_service_by_id(self, service_id: str) -> Optional[RegisteredService]:
        service = self._exact.get(service_id)
        if service is not None:
            return service
        for candidate in self._patterns:
            if candidate.matches(service_id):
                return candidate
        return None

    def find_service_by(self, binding: "ServiceBinding") -> Optional[RegisteredService]:
        return self.find_service_by_id(binding.id)

    def __len__(self) -> int:
        return len(self._exact) + len(self._patterns)
