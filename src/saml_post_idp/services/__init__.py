"""Service registry module.

Registered service definitions and their username resolution policies.
"""

from saml_post_idp.services.registry import (
    AnonymousUsernameProvider,
    DefaultUsernameProvider,
    InMemoryServicesManager,
    PrincipalAttributeUsernameProvider,
    RegisteredService,
    ServicesManager,
    UsernameProvider,
)

__all__ = [
    "AnonymousUsernameProvider",
    "DefaultUsernameProvider",
    "InMemoryServicesManager",
    "PrincipalAttributeUsernameProvider",
    "RegisteredService",
    "ServicesManager",
    "UsernameProvider",
]
