"""SAML 2.0 POST-binding identity provider response core.

Correlates an inbound AuthnRequest with a service binding, builds a
time-bounded assertion for the authenticated principal, signs it and
packages it for form-post delivery.
"""

__version__ = "0.1.0"
