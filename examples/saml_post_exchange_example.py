"""SAML POST Exchange Example.

This example walks through one login exchange end to end: a service
provider's AuthnRequest arrives, the user authenticates, and the identity
provider answers with a signed response delivered through an auto-submitting
HTML form. The response is then verified the way the service would.
"""

from saml_post_idp.models.principal import Principal
from saml_post_idp.saml import (
    ResponseVerifier,
    create_binding_from_request,
    encode_authn_request,
    generate_key_pair,
    issue_response,
    render_post_form,
)
from saml_post_idp.services.registry import (
    InMemoryServicesManager,
    PrincipalAttributeUsernameProvider,
    RegisteredService,
)

ACS_URL = "https://svc.example.org/acs"


def main():
    """Demonstrate a complete request/response exchange."""

    print("=" * 70)
    print("SAML POST Exchange Example")
    print("=" * 70)

    # Step 1: The service provider redirects the browser with a SAMLRequest
    print("\n1. Encoding AuthnRequest as a service provider would...")
    authn_request = (
        '<samlp:AuthnRequest xmlns:samlp="urn:oasis:names:tc:SAML:2.0:protocol" '
        f'ID="_abc123" Version="2.0" AssertionConsumerServiceURL="{ACS_URL}"/>'
    )
    saml_request = encode_authn_request(authn_request)
    print(f"   SAMLRequest: {saml_request[:48]}...")

    # Step 2: Identity provider binds the exchange to a signing key
    print("\n2. Creating service binding...")
    key_pair = generate_key_pair(common_name="Example IdP Signing")
    binding = create_binding_from_request(saml_request, "xyz", key_pair)
    print(f"   Service id:     {binding.id}")
    print(f"   InResponseTo:   {binding.correlation_id}")
    print(f"   RelayState:     {binding.relay_token}")

    # Step 3: The service releases the mail attribute as NameID
    print("\n3. Registering service with a mail username policy...")
    services = InMemoryServicesManager(
        [
            RegisteredService(
                service_id=ACS_URL,
                name="Example service",
                username_provider=PrincipalAttributeUsernameProvider("mail"),
            )
        ]
    )

    # Step 4: Authentication completed; issue the signed response
    print("\n4. Issuing signed response...")
    principal = Principal(id="alice", attributes={"mail": "alice@example.org"})
    response = issue_response(binding.with_principal(principal), services)
    print(f"   POST target:    {response.url}")
    print(f"   Form fields:    {', '.join(sorted(response.attributes))}")

    # Step 5: Verify as the relying service
    print("\n5. Verifying signature...")
    verified = ResponseVerifier(key_pair).verify(response.saml_response)
    print("   ✓ Signature is valid")
    print(f"   NameID:         {verified.name_id}")
    print(f"   Audience:       {verified.audience}")
    print(f"   NotOnOrAfter:   {verified.not_on_or_after}")

    # Step 6: Delivery form handed to the browser
    print("\n6. Auto-submit form:")
    print(render_post_form(response)[:240] + "...")

    print("\n" + "=" * 70)
    print("Exchange complete")
    print("=" * 70)


if __name__ == "__main__":
    main()
