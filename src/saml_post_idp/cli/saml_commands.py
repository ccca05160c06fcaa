"""SAML CLI commands for exercising the response pipeline.

This module provides CLI commands for local testing including:
- decode-request: Show the ACS URL and request ID of a SAMLRequest
- issue: Build, sign and print a SAML response (or its auto-submit form)
- verify: Check the signature of a signed response
- keygen: Create a self-signed RSA signing key pair
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from saml_post_idp.config.schema import Config, IdPConfig
from saml_post_idp.models.binding import KeyPair, ServiceBinding
from saml_post_idp.models.principal import Principal
from saml_post_idp.saml import (
    ResponseVerifier,
    create_binding_from_request,
    decode_authn_request,
    extract_request_correlation,
    generate_key_pair,
    issue_response,
    load_key_pair,
    load_key_pair_from_config,
    render_post_form,
    write_key_pair,
)
from saml_post_idp.saml.key_manager import load_pem_certificate, load_pem_public_key
from saml_post_idp.services.registry import (
    DefaultUsernameProvider,
    InMemoryServicesManager,
    PrincipalAttributeUsernameProvider,
    RegisteredService,
)
from saml_post_idp.utils.exceptions import SAMLError, ValidationError

logger = logging.getLogger(__name__)


def _config_from_context(ctx: click.Context) -> Config:
    if ctx.obj and ctx.obj.get("config") is not None:
        return ctx.obj["config"]
    return Config()


def _parse_attributes(values: Tuple[str, ...]) -> dict:
    attributes: dict = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise click.BadParameter(
                f"Attribute must be NAME=VALUE, got: {item!r}", param_hint="--attribute"
            )
        attributes.setdefault(name, []).append(value)
    return {k: v[0] if len(v) == 1 else v for k, v in attributes.items()}


@click.command(name="decode-request")
@click.argument("saml_request", type=str)
def decode_request(saml_request: str) -> None:
    """Decode a SAMLRequest parameter and show its ACS URL and request ID.

    Example:

        saml-post-idp decode-request fZFNT8MwDIbv...
    """
    correlation = extract_request_correlation(decode_authn_request(saml_request))
    if correlation is None:
        click.echo("No AuthnRequest present (absent or malformed payload)")
        raise click.exceptions.Exit(1)

    click.echo(f"AssertionConsumerServiceURL: {correlation.delivery_url}")
    click.echo(f"ID:                          {correlation.correlation_id or '(none)'}")


@click.command(name="issue")
@click.option("--request", "saml_request", type=str, help="Encoded SAMLRequest parameter")
@click.option("--acs-url", type=str, help="Delivery URL for an unsolicited response")
@click.option("--relay-state", type=str, default=None, help="RelayState to echo back")
@click.option("--username", required=True, help="Authenticated principal id")
@click.option(
    "--attribute",
    "attributes",
    multiple=True,
    help="Principal attribute as NAME=VALUE (repeatable)",
)
@click.option(
    "--username-attribute",
    type=str,
    default=None,
    help="Release this principal attribute as NameID instead of the principal id",
)
@click.option("--key", type=click.Path(exists=True, path_type=Path), help="PEM private key")
@click.option("--cert", type=click.Path(exists=True, path_type=Path), help="PEM certificate")
@click.option("--form", is_flag=True, help="Print the auto-submitting HTML form")
@click.option("--encode", is_flag=True, help="Base64-encode the SAMLResponse field")
@click.option("--output", type=click.Path(path_type=Path), help="Write output to file")
@click.pass_context
def issue(
    ctx: click.Context,
    saml_request: Optional[str],
    acs_url: Optional[str],
    relay_state: Optional[str],
    username: str,
    attributes: Tuple[str, ...],
    username_attribute: Optional[str],
    key: Optional[Path],
    cert: Optional[Path],
    form: bool,
    encode: bool,
    output: Optional[Path],
) -> None:
    """Issue a signed SAML response for a request or an ACS URL.

    The target service is registered on the fly, so this is a testing aid
    rather than an access-controlled identity provider.

    Examples:

        saml-post-idp issue --request "$SAMLREQUEST" --relay-state xyz \\
            --username alice@example.org --key signing_key.pem --cert signing_cert.pem

        saml-post-idp issue --acs-url https://svc.example.org/acs \\
            --username alice --attribute mail=alice@example.org \\
            --username-attribute mail --form
    """
    config = _config_from_context(ctx)

    if bool(saml_request) == bool(acs_url):
        raise click.UsageError("Provide exactly one of --request or --acs-url.")

    try:
        if key is not None:
            key_pair = load_key_pair(key, certificate_path=cert)
        elif config.keys.private_key_path is not None:
            key_pair = load_key_pair_from_config(config.keys)
        else:
            logger.warning("No signing key configured; generating an ephemeral key pair")
            key_pair = generate_key_pair()

        if saml_request:
            binding = create_binding_from_request(saml_request, relay_state, key_pair)
            if binding is None:
                click.echo("SAMLRequest is absent or malformed; nothing to answer.", err=True)
                raise click.exceptions.Exit(1)
        else:
            binding = ServiceBinding.bare(acs_url, key_pair, relay_token=relay_state)

        provider = (
            PrincipalAttributeUsernameProvider(username_attribute)
            if username_attribute
            else DefaultUsernameProvider()
        )
        services_manager = InMemoryServicesManager(
            [RegisteredService(service_id=binding.id, name="cli", username_provider=provider)]
        )

        settings: IdPConfig = config.idp
        if encode:
            settings = settings.model_copy(update={"encode_response": True})

        response = issue_response(
            binding,
            services_manager,
            principal=Principal(id=username, attributes=_parse_attributes(attributes)),
            settings=settings,
        )

    except (SAMLError, ValidationError) as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" Failed to issue response: {e}", err=True)
        raise click.exceptions.Exit(1)

    text = render_post_form(response) if form else response.saml_response
    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"Response written to {output}")
    else:
        click.echo(text)


@click.command(name="verify")
@click.argument("response_file", type=click.Path(exists=True, path_type=Path))
@click.option("--cert", type=click.Path(exists=True, path_type=Path), help="PEM certificate")
@click.option(
    "--public-key",
    type=click.Path(exists=True, path_type=Path),
    help="PEM public key (for responses signed without a certificate)",
)
def verify(response_file: Path, cert: Optional[Path], public_key: Optional[Path]) -> None:
    """Verify the XML signature of a signed SAML response.

    RESPONSE_FILE may hold the raw XML or its base64 form.
    """
    if bool(cert) == bool(public_key):
        raise click.UsageError("Provide exactly one of --cert or --public-key.")

    content = response_file.read_text(encoding="utf-8").strip()
    if not content.startswith("<"):
        try:
            content = base64.b64decode("".join(content.split()), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            click.echo(f"Response is neither XML nor base64 XML: {e}", err=True)
            raise click.exceptions.Exit(1)

    try:
        if cert is not None:
            certificate = load_pem_certificate(cert)
            key_pair = KeyPair(
                private_key=None, public_key=certificate.public_key(), certificate=certificate
            )
        else:
            key_pair = KeyPair(private_key=None, public_key=load_pem_public_key(public_key))

        verified = ResponseVerifier(key_pair).verify(content)

    except SAMLError as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" Verification failed: {e}")
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Signature is valid")
    click.echo(f"  Response ID:   {verified.response_id}")
    click.echo(f"  InResponseTo:  {verified.in_response_to or '(none)'}")
    click.echo(f"  NameID:        {verified.name_id}")
    click.echo(f"  Audience:      {verified.audience}")
    click.echo(f"  NotOnOrAfter:  {verified.not_on_or_after}")


@click.command(name="keygen")
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--common-name", default="saml-post-idp test signing", show_default=True)
@click.option("--key-size", type=click.Choice(["2048", "3072", "4096"]), default="2048")
@click.option("--days", type=int, default=365, show_default=True)
def keygen(output_dir: Path, common_name: str, key_size: str, days: int) -> None:
    """Generate a self-signed RSA signing key pair (development use)."""
    if days <= 0:
        raise click.BadParameter("--days must be positive", param_hint="--days")

    key_pair = generate_key_pair(common_name=common_name, key_size=int(key_size), valid_days=days)
    written = write_key_pair(key_pair, output_dir)

    click.echo(click.style("✓", fg="green", bold=True) + " Key pair generated")
    for role, path in written.items():
        click.echo(f"  {role:12} {path}")
