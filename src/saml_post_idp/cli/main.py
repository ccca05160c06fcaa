"""Main CLI entry point for the SAML POST identity provider tooling.

This module provides the main Click command group for the saml-post-idp CLI.
"""

from pathlib import Path
from typing import Optional

import click

from saml_post_idp import __version__
from saml_post_idp.cli.saml_commands import decode_request, issue, keygen, verify
from saml_post_idp.config import load_config
from saml_post_idp.logging_audit import configure_logging
from saml_post_idp.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="saml-post-idp")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-identities",
    is_flag=True,
    help="Redact user identities and signature values from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_identities: bool,
) -> None:
    """SAML POST IdP - issue and check signed SAML 2.0 responses.

    Common usage:

        # Inspect an AuthnRequest
        saml-post-idp decode-request "$SAMLREQUEST"

        # Create a signing key pair, then answer a request
        saml-post-idp keygen keys/
        saml-post-idp issue --request "$SAMLREQUEST" --username alice@example.org \\
            --key keys/signing_key.pem --cert keys/signing_cert.pem

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact = redact_identities or config_obj.logging.redact_identities

    configure_logging(level=log_level, log_file=log_file_path, redact_identities=redact)


cli.add_command(decode_request)
cli.add_command(issue)
cli.add_command(verify)
cli.add_command(keygen)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        saml-post-idp config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    click.echo("\nIdP:")
    click.echo(f"  Issuer:          {config_obj.idp.issuer}")
    click.echo(f"  NotBefore:       {config_obj.idp.not_before.isoformat()}")
    click.echo(f"  Signature alg:   {config_obj.idp.signature_algorithm}")
    click.echo(f"  Encode response: {config_obj.idp.encode_response}")

    click.echo("\nKeys:")
    click.echo(f"  Private key:  {config_obj.keys.private_key_path or 'Not configured'}")
    click.echo(f"  Certificate:  {config_obj.keys.certificate_path or 'Not configured'}")
    click.echo(f"  Format:       {config_obj.keys.key_format}")

    click.echo("\nLogging:")
    click.echo(f"  Level:             {config_obj.logging.level}")
    click.echo(f"  Log file:          {config_obj.logging.log_file}")
    click.echo(f"  Redact identities: {config_obj.logging.redact_identities}")


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"saml-post-idp version {__version__}")


if __name__ == "__main__":
    cli()
