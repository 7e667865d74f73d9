"""Command line interface for Sticker Dream certificate provisioning."""

import logging

import click
import requests
from pydantic import ValidationError

from ..certs import CertificateLifecycleManager
from ..config import TLSConfig
from ..errors import CertificateError, ToolUnavailable
from ..server import create_service
from ..trust import select_qr_renderer

logger = logging.getLogger(__name__)


def _load_config(ctx, **overrides) -> TLSConfig:
    try:
        return TLSConfig.from_env(
            base_dir=ctx.obj.get('base_dir'),
            audit_log=ctx.obj.get('audit_log'),
            **overrides
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration:\n{e}")


def _ensure_or_abort(manager: CertificateLifecycleManager):
    try:
        return manager.ensure()
    except ToolUnavailable as e:
        raise click.ClickException(f"{e}\nMake sure openssl is installed and on your PATH.")
    except CertificateError as e:
        raise click.ClickException(f"Failed to generate certificates: {e}")


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--base-dir', type=click.Path(file_okay=False), help='Directory containing certs/ (default: cwd)')
@click.option('--audit-log', type=click.Path(dir_okay=False), help='Append lifecycle events to this file')
@click.pass_context
def cli(ctx, debug, base_dir, audit_log):
    """Sticker Dream - local HTTPS certificate toolkit."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj['base_dir'] = base_dir
    ctx.obj['audit_log'] = audit_log


@cli.group()
def certs():
    """Manage the self-signed certificate."""
    pass


@certs.command('ensure')
@click.pass_context
def certs_ensure(ctx):
    """Create or renew the certificate if needed."""
    manager = CertificateLifecycleManager(_load_config(ctx))
    paths = _ensure_or_abort(manager)

    click.echo(f"✓ Certificate ready")
    click.echo(f"  Key:         {paths.key}")
    click.echo(f"  Certificate: {paths.cert}")


@certs.command('renew')
@click.pass_context
def certs_renew(ctx):
    """Regenerate the certificate now, even if still valid."""
    manager = CertificateLifecycleManager(_load_config(ctx))
    try:
        paths = manager.regenerate()
    except CertificateError as e:
        raise click.ClickException(f"Failed to generate certificates: {e}")

    click.echo(f"✓ Certificate regenerated: {paths.cert}")


@certs.command('status')
@click.pass_context
def certs_status(ctx):
    """Display certificate information."""
    manager = CertificateLifecycleManager(_load_config(ctx))
    status = manager.get_certificate_status()

    click.echo("=== Certificate Status ===\n")
    click.echo(f"State:          {status['state']}")
    if not status['has_certificate']:
        click.echo("\nNo certificate found. Run 'sticker-dream certs ensure'.")
        return

    click.echo(f"Days remaining: {status['days_remaining']}")
    click.echo(f"Renewal due:    {'yes' if status['should_renew'] else 'no'}")
    if 'subject' in status:
        click.echo(f"\nSubject:        CN={status['subject']}")
        click.echo(f"Valid from:     {status['valid_from']}")
        click.echo(f"Valid to:       {status['valid_to']}")
        click.echo(f"\nSubject Alternative Names ({len(status['sans'])}):")
        for san in status['sans']:
            click.echo(f"  - {san}")
    click.echo(f"\nKey:            {status['key_path']}")
    click.echo(f"Certificate:    {status['cert_path']}")


@cli.command()
@click.option('--host', default='0.0.0.0', help='Host to bind to')
@click.option('--port', type=int, help='Port to bind to (default: $PORT or 3000)')
@click.pass_context
def serve(ctx, host, port):
    """Ensure certificates and serve the trust bootstrap routes over HTTPS."""
    config = _load_config(ctx, port=port)
    manager = CertificateLifecycleManager(config)
    paths = _ensure_or_abort(manager)

    service = create_service(manager, qr_renderer=select_qr_renderer())
    click.echo(service.startup_banner())
    service.run(paths, host=host, port=config.port)


@cli.command()
@click.option('--url', help='Service base URL (default: https://localhost:$PORT)')
@click.option('--timeout', default=3.0, help='Request timeout in seconds')
@click.pass_context
def healthcheck(ctx, url, timeout):
    """Check that the HTTPS service answers with the local certificate."""
    config = _load_config(ctx)
    base_url = (url or f"https://localhost:{config.port}").rstrip('/')
    cert_path = config.paths.cert

    verify = str(cert_path) if cert_path.is_file() else True

    try:
        response = requests.get(f"{base_url}/api/qr", verify=verify, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.debug(f"Health check failed: {e}")
        raise click.ClickException(f"Service not healthy at {base_url}: {e}")

    click.echo(f"✓ Service healthy at {base_url}")
    click.echo(f"  Network URL: {response.json().get('url')}")


def main():
    """Entry point for CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
