"""CLI interface for shopsync."""

import logging
from pathlib import Path
from typing import Any, Optional, cast

import click

from .api import ShopifyClient
from .auth import Credentials, resolve_credentials, validate_required_options
from .exceptions import ShopifyAPIError
from .output import OutputFormatter
from .resources import ADAPTERS, ResourceAdapter, ThemeAssetsAdapter, list_themes
from .sync import PullOptions, PushOptions, SyncEngine, SyncReport

logger = logging.getLogger(__name__)


def _client_factory(credentials: Credentials) -> ShopifyClient:
    return ShopifyClient(credentials)


def _credentials(ctx: Any) -> Credentials:
    return resolve_credentials(ctx.obj.get("site"), ctx.obj.get("access_token"))


def _finish(ctx: Any, report: SyncReport) -> None:
    """Emit the JSON report if requested and exit 1 when any item failed."""
    out: OutputFormatter = ctx.obj["out"]
    if out.json_output:
        out.output_json(report.to_dict())
    if report.failed > 0:
        ctx.exit(1)


def _run_pull(
    ctx: Any,
    adapter: ResourceAdapter,
    output: Optional[str],
    max_items: Optional[int],
    dry_run: bool,
    mirror: bool,
) -> None:
    out: OutputFormatter = ctx.obj["out"]
    try:
        validate_required_options({"output": output}, ["output"])
        options = PullOptions(
            output=Path(cast(str, output)),
            credentials=_credentials(ctx),
            max_items=max_items,
            dry_run=dry_run,
            mirror=mirror,
        )
        report = SyncEngine(adapter, output=out).pull(options)
    except KeyboardInterrupt:
        out.warning("\nPull cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT
    except ShopifyAPIError as e:
        out.error(str(e))
        ctx.exit(1)
    except OSError as e:
        out.error(f"Local file error: {e}")
        ctx.exit(1)
    finally:
        adapter.close()

    _finish(ctx, report)


def _run_push(
    ctx: Any,
    adapter: ResourceAdapter,
    input_path: Optional[str],
    dry_run: bool,
    mirror: bool,
) -> None:
    out: OutputFormatter = ctx.obj["out"]
    try:
        validate_required_options({"input": input_path}, ["input"])
        options = PushOptions(
            input=Path(cast(str, input_path)),
            credentials=_credentials(ctx),
            dry_run=dry_run,
            mirror=mirror,
        )
        report = SyncEngine(adapter, output=out).push(options)
    except KeyboardInterrupt:
        out.warning("\nPush cancelled by user")
        ctx.exit(130)
    except ShopifyAPIError as e:
        out.error(str(e))
        ctx.exit(1)
    except OSError as e:
        out.error(f"Local file error: {e}")
        ctx.exit(1)
    finally:
        adapter.close()

    _finish(ctx, report)


def pull_options(func: Any) -> Any:
    """Shared options of every ``pull`` command."""
    func = click.option(
        "--mirror",
        is_flag=True,
        help="Delete local files that no longer exist in the store",
    )(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Show what would be done without changes"
    )(func)
    func = click.option(
        "--max-items",
        type=int,
        default=None,
        help="Only pull the first N items (for testing)",
    )(func)
    func = click.option(
        "--output", "-o", type=click.Path(), help="Output directory"
    )(func)
    return func


def push_options(func: Any) -> Any:
    """Shared options of every ``push`` command."""
    func = click.option(
        "--mirror",
        is_flag=True,
        help="Delete remote items that have no local file",
    )(func)
    func = click.option(
        "--dry-run", is_flag=True, help="Show what would be done without changes"
    )(func)
    func = click.option(
        "--input", "-i", "input_path", type=click.Path(), help="Input directory"
    )(func)
    return func


def theme_options(func: Any) -> Any:
    """Theme selection options."""
    func = click.option(
        "--published", is_flag=True, help="Use the published (live) theme"
    )(func)
    func = click.option("--name", "-n", help="Theme name (case-insensitive)")(func)
    return func


@click.group()
@click.option("--site", "-s", help="Store domain, e.g. my-shop.myshopify.com")
@click.option("--access-token", "-t", help="Admin API access token")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="shopsync")
@click.pass_context
def main(
    ctx: Any,
    site: Optional[str],
    access_token: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """shopsync - Pull and push Shopify store resources as local files.

    Credentials come from --site/--access-token or from the
    SHOPIFY_STORE_DOMAIN and SHOPIFY_ACCESS_TOKEN environment variables.
    """
    ctx.ensure_object(dict)
    ctx.obj["site"] = site
    ctx.obj["access_token"] = access_token
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("shopsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


# =========================
# auth
# =========================


@main.group()
def auth() -> None:
    """Check store credentials."""


@auth.command()
@click.pass_context
def validate(ctx: Any) -> None:
    """Validate credentials and show the granted access scopes."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        credentials = _credentials(ctx)
        out.info(f"Validating credentials for {credentials.site}...")
        with _client_factory(credentials) as client:
            shop = client.get_shop()
            scopes = client.get_access_scopes()
    except ShopifyAPIError as e:
        out.error(f"Credential validation failed: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            {
                "valid": True,
                "site": credentials.site,
                "shop": shop.get("name"),
                "scopes": scopes,
            }
        )
        return

    out.success("✓ Credentials are valid")
    out.print_summary(
        "Store",
        [
            ("Name", str(shop.get("name", ""))),
            ("Domain", credentials.site),
            ("Scopes", ", ".join(scopes) if scopes else "(none)"),
        ],
    )


# =========================
# themes
# =========================


@main.group()
def themes() -> None:
    """List, pull and push theme assets."""


@themes.command("list")
@click.pass_context
def list_themes_command(ctx: Any) -> None:
    """List the store's themes."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        credentials = _credentials(ctx)
        with _client_factory(credentials) as client:
            store_themes = list_themes(client)
    except ShopifyAPIError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(store_themes)
        return

    if not store_themes:
        out.info("No themes found")
        return

    out.print_summary(
        "Themes",
        [
            (str(theme.get("name")), f"ID: {theme.get('id')} (role: {theme.get('role')})")
            for theme in store_themes
        ],
    )


@themes.command("pull")
@theme_options
@pull_options
@click.pass_context
def pull_theme(
    ctx: Any,
    name: Optional[str],
    published: bool,
    output: Optional[str],
    max_items: Optional[int],
    dry_run: bool,
    mirror: bool,
) -> None:
    """Pull a theme's assets to OUTPUT/themes/<theme name>.

    With --published the live theme is pulled to OUTPUT/themes/published.
    """
    adapter = ThemeAssetsAdapter(name, published, client_factory=_client_factory)
    _run_pull(ctx, adapter, output, max_items, dry_run, mirror)


@themes.command("push")
@theme_options
@push_options
@click.pass_context
def push_theme(
    ctx: Any,
    name: Optional[str],
    published: bool,
    input_path: Optional[str],
    dry_run: bool,
    mirror: bool,
) -> None:
    """Push local theme files from INPUT/themes/<theme name>."""
    adapter = ThemeAssetsAdapter(name, published, client_factory=_client_factory)
    _run_push(ctx, adapter, input_path, dry_run, mirror)


# =========================
# flat resource types
# =========================


def _register_resource_group(name: str, adapter_cls: type[ResourceAdapter]) -> None:
    """Add a ``<name> pull|push`` command group for a flat resource type."""

    @main.group(name=name, help=f"Pull and push {name}.")
    def group() -> None:
        pass

    @group.command("pull", help=f"Pull {name} to OUTPUT/{name}.")
    @pull_options
    @click.pass_context
    def pull(
        ctx: Any,
        output: Optional[str],
        max_items: Optional[int],
        dry_run: bool,
        mirror: bool,
    ) -> None:
        adapter = adapter_cls(client_factory=_client_factory)
        _run_pull(ctx, adapter, output, max_items, dry_run, mirror)

    @group.command("push", help=f"Push {name} from INPUT/{name}.")
    @push_options
    @click.pass_context
    def push(
        ctx: Any,
        input_path: Optional[str],
        dry_run: bool,
        mirror: bool,
    ) -> None:
        adapter = adapter_cls(client_factory=_client_factory)
        _run_push(ctx, adapter, input_path, dry_run, mirror)


for _name, _adapter_cls in ADAPTERS.items():
    _register_resource_group(_name, _adapter_cls)


if __name__ == "__main__":
    main()
