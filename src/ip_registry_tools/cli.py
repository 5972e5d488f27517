"""Command-line interface for IP Registry Tools."""

import asyncio
from typing import Any, Coroutine

import click
from rich.console import Console
from rich.table import Table

from ip_registry_tools import __version__
from ip_registry_tools.errors import ChunkSubmissionError, RegistryToolsError

console = Console()


def run(coro: Coroutine) -> Any:
    """Run a command coroutine, turning known errors into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except RegistryToolsError as e:
        console.print(f"[red]Error:[/red] {e}")
        if isinstance(e, ChunkSubmissionError) and e.chain_id is not None:
            console.print(f"[dim]chainId: {e.chain_id}[/dim]")
        raise SystemExit(1) from e


def print_events(events: list) -> None:
    console.print("[bold]Events:[/bold]")
    for event in events:
        console.print(event)


async def connect(signer: bool = True):
    from ip_registry_tools.chain import ProtocolClient

    client = await ProtocolClient.connect(signer=signer, console=console)
    console.print(f"[dim]chainId: {client.chain_id}[/dim]")
    return client


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """IP Registry Tools - deploy, query and batch-populate IP asset registries."""
    pass


@main.command()
def status() -> None:
    """Check system status (RPC node, deployment file, signer)."""
    from ip_registry_tools.chain import check_connection, get_account, get_web3, load_deployment
    from ip_registry_tools.config import get_settings

    settings = get_settings()
    console.print("[bold]IP Registry Tools Status[/bold]\n")
    console.print(f"RPC URL: {settings.rpc_url}")

    async def check() -> None:
        w3 = get_web3()
        try:
            if not await check_connection(w3):
                console.print("[red]✗[/red] RPC node not reachable")
                return
            chain_id = await w3.eth.chain_id
        finally:
            await w3.provider.disconnect()

        console.print(f"[green]✓[/green] RPC node connected (chainId {chain_id})")
        deployment = load_deployment(chain_id, settings)
        console.print(f"[green]✓[/green] Deployment: {deployment.source}")
        for key, address in deployment.addresses.items():
            console.print(f"  {key}: {address}")

    run(check())

    try:
        console.print(f"Signer: {get_account(settings).address}")
    except RegistryToolsError as e:
        console.print(f"[yellow]Signer: {e}[/yellow]")


@main.command()
def accounts() -> None:
    """Print the signing account and the accounts managed by the node."""
    from ip_registry_tools.chain import get_account, get_web3

    async def list_accounts() -> None:
        w3 = get_web3()
        try:
            node_accounts = await w3.eth.accounts
        finally:
            await w3.provider.disconnect()
        for account in node_accounts:
            console.print(account)

    try:
        console.print(f"[bold]Signer:[/bold] {get_account().address}")
    except RegistryToolsError as e:
        console.print(f"[yellow]{e}[/yellow]")
    run(list_accounts())


# ============================================================================
# Franchise Commands
# ============================================================================

@main.group()
def franchise() -> None:
    """Franchise commands."""
    pass


@franchise.command(name="create")
@click.argument("name")
@click.argument("symbol")
@click.argument("description")
@click.argument("token_uri")
@click.option("--events", is_flag=True, help="Show events in the tx receipt")
def franchise_create(name: str, symbol: str, description: str, token_uri: str, events: bool) -> None:
    """Mint a Franchise NFT and create its IP asset registry."""
    from ip_registry_tools.registry import create_franchise

    async def execute() -> None:
        async with await connect() as client:
            console.print(f"Creating franchise: {name} ({symbol})")
            registered, all_events = await create_franchise(client, name, symbol, description, token_uri)
        if events:
            print_events(all_events)
        console.print("[green]✓[/green] Franchise created")
        console.print(f"  id: {registered.id}")
        console.print(f"  address: {registered.ip_asset_registry}")

    run(execute())


@franchise.command(name="configure-licensing")
@click.argument("franchise_id", type=int)
@click.argument("non_commercial_can_sublicense")
@click.argument("non_commercial_root_license_id", type=int)
@click.argument("commercial_can_sublicense")
@click.argument("commercial_root_license_id", type=int)
@click.argument("root_ip_asset_has_commercial_rights")
@click.argument("revoker")
@click.argument("commercial_license_uri")
@click.option("--events", is_flag=True, help="Show events in the tx receipt")
def franchise_configure_licensing(
    franchise_id: int,
    non_commercial_can_sublicense: str,
    non_commercial_root_license_id: int,
    commercial_can_sublicense: str,
    commercial_root_license_id: int,
    root_ip_asset_has_commercial_rights: str,
    revoker: str,
    commercial_license_uri: str,
    events: bool,
) -> None:
    """Configure licensing for a Franchise.

    Boolean arguments are true only when given as "true".
    """
    from web3 import Web3

    from ip_registry_tools.models import FranchiseLicensingConfig, IPAssetConfig
    from ip_registry_tools.registry import configure_franchise_licensing, parse_flag

    config = FranchiseLicensingConfig(
        non_commercial=IPAssetConfig(parse_flag(non_commercial_can_sublicense), non_commercial_root_license_id),
        commercial=IPAssetConfig(parse_flag(commercial_can_sublicense), commercial_root_license_id),
        root_ip_asset_has_commercial_rights=parse_flag(root_ip_asset_has_commercial_rights),
        revoker=Web3.to_checksum_address(revoker),
        commercial_license_uri=commercial_license_uri,
    )

    async def execute() -> None:
        async with await connect() as client:
            console.print(f"Configuring licensing for franchise: {franchise_id}")
            config_set, all_events = await configure_franchise_licensing(client, franchise_id, config)
        if events:
            print_events(all_events)
        console.print(f"[green]✓[/green] FranchiseConfigSet id: {config_set.id}")

    run(execute())


@franchise.command(name="registry-address")
@click.argument("franchise_id", type=int)
def franchise_registry_address(franchise_id: int) -> None:
    """Get the address of the IP asset registry of a Franchise."""

    async def execute() -> None:
        async with await connect(signer=False) as client:
            console.print(f"Getting IP asset registry for franchise id: {franchise_id}")
            address = await client.ip_asset_registry_address(franchise_id)
        console.print(f"Address: {address}")

    run(execute())


# ============================================================================
# IP Asset Commands
# ============================================================================

@main.group(name="ip-asset")
def ip_asset() -> None:
    """IP asset commands."""
    pass


@ip_asset.command(name="create")
@click.argument("franchise_id", type=int)
@click.argument("ip_asset_type", metavar="TYPE")
@click.argument("name")
@click.argument("description")
@click.argument("media_url")
@click.option("--receiver", "-r", help="Owner of the new IP asset (defaults to the signer)")
@click.option("--events", is_flag=True, help="Show events in the tx receipt")
def ip_asset_create(
    franchise_id: int,
    ip_asset_type: str,
    name: str,
    description: str,
    media_url: str,
    receiver: str | None,
    events: bool,
) -> None:
    """Create an IP asset (TYPE: STORY, CHARACTER, ART, GROUP, LOCATION or ITEM)."""
    from ip_registry_tools.registry import create_ip_asset

    async def execute() -> None:
        async with await connect() as client:
            written, all_events = await create_ip_asset(
                client, franchise_id, ip_asset_type, name, description, media_url, receiver
            )
        if events:
            print_events(all_events)
        console.print(f"[green]✓[/green] IP asset created: {written.ip_asset_id}")

    run(execute())


@ip_asset.command(name="read")
@click.argument("franchise_id", type=int)
@click.argument("ip_asset_id", type=int)
def ip_asset_read(franchise_id: int, ip_asset_id: int) -> None:
    """Read the details of an IP asset."""
    from ip_registry_tools.registry import read_ip_asset

    async def execute() -> None:
        async with await connect(signer=False) as client:
            data = await read_ip_asset(client, franchise_id, ip_asset_id)

        table = Table(title=f"IP Asset {data.id}")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Type", data.block_type.name)
        table.add_row("Name", data.name)
        table.add_row("Description", data.description)
        table.add_row("Media URL", data.media_url)
        console.print(table)

    run(execute())


# ============================================================================
# License / Relationship Commands
# ============================================================================

@main.group(name="license")
def license_group() -> None:
    """License commands."""
    pass


@license_group.command(name="create")
@click.argument("franchise_id", type=int)
@click.argument("ip_asset_id", type=int)
@click.argument("license_uri")
@click.option("--commercial", is_flag=True, help="Create a commercial license")
@click.option("--name", default="", help="License name")
@click.option("--image-uri", default="", help="License image URI")
@click.option("--usage", default="", help="Usage terms")
@click.option("--duration", default="", help="Duration terms")
@click.option("--rights", default="", help="Rights granted")
@click.option("--events", is_flag=True, help="Show events in the tx receipt")
def license_create(
    franchise_id: int,
    ip_asset_id: int,
    license_uri: str,
    commercial: bool,
    name: str,
    image_uri: str,
    usage: str,
    duration: str,
    rights: str,
    events: bool,
) -> None:
    """Create a license for an IP asset."""
    from ip_registry_tools.models import LicenseTerms
    from ip_registry_tools.registry import create_license

    terms = LicenseTerms(image_uri=image_uri, usage=usage, duration=duration, rights=rights, name=name)

    async def execute() -> None:
        async with await connect() as client:
            console.print("Creating license...")
            license_id, all_events = await create_license(
                client, franchise_id, ip_asset_id, commercial, license_uri, terms
            )
        if events:
            print_events(all_events)
        console.print(f"[green]✓[/green] License created: {license_id}")

    run(execute())


@main.group()
def relationship() -> None:
    """Relationship commands."""
    pass


@relationship.command(name="create")
@click.argument("source_contract")
@click.argument("source_id", type=int)
@click.argument("dest_contract")
@click.argument("dest_id", type=int)
@click.argument("name")
@click.argument("ttl", type=int)
@click.option("--data", default="0x", help="Hex data passed to the relationship processor")
@click.option("--events", is_flag=True, help="Show events in the tx receipt")
def relationship_create(
    source_contract: str,
    source_id: int,
    dest_contract: str,
    dest_id: int,
    name: str,
    ttl: int,
    data: str,
    events: bool,
) -> None:
    """Relate two assets."""
    from ip_registry_tools.registry import create_relationship

    async def execute() -> None:
        async with await connect() as client:
            console.print("Creating relationship...")
            relation, all_events = await create_relationship(
                client, source_contract, source_id, dest_contract, dest_id, name, ttl, data
            )
        if events:
            print_events(all_events)
        console.print(
            f"[green]✓[/green] Relationship created: {relation.source_id} -> {relation.dest_id}"
        )

    run(execute())


# ============================================================================
# Batch Upload Commands
# ============================================================================

@main.command()
@click.argument("franchise_id", type=int)
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--chunk-size", "-c", type=int, help="Calls per transaction (default from settings: 100)")
@click.option("--receiver", "-r", help="Owner of the created IP assets (defaults to the signer)")
@click.option("--events", is_flag=True, help="Show events in each tx receipt")
def upload(
    franchise_id: int,
    file_path: str,
    chunk_size: int | None,
    receiver: str | None,
    events: bool,
) -> None:
    """Mass upload IP assets and relationships from a JSON file.

    Ids assigned on chain are written back to FILE_PATH after every batch.
    Records that already have an id are skipped, so a failed run can be
    resumed by running the same command again.
    """
    from ip_registry_tools.config import get_settings
    from ip_registry_tools.upload import BatchUploader, DatasetStore

    size = chunk_size if chunk_size is not None else get_settings().chunk_size
    if size < 1:
        raise click.BadParameter("must be at least 1", param_hint="--chunk-size")

    async def execute() -> None:
        store = DatasetStore.load(file_path)
        async with await connect() as client:
            address = await client.ip_asset_registry_address(franchise_id)
            console.print(f"Registry: {address}")
            uploader = BatchUploader(
                client,
                store,
                address,
                receiver or client.signer_address,
                chunk_size=size,
                show_events=events,
                console=console,
            )
            await uploader.run()
        console.print(f"\n[green]✓[/green] {store.writes} updates written to {store.path}")

    run(execute())


@main.command(name="update-ids")
@click.argument("franchise_id", type=int)
@click.argument("tx_hash")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
def update_ids(franchise_id: int, tx_hash: str, file_path: str) -> None:
    """Update IP asset ids in FILE_PATH from the transaction that created them."""
    from ip_registry_tools.upload import DatasetStore, Reconciler

    async def execute() -> None:
        store = DatasetStore.load(file_path)
        async with await connect(signer=False) as client:
            # Fails early when the franchise has no registry
            address = await client.ip_asset_registry_address(franchise_id)
            reconciler = Reconciler(
                store,
                client.get_receipt,
                client.decoder("IPAssetWritten", registry_address=address),
                console,
            )
            matched = await reconciler.reconcile_ip_assets(tx_hash)
        for event in matched:
            console.print(f"  {event.name}: {event.ip_asset_id}")

    run(execute())


@main.command(name="eip7201-key")
@click.argument("namespace")
@click.option("--aligned", is_flag=True, help="Clear the last byte, as EIP-7201 prescribes")
def eip7201_key(namespace: str, aligned: bool) -> None:
    """Get the namespaced storage key for a namespace (EIP-7201)."""
    from ip_registry_tools.storage_key import namespaced_storage_key

    console.print(namespaced_storage_key(namespace, aligned=aligned))


if __name__ == "__main__":
    main()
