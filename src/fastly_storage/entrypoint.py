"""Command line interface for Fastly Object Storage.

Connection settings are read from ``FASTLY_*`` environment variables.

"""

import asyncio
import logging
import pathlib
import typing

import typer

from fastly_storage import client, errors

main = typer.Typer(help='Manage Fastly Object Storage buckets and objects.')


@main.callback()
def configure(
    ctx: typer.Context,
    verbose: typing.Annotated[
        bool, typer.Option('--verbose', '-v', help='Enable debug logging')
    ] = False,
) -> None:
    """Configure logging before running a command."""
    ctx.obj = {'verbose': verbose}
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


def _run(
    ctx: typer.Context,
    operation: typing.Callable[
        [client.StorageClient], typing.Awaitable[None]
    ],
) -> None:
    """Run ``operation`` with a client, exiting non-zero on failure."""

    async def runner() -> None:
        async with client.StorageClient(
            debug=ctx.obj['verbose'] or None
        ) as storage:
            await operation(storage)

    try:
        asyncio.run(runner())
    except errors.StorageError as err:
        typer.echo(f'✗ {err.message} ({err.code})', err=True)
        raise typer.Exit(code=1) from err


@main.command()
def buckets(ctx: typer.Context) -> None:
    """List buckets."""

    async def operation(storage: client.StorageClient) -> None:
        for bucket in await storage.list_buckets():
            created = (
                bucket.creation_date.isoformat()
                if bucket.creation_date
                else '-'
            )
            typer.echo(f'{created}\t{bucket.name}')

    _run(ctx, operation)


@main.command('ls')
def list_objects(
    ctx: typer.Context,
    bucket: str,
    prefix: typing.Annotated[
        str | None, typer.Option(help='Only list keys with this prefix')
    ] = None,
) -> None:
    """List every object in a bucket."""

    async def operation(storage: client.StorageClient) -> None:
        async for entry in storage.iter_objects(bucket, prefix=prefix):
            typer.echo(f'{entry.size:>12}\t{entry.key}')

    _run(ctx, operation)


@main.command()
def put(
    ctx: typer.Context,
    bucket: str,
    key: str,
    path: pathlib.Path,
    content_type: typing.Annotated[
        str | None, typer.Option(help='Content-Type of the object')
    ] = None,
) -> None:
    """Upload a local file."""

    async def operation(storage: client.StorageClient) -> None:
        with path.open('rb') as handle:
            result = await storage.upload_object(
                bucket, key, handle, content_type=content_type
            )
        typer.echo(f'✓ Uploaded {bucket}/{key} ({result.etag})')

    _run(ctx, operation)


@main.command()
def get(
    ctx: typer.Context, bucket: str, key: str, path: pathlib.Path
) -> None:
    """Download an object to a local file."""

    async def operation(storage: client.StorageClient) -> None:
        stream = await storage.get_object_stream(bucket, key)
        size = 0
        async with stream:
            with path.open('wb') as handle:
                async for chunk in stream.iter_chunks():
                    handle.write(chunk)
                    size += len(chunk)
        typer.echo(f'✓ Downloaded {bucket}/{key} ({size} bytes)')

    _run(ctx, operation)


@main.command('rm')
def remove(ctx: typer.Context, bucket: str, key: str) -> None:
    """Delete an object."""

    async def operation(storage: client.StorageClient) -> None:
        await storage.delete_object(bucket, key)
        typer.echo(f'✓ Deleted {bucket}/{key}')

    _run(ctx, operation)


@main.command()
def presign(
    ctx: typer.Context,
    bucket: str,
    key: str,
    upload: typing.Annotated[
        bool, typer.Option(help='Sign a PUT instead of a GET')
    ] = False,
    expires_in: typing.Annotated[
        int, typer.Option(help='URL lifetime in seconds')
    ] = 3600,
) -> None:
    """Print a presigned URL for an object."""

    async def operation(storage: client.StorageClient) -> None:
        if upload:
            url = await storage.get_presigned_upload_url(
                bucket, key, expires_in
            )
        else:
            url = await storage.get_presigned_download_url(
                bucket, key, expires_in
            )
        typer.echo(url)

    _run(ctx, operation)
