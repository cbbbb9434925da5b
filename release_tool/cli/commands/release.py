"""Release management commands"""

import sys
from typing import Any, Awaitable, Callable

import click
from rich.markup import escape

from ..utils.output import (
    console,
    format_manifest,
    format_release_info,
    format_release_result,
    release_table,
)
from ..utils.values import build_config_values
from ...api.exceptions import ReleaseToolError
from ...constants import (
    DEFAULT_HISTORY_SIZE,
    DEFAULT_PLATFORM_NAME,
    MSG_DELETE_STARTED,
    MSG_INSTALL_STARTED,
    MSG_ROLLBACK_STARTED,
    MSG_UPGRADE_STARTED,
)
from ...models import Release, StatusCode
from ...services.release_service import ReleaseService
from ...utils.async_utils import run_async


def _run(ctx, operation: Callable[[ReleaseService], Awaitable[Any]]) -> Any:
    """Run an operation against a fresh service, closing it afterwards"""

    async def runner():
        async with ctx.obj.create_service() as service:
            return await operation(service)

    return run_async(runner())


def _fail(ctx, error: Exception) -> None:
    code = getattr(error, 'error_code', None)
    prefix = f"Error [{code}]" if code else "Error"
    console.print(f"[red]{prefix}: {escape(str(error))}[/red]")
    if ctx.obj.debug:
        console.print_exception()
    sys.exit(1)


def _finish(release: Release) -> None:
    format_release_result(release)
    if release.status_code == StatusCode.FAILED:
        sys.exit(1)


@click.group()
def release():
    """Install, upgrade, roll back and inspect releases"""
    pass


@release.command()
@click.argument('package')
@click.option('--name', '-n', 'release_name', required=True, help='Release name')
@click.option('--platform', '-p', 'platform_name', default=DEFAULT_PLATFORM_NAME,
              show_default=True, help='Platform to deploy to')
@click.option('--values', '-f', 'values_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with override values')
@click.option('--set', 'assignments', multiple=True, metavar='KEY=VALUE',
              help='Override a single value (repeatable)')
@click.option('--strict', is_flag=True, help='Reject unknown values and unresolved placeholders')
@click.pass_context
def install(ctx, package, release_name, platform_name, values_file, assignments, strict):
    """Install a package as a new release

    Arguments:
        PACKAGE: Package reference, NAME or NAME:VERSION

    Examples:

        # Install the latest logger package
        release-tool release install logger --name logger

        # Install a specific version with an override
        release-tool release install logger:1.0.0 -n logger --set log.level=DEBUG
    """
    try:
        config_values = build_config_values(values_file, assignments)

        async def operation(service: ReleaseService):
            started = await service.install(package, release_name, platform_name, config_values, strict)
            console.print(MSG_INSTALL_STARTED.format(
                name=started.name, version=started.version, platform=platform_name))
            return await service.wait_for_completion(release_name)

        result = _run(ctx, operation)

    except ReleaseToolError as e:
        _fail(ctx, e)

    _finish(result)


@release.command()
@click.argument('release_name')
@click.option('--package', '-P', 'package', help='Package reference (default: current package)')
@click.option('--values', '-f', 'values_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with override values (default: current values)')
@click.option('--set', 'assignments', multiple=True, metavar='KEY=VALUE',
              help='Override a single value (repeatable)')
@click.option('--force', is_flag=True, help='Redeploy even if nothing changed')
@click.option('--app', 'app_names', multiple=True, help='With --force, only redeploy these applications')
@click.option('--strict', is_flag=True, help='Reject unknown values and unresolved placeholders')
@click.pass_context
def upgrade(ctx, release_name, package, values_file, assignments, force, app_names, strict):
    """Upgrade a release

    Only applications whose manifest changed are redeployed; the others
    keep running untouched.

    Examples:

        # Upgrade to the latest package version
        release-tool release upgrade logger --package logger

        # Change a value, keeping the package
        release-tool release upgrade logger --set log.level=DEBUG
    """
    try:
        config_values = build_config_values(values_file, assignments)

        async def operation(service: ReleaseService):
            started = await service.upgrade(release_name, package, config_values,
                                            force=force, app_names=app_names or None, strict=strict)
            console.print(MSG_UPGRADE_STARTED.format(name=started.name, version=started.version))
            return await service.wait_for_completion(release_name)

        result = _run(ctx, operation)

    except ReleaseToolError as e:
        _fail(ctx, e)

    _finish(result)


@release.command()
@click.argument('release_name')
@click.option('--version', '-V', 'version', type=int,
              help='Version to roll back to (default: the one before current)')
@click.pass_context
def rollback(ctx, release_name, version):
    """Roll back to the manifest of an earlier version

    The rollback is recorded as a new version.
    """
    try:
        async def operation(service: ReleaseService):
            started = await service.rollback(release_name, version)
            console.print(MSG_ROLLBACK_STARTED.format(
                name=started.name, target=version if version else "previous", version=started.version))
            return await service.wait_for_completion(release_name)

        result = _run(ctx, operation)

    except ReleaseToolError as e:
        _fail(ctx, e)

    _finish(result)


@release.command()
@click.argument('release_name')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def delete(ctx, release_name, yes):
    """Undeploy all applications of a release"""
    if not yes:
        click.confirm(f"Delete release {release_name}?", abort=True)

    try:
        async def operation(service: ReleaseService):
            started = await service.delete(release_name)
            console.print(MSG_DELETE_STARTED.format(name=started.name, version=started.version))
            return await service.wait_for_completion(release_name)

        result = _run(ctx, operation)

    except ReleaseToolError as e:
        _fail(ctx, e)

    _finish(result)


@release.command()
@click.argument('release_name')
@click.option('--version', '-V', 'version', type=int, help='Release version (default: latest)')
@click.option('--output', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def status(ctx, release_name, version, output):
    """Show live status of a release"""
    try:
        info = _run(ctx, lambda service: service.status(release_name, version))
    except ReleaseToolError as e:
        _fail(ctx, e)

    if output == 'json':
        console.print_json(data=info.to_dict())
    else:
        format_release_info(info)


@release.command()
@click.argument('release_name')
@click.option('--max', 'max_revisions', type=int, default=DEFAULT_HISTORY_SIZE,
              show_default=True, help='Number of versions to show')
@click.option('--output', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def history(ctx, release_name, max_revisions, output):
    """Show version history of a release, newest first"""
    try:
        releases = _run(ctx, lambda service: service.history(release_name, max_revisions))
    except ReleaseToolError as e:
        _fail(ctx, e)

    if output == 'json':
        console.print_json(data=[
            {
                'name': r.name,
                'version': r.version,
                'status': r.status.to_dict(),
                'package': str(r.package),
                'updated_at': r.updated_at
            }
            for r in releases
        ])
    else:
        console.print(release_table(releases, f"History of {release_name}"))


@release.command(name='list')
@click.option('--output', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def list_releases(ctx, output):
    """List the latest deployed or failed release of every name"""
    try:
        releases = _run(ctx, lambda service: service.list_releases())
    except ReleaseToolError as e:
        _fail(ctx, e)

    if not releases:
        console.print("[yellow]No releases found[/yellow]")
        return

    if output == 'json':
        console.print_json(data=[
            {'name': r.name, 'version': r.version, 'status': r.status_code.value}
            for r in releases
        ])
    else:
        console.print(release_table(releases, "Releases"))


@release.command()
@click.argument('release_name')
@click.option('--version', '-V', 'version', type=int, help='Release version (default: latest)')
@click.pass_context
def manifest(ctx, release_name, version):
    """Print the rendered manifest of a release"""
    try:
        rendered = _run(ctx, lambda service: service.manifest(release_name, version))
    except ReleaseToolError as e:
        _fail(ctx, e)

    format_manifest(rendered)
