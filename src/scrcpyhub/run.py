# -*- coding: utf-8 -*-
"""
    命令行入口
    ~~~~~~~~~~~~~~~~~~

    Log:
        2026-10-08 0.3.0 Me2sY  新增 watch，周期刷新并自动重连

        2026-09-20 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.3.0'

__all__ = ['cli']

import asyncio
import functools
import sys

import click
from loguru import logger

from scrcpyhub.core import AdbScrcpyCollaborator, ScrcpyHub, SessionConfig
from scrcpyhub.utils import kv_global


def with_hub(func):
    """
        在 ScrcpyHub 上下文中运行协程命令，LogStream 输出至终端
    """
    @functools.wraps(func)
    @click.pass_context
    def wrapper(ctx, *args, **kwargs):
        async def _run():
            async with ScrcpyHub(AdbScrcpyCollaborator(), kv_global()) as hub:
                hub.log_stream.subscribe(click.echo)
                if ctx.obj['path']:
                    hub.config_store.update(scrcpy_path=ctx.obj['path'])
                return await func(hub, *args, **kwargs)
        code = asyncio.run(_run())
        if code:
            ctx.exit(code)
    return wrapper


@click.group()
@click.option('--path', type=click.Path(file_okay=False, dir_okay=True), default=None,
              help='Folder containing adb / scrcpy, saved to config')
@click.option('--log-level', default='WARNING', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR']))
@click.pass_context
def cli(ctx, path, log_level):
    logger.remove()
    logger.add(sys.stderr, level=log_level)
    ctx.ensure_object(dict)
    ctx.obj['path'] = path


@cli.command()
@with_hub
async def devices(hub: ScrcpyHub):
    """List connected devices"""
    await hub.registry.refresh()
    for device in hub.registry.devices:
        mark = '*' if device == hub.active_device else ' '
        click.echo(f"{mark} {device}")


@cli.command()
@click.argument('ip')
@with_hub
async def connect(hub: ScrcpyHub, ip):
    """Connect to host:port"""
    res = await hub.orchestrator.connect(ip)
    return 0 if res.success else 1


@cli.command()
@click.argument('ip')
@click.argument('code')
@with_hub
async def pair(hub: ScrcpyHub, ip, code):
    """Pair with host:port using a pairing code"""
    res = await hub.orchestrator.pair(ip, code)
    return 0 if res.success else 1


@cli.command()
@click.option('--device', default=None, help='Device serial, defaults to the active device')
@with_hub
async def cameras(hub: ScrcpyHub, device):
    """List device cameras"""
    await hub.registry.refresh(silent=True)
    device = device or hub.active_device
    if not device:
        raise click.UsageError('No device found')

    await hub.list_options(device, ScrcpyHub.LIST_CAMERAS)
    for camera in hub.cameras:
        click.echo(f"{camera.id}\t{camera.name}")


@cli.command()
@click.option('--device', default=None)
@click.option('--mode', type=click.Choice(SessionConfig.MODES), default=None)
@with_hub
async def start(hub: ScrcpyHub, device, mode):
    """Start a scrcpy session and wait until it exits"""
    await hub.registry.refresh(silent=True)
    if device:
        hub.registry.select_active(device)
    if mode:
        hub.config_store.update(session_mode=mode)

    if not await hub.start_session():
        return 1

    await hub.sessions.drain()
    try:
        while hub.session_running:
            await asyncio.sleep(0.5)
            await hub.sessions.drain()
    finally:
        await hub.stop_session()


@cli.command()
@click.option('--clear', is_flag=True, default=False)
@with_hub
async def history(hub: ScrcpyHub, clear):
    """Show recent wireless endpoints"""
    if clear:
        hub.history.clear()
    for endpoint in hub.history:
        click.echo(endpoint)


@cli.command('reset-adb')
@with_hub
async def reset_adb(hub: ScrcpyHub):
    """Kill the adb server and refresh"""
    await hub.orchestrator.reset_transport()


@cli.command()
@with_hub
async def check(hub: ScrcpyHub):
    """Check scrcpy availability"""
    status = await hub.check_binary()
    click.echo(status.message)
    return 0 if status.found else 1


@cli.command()
@with_hub
async def download(hub: ScrcpyHub):
    """Download the latest scrcpy release into ./scrcpy-bin"""
    ok = await hub.download_binary()
    await hub.sessions.drain()
    click.echo(hub.binary_status.message)
    return 0 if ok else 1


@cli.command()
@click.option('--interval', type=float, default=3.0, show_default=True)
@click.option('--auto-connect/--no-auto-connect', default=None)
@with_hub
async def watch(hub: ScrcpyHub, interval, auto_connect):
    """Refresh devices periodically"""
    if auto_connect is not None:
        hub.config_store.set_auto_connect(auto_connect)

    await hub.check_binary()
    await hub.registry.refresh(silent=True)
    await hub.orchestrator.auto_connect(hub.config_store.auto_connect)

    while True:
        await asyncio.sleep(interval)
        await hub.registry.refresh(silent=True)


if __name__ == '__main__':
    cli(obj={})
