# -*- coding: utf-8 -*-
"""
    Scrcpy 下载器
    ~~~~~~~~~~~~~~~~~~
    从 GitHub Release 获取最新 scrcpy 并解压至 ./scrcpy-bin

    Log:
        2026-09-28 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.1.0'

__all__ = [
    'platform_asset', 'ScrcpyDownloader'
]

import pathlib
import platform
import shutil
import sys
import tarfile
import zipfile
from typing import Tuple

import httpx
from loguru import logger

from scrcpyhub.core.errors import DownloadError
from scrcpyhub.core.events import DownloadingEvent, DownloadProgressEvent, DownloadCompleteEvent
from scrcpyhub.utils import Param


def platform_asset() -> Tuple[str, str, str]:
    """
        (os_tag, arch_tag, extension)
    :return:
    """
    machine = platform.machine().lower()

    if sys.platform == 'win32':
        arch = 'win64' if machine in ('amd64', 'x86_64') else 'win32'
        return arch, arch, '.zip'
    elif sys.platform.startswith('linux'):
        return 'linux', 'linux-x86_64', '.tar.gz'
    elif sys.platform == 'darwin':
        arch = 'macos-aarch64' if machine in ('arm64', 'aarch64') else 'macos-x86_64'
        return 'macos', arch, '.tar.gz'

    raise DownloadError(f"Unsupported OS for auto-download: {sys.platform}")


class ScrcpyDownloader:
    """
        emitter: object with emit_log(str) / emit_status(event), usually the collaborator
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(self, emitter, target_dir: pathlib.Path | None = None, client: httpx.AsyncClient | None = None):
        self.emitter = emitter
        self.target_dir = pathlib.Path.cwd() if target_dir is None else pathlib.Path(target_dir)
        self.client = client

    async def _find_asset(self, client: httpx.AsyncClient, arch_tag: str, extension: str) -> Tuple[str, str]:
        """
            API 优先，限流时通过 latest 重定向获取 tag
        :return: (download_url, filename)
        """
        try:
            resp = await client.get(Param.RELEASE_API_URL)
        except httpx.HTTPError as e:
            logger.warning(f"Release API failed => {e}")
            resp = None

        if resp is not None and resp.status_code == httpx.codes.OK:
            for asset in resp.json().get('assets', []):
                name = asset.get('name', '')
                if arch_tag in name and name.endswith(extension):
                    return asset.get('browser_download_url', ''), name

        elif resp is not None and resp.status_code == httpx.codes.FORBIDDEN:
            self.emitter.emit_log('[SYSTEM] API rate limited, attempting fallback discovery...')

        try:
            redirect = await client.get(Param.RELEASE_PAGE_URL, follow_redirects=True)
        except httpx.HTTPError as e:
            raise DownloadError(f"Fallback failed: {e}") from e

        tag = str(redirect.url).rstrip('/').split('/')[-1]
        if not tag.startswith('v'):
            raise DownloadError(f"Could not find {arch_tag} binary. (API rate limit might be active)")

        filename = f"scrcpy-{arch_tag}-{tag}{extension}"
        self.emitter.emit_log(f"[SYSTEM] Discovered latest tag via fallback: {tag}")
        return f"{Param.RELEASE_DOWNLOAD_URL}/{tag}/{filename}", filename

    async def _fetch(self, client: httpx.AsyncClient, url: str, archive: pathlib.Path):
        async with client.stream('GET', url, follow_redirects=True) as resp:
            resp.raise_for_status()
            total = int(resp.headers.get('content-length', 0))
            self.emitter.emit_log(f"[SYSTEM] Downloading: {total // 1024 // 1024} MB")

            downloaded = 0
            with archive.open('wb') as f:
                async for chunk in resp.aiter_bytes(self.CHUNK_SIZE):
                    f.write(chunk)
                    downloaded += len(chunk)
                    if total > 0:
                        self.emitter.emit_status(DownloadProgressEvent(downloaded * 100 // total))

    def _extract(self, archive: pathlib.Path, extension: str) -> pathlib.Path:
        extract_path = self.target_dir / Param.BIN_FOLDER_NAME
        temp_dir = self.target_dir / 'temp_extract'

        for _ in (extract_path, temp_dir):
            if _.exists():
                shutil.rmtree(_)
        temp_dir.mkdir(parents=True)

        if extension == '.zip':
            self.emitter.emit_log('[SYSTEM] Decompressing ZIP archive...')
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(temp_dir)
        else:
            self.emitter.emit_log('[SYSTEM] Decompressing TAR.GZ archive...')
            with tarfile.open(archive, 'r:gz') as tf:
                tf.extractall(temp_dir, filter='data')

        # release archives usually hold a single root folder
        entries = list(temp_dir.iterdir())
        if len(entries) == 1 and entries[0].is_dir():
            shutil.move(str(entries[0]), str(extract_path))
            shutil.rmtree(temp_dir)
        else:
            shutil.move(str(temp_dir), str(extract_path))

        return extract_path

    async def download(self) -> pathlib.Path:
        os_tag, arch_tag, extension = platform_asset()

        self.emitter.emit_log(f"[SYSTEM] Detecting platform: {os_tag} ({arch_tag})")
        self.emitter.emit_status(DownloadingEvent(f"Fetching latest {arch_tag} release..."))

        client = self.client or httpx.AsyncClient(headers={'User-Agent': Param.USER_AGENT}, timeout=30)
        archive = self.target_dir / f"scrcpy_temp{extension}"

        try:
            url, filename = await self._find_asset(client, arch_tag, extension)
            self.emitter.emit_log(f"[SYSTEM] Found asset: {filename}")
            await self._fetch(client, url, archive)
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download scrcpy: {e}") from e
        finally:
            if self.client is None:
                await client.aclose()

        self.emitter.emit_log('[SYSTEM] Download finished. Starting extraction...')
        self.emitter.emit_status(DownloadingEvent('Extracting binaries...'))

        try:
            extract_path = self._extract(archive, extension)
        except (OSError, zipfile.BadZipFile, tarfile.TarError) as e:
            raise DownloadError(f"Failed to extract: {e}") from e
        finally:
            if archive.exists():
                archive.unlink()

        logger.success(f"scrcpy unpacked to {extract_path}")
        self.emitter.emit_status(DownloadCompleteEvent(str(extract_path)))
        return extract_path
