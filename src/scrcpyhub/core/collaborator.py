# -*- coding: utf-8 -*-
"""
    Collaborator
    ~~~~~~~~~~~~~~~~~~
    adb / scrcpy 可执行文件调用

    所有调用均接受 path 参数，指定 adb/scrcpy 所在目录

    Log:
        2026-10-02 0.4.0 Me2sY  push/install 改用 adbutils

        2026-09-27 0.3.0 Me2sY  新增 kill_server

        2026-09-17 0.1.0 Me2sY  创建
"""

__author__ = 'Me2sY'
__version__ = '0.4.0'

__all__ = [
    'DeviceListResult', 'ConnectionAttempt', 'OptionsOutput',
    'FileResult', 'CommandOutput', 'BinaryStatus',
    'resolve_binary', 'split_command',
    'DeviceCollaborator', 'AdbScrcpyCollaborator'
]

from abc import ABCMeta, abstractmethod
import asyncio
import pathlib
import shlex
import sys
from typing import Dict, List, NamedTuple

from adbutils import AdbClient, AdbError
from loguru import logger

from scrcpyhub.core.args_cls import SessionConfig
from scrcpyhub.core.downloader import ScrcpyDownloader
from scrcpyhub.core.errors import CollaboratorError
from scrcpyhub.core.events import EventSource, SessionStatus
from scrcpyhub.utils import Param, videos_path


class DeviceListResult(NamedTuple):
    devices: List[str]
    error: str | None = None


class ConnectionAttempt(NamedTuple):
    success: bool
    message: str


class OptionsOutput(NamedTuple):
    success: bool
    output: str


class FileResult(NamedTuple):
    success: bool
    message: str


class CommandOutput(NamedTuple):
    success: bool
    binary: str
    stdout: str = ''
    stderr: str = ''


class BinaryStatus(NamedTuple):
    found: bool
    message: str


class _ProcessResult(NamedTuple):
    returncode: int
    stdout: str
    stderr: str


def resolve_binary(binary_name: str, folder: str | None = None) -> str:
    """
        查找可执行文件
        指定目录 > ./scrcpy-bin > 解释器所在目录/scrcpy-bin > PATH
    :param binary_name:
    :param folder:
    :return:
    """
    filename = f"{binary_name}.exe" if sys.platform == 'win32' else binary_name

    candidates = []
    if folder:
        candidates.append(pathlib.Path(folder) / filename)
    candidates.append(pathlib.Path.cwd() / Param.BIN_FOLDER_NAME / filename)
    candidates.append(pathlib.Path(sys.executable).parent / Param.BIN_FOLDER_NAME / filename)

    for _ in candidates:
        if _.exists():
            return str(_)

    return binary_name


def split_command(command: str) -> List[str]:
    """
        shell 风格拆分，引号未闭合时按空白拆分
    :param command:
    :return:
    """
    try:
        return shlex.split(command)
    except ValueError:
        return command.split()


class DeviceCollaborator(metaclass=ABCMeta):
    """
        External device-control contract

        status_events: SessionStatus / Download* events
        log_events: free text lines
    """

    def __init__(self):
        self.status_events = EventSource()
        self.log_events = EventSource()

    def emit_log(self, line: str):
        self.log_events.fire(line)

    def emit_status(self, event):
        self.status_events.fire(event)

    @abstractmethod
    async def list_devices(self, path: str | None = None) -> DeviceListResult:
        raise NotImplementedError

    @abstractmethod
    async def connect(self, endpoint: str, path: str | None = None) -> ConnectionAttempt:
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self, endpoint: str, path: str | None = None) -> None:
        """
            best-effort, result ignored
        """
        raise NotImplementedError

    @abstractmethod
    async def pair(self, endpoint: str, code: str, path: str | None = None) -> ConnectionAttempt:
        raise NotImplementedError

    @abstractmethod
    async def list_options(self, device: str, arg: str, path: str | None = None) -> OptionsOutput:
        raise NotImplementedError

    @abstractmethod
    async def start_session(self, config: SessionConfig) -> None:
        """
            结果通过 status_events 异步返回
        """
        raise NotImplementedError

    @abstractmethod
    async def stop_session(self, device: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def push_file(self, device: str, file_path: str, path: str | None = None) -> FileResult:
        raise NotImplementedError

    @abstractmethod
    async def install_package(self, device: str, file_path: str, path: str | None = None) -> FileResult:
        raise NotImplementedError

    @abstractmethod
    async def run_command(self, device: str | None, command: str, path: str | None = None) -> CommandOutput:
        raise NotImplementedError

    @abstractmethod
    async def check_binary(self, path: str | None = None) -> BinaryStatus:
        raise NotImplementedError

    @abstractmethod
    async def download_binary(self) -> None:
        """
            进度通过 status_events 返回
        """
        raise NotImplementedError

    @abstractmethod
    async def kill_server(self, path: str | None = None) -> None:
        raise NotImplementedError


class AdbScrcpyCollaborator(DeviceCollaborator):
    """
        asyncio subprocess implementation
    """

    CONNECT_TIMEOUT = 5
    STOP_GRACE = 0.5
    GLOBAL_ADB_COMMANDS = ('devices', 'connect', 'pair')

    def __init__(self, adb_host: str = '127.0.0.1', adb_port: int = 5037):
        super().__init__()
        self.adb_host = adb_host
        self.adb_port = adb_port
        self.processes: Dict[str, asyncio.subprocess.Process] = {}
        self._tasks = set()

    def __repr__(self):
        return f"AdbScrcpyCollaborator > {len(self.processes)} sessions"

    async def _spawn(self, exe: str, *args: str) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                exe, *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CollaboratorError(f"Failed to start {exe}: {e}") from e

    async def _run(self, exe: str, *args: str, timeout: float | None = None) -> _ProcessResult:
        proc = await self._spawn(exe, *args)
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise

        return _ProcessResult(
            proc.returncode,
            stdout.decode('utf-8', errors='replace'),
            stderr.decode('utf-8', errors='replace'),
        )

    def _spawn_task(self, coro):
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _emit_outputs(self, out_text: str, err_text: str):
        if out_text:
            self.emit_log(f"[ADB] {out_text}")
        if err_text:
            self.emit_log(f"[ADB ERROR] {err_text}")

    async def list_devices(self, path: str | None = None) -> DeviceListResult:
        r = await self._run(resolve_binary(Param.ADB, path), 'devices')
        if r.returncode != 0:
            return DeviceListResult([], 'ADB returned error')

        devices = []
        # 首行为 List of devices attached
        for line in r.stdout.splitlines()[1:]:
            if '\tdevice' not in line:
                continue
            serial = line.split('\t')[0].strip()
            if serial and '._tcp' not in serial and '._udp' not in serial:
                devices.append(serial)

        return DeviceListResult(devices)

    async def connect(self, endpoint: str, path: str | None = None) -> ConnectionAttempt:
        self.emit_log(f"[SYSTEM] Attempting wireless connection to {endpoint}...")
        try:
            r = await self._run(resolve_binary(Param.ADB, path), 'connect', endpoint, timeout=self.CONNECT_TIMEOUT)
        except asyncio.TimeoutError:
            self.emit_log(f"[SYSTEM] Connection to {endpoint} timed out after {self.CONNECT_TIMEOUT}s.")
            return ConnectionAttempt(False, 'connection timed out')

        out_text, err_text = r.stdout.strip(), r.stderr.strip()
        self._emit_outputs(out_text, err_text)

        # adb connect exits 0 on most failures, check the text as well
        success = r.returncode == 0 and 'cannot connect' not in out_text and 'failed' not in out_text
        return ConnectionAttempt(success, out_text or err_text)

    async def disconnect(self, endpoint: str, path: str | None = None) -> None:
        try:
            r = await self._run(resolve_binary(Param.ADB, path), 'disconnect', endpoint)
        except CollaboratorError as e:
            logger.warning(f"Disconnect {endpoint} failed => {e}")
            return
        logger.info(f"Disconnect {endpoint} => {r.stdout.strip() or r.stderr.strip()}")

    async def pair(self, endpoint: str, code: str, path: str | None = None) -> ConnectionAttempt:
        self.emit_log(f"[SYSTEM] Pairing with {endpoint}...")
        r = await self._run(resolve_binary(Param.ADB, path), 'pair', endpoint, code)

        out_text, err_text = r.stdout.strip(), r.stderr.strip()
        self._emit_outputs(out_text, err_text)

        success = r.returncode == 0 and ('Successfully paired' in out_text or 'Successfully paired' in err_text)
        return ConnectionAttempt(success, out_text or err_text)

    async def list_options(self, device: str, arg: str, path: str | None = None) -> OptionsOutput:
        r = await self._run(resolve_binary(Param.SCRCPY, path), '-s', device, arg)
        # scrcpy prints lists to stderr
        return OptionsOutput(r.returncode == 0, r.stdout + r.stderr)

    async def _pipe_lines(self, stream: asyncio.StreamReader):
        while True:
            line = await stream.readline()
            if not line:
                break
            self.emit_log(line.decode('utf-8', errors='replace').rstrip('\r\n'))

    async def _monitor(self, device: str, proc: asyncio.subprocess.Process):
        returncode = await proc.wait()
        if self.processes.get(device) is proc:
            del self.processes[device]
            self.emit_log(f"[SYSTEM] Scrcpy process exited with status: {returncode}")
        self.emit_status(SessionStatus(device, False))

    async def start_session(self, config: SessionConfig) -> None:
        if config.device in self.processes:
            raise CollaboratorError(f"Session for {config.device} already running")

        args = config.to_args(str(videos_path()))

        for line in config.describe():
            self.emit_log(line)
        self.emit_log(f"> scrcpy {' '.join(args)}")

        proc = await self._spawn(resolve_binary(Param.SCRCPY, config.scrcpy_path), *args)

        self._spawn_task(self._pipe_lines(proc.stdout))
        self._spawn_task(self._pipe_lines(proc.stderr))

        self.processes[config.device] = proc
        self.emit_status(SessionStatus(config.device, True))

        self._spawn_task(self._monitor(config.device, proc))

    async def stop_session(self, device: str) -> None:
        proc = self.processes.pop(device, None)
        if proc is None:
            logger.warning(f"No session for {device}")
            return

        if proc.returncode is None:
            proc.terminate()
            try:
                await asyncio.wait_for(proc.wait(), self.STOP_GRACE)
            except asyncio.TimeoutError:
                proc.kill()

    async def _ensure_server(self, path: str | None) -> AdbClient:
        r = await self._run(resolve_binary(Param.ADB, path), 'start-server')
        if r.returncode != 0:
            raise CollaboratorError(f"adb start-server failed: {r.stderr.strip()}")
        return AdbClient(host=self.adb_host, port=self.adb_port)

    async def push_file(self, device: str, file_path: str, path: str | None = None) -> FileResult:
        client = await self._ensure_server(path)
        dest = f"{Param.PATH_DEV_PUSH}{pathlib.Path(file_path).name}"
        try:
            await asyncio.to_thread(client.device(device).sync.push, file_path, dest)
        except (AdbError, OSError) as e:
            logger.warning(f"Push {file_path} to {device} failed => {e}")
            return FileResult(False, 'Transfer failed')

        logger.info(f"pushed {file_path} to {device}:{dest}")
        return FileResult(True, 'File pushed to Downloads')

    async def install_package(self, device: str, file_path: str, path: str | None = None) -> FileResult:
        client = await self._ensure_server(path)
        try:
            await asyncio.to_thread(client.device(device).install, file_path, nolaunch=True, silent=True)
        except (AdbError, OSError) as e:
            logger.warning(f"Install {file_path} on {device} failed => {e}")
            return FileResult(False, str(e))

        return FileResult(True, f"Success: {pathlib.Path(file_path).name} installed")

    async def run_command(self, device: str | None, command: str, path: str | None = None) -> CommandOutput:
        parts = split_command(command)
        if not parts:
            return CommandOutput(False, Param.ADB, stderr='No command provided')

        first = parts[0].lower()
        binary = Param.SCRCPY if first == Param.SCRCPY else Param.ADB
        if first in (Param.ADB, Param.SCRCPY):
            parts = parts[1:]

        args = []
        if device and '-s' not in parts and '--serial' not in parts:
            is_global_adb = binary == Param.ADB and parts and parts[0] in self.GLOBAL_ADB_COMMANDS
            if not is_global_adb:
                args += ['-s', device]
        args += parts

        r = await self._run(resolve_binary(binary, path), *args)
        return CommandOutput(r.returncode == 0, binary, r.stdout, r.stderr)

    async def check_binary(self, path: str | None = None) -> BinaryStatus:
        try:
            r = await self._run(resolve_binary(Param.SCRCPY, path), '--version')
        except CollaboratorError:
            return BinaryStatus(False, 'Scrcpy not found')

        if r.returncode == 0:
            return BinaryStatus(True, 'Scrcpy Ready')
        return BinaryStatus(False, 'Failed to start scrcpy (Exit Code != 0)')

    async def download_binary(self) -> None:
        await ScrcpyDownloader(self).download()

    async def kill_server(self, path: str | None = None) -> None:
        self.emit_log('[SYSTEM] Terminating ADB stack...')

        try:
            await self._run(resolve_binary(Param.ADB, path), 'kill-server')
        except CollaboratorError as e:
            logger.warning(e)

        if sys.platform == 'win32':
            cmd = ('taskkill', '/F', '/IM', 'adb.exe', '/T')
        else:
            cmd = ('pkill', 'adb')

        try:
            await self._run(*cmd)
        except CollaboratorError as e:
            logger.warning(e)

        self.emit_log('[SYSTEM] ADB Stack Terminated.')
