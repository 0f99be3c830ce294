# Copyright (c) 2017-2019, Stefan Grönke
# Copyright (c) 2014-2018, iocage
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted providing that the following conditions
# are met:
# 1. Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE AUTHOR ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED.  IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR ANY
# DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS
# OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION)
# HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT,
# STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING
# IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.
"""Shared fixtures of the libjailbuilder tests."""
import os
import os.path
import shutil
import typing

import pytest

import libjailbuilder.BuildOptions
import libjailbuilder.Builder
import libjailbuilder.CommandExecutor
import libjailbuilder.errors
import libjailbuilder.Logger

import release_mirror

TEST_RELEASE = "12.0-RELEASE"
TEST_DATASET = "zroot/test"


class RecordingExecutor(libjailbuilder.CommandExecutor.CommandExecutor):
    """Record commands and emulate the zfs command in memory."""

    calls: typing.List[typing.List[str]]
    datasets: typing.Set[str]
    snapshots: typing.Set[str]
    failing_commands: typing.Dict[str, int]
    clone_hook: typing.Optional[typing.Callable[[str, str], None]]

    def __init__(self) -> None:
        self.calls = []
        self.datasets = set()
        self.snapshots = set()
        self.failing_commands = {}
        self.clone_hook = None

    def combined_output(self, program: str, *args: str) -> str:
        """Run the emulated command."""
        return self._run(program, *args)

    def output(self, program: str, *args: str) -> str:
        """Run the emulated command."""
        return self._run(program, *args)

    def fail(self, command_key: str, returncode: int=1) -> None:
        """Let commands like "zfs snapshot" or "freebsd-update" fail."""
        self.failing_commands[command_key] = returncode

    def commands(self, command_key: str) -> typing.List[typing.List[str]]:
        """Return the recorded invocations of a command."""
        return [x for x in self.calls if self._command_key(x) == command_key]

    def index(self, command_key: str) -> int:
        """Return the position of the first invocation of a command."""
        for i, command in enumerate(self.calls):
            if self._command_key(command) == command_key:
                return i
        raise ValueError(command_key)

    @staticmethod
    def _command_key(command: typing.List[str]) -> str:
        if command[0] == "zfs":
            return f"zfs {command[1]}"
        if command[0] == "env":
            return command[2]
        return command[0]

    def _run(self, program: str, *args: str) -> str:
        command = [program] + list(args)
        self.calls.append(command)
        command_key = self._command_key(command)
        if command_key in self.failing_commands:
            raise libjailbuilder.errors.CommandFailure(
                returncode=self.failing_commands[command_key],
                output=f"{command_key} failed"
            )
        if program == "zfs":
            return self._zfs(*args)
        return ""

    def _zfs(self, subcommand: str, *args: str) -> str:
        if subcommand == "create":
            name = args[-1]
            if name in self.datasets:
                raise libjailbuilder.errors.CommandFailure(
                    returncode=1,
                    output=f"cannot create '{name}': dataset already exists"
                )
            parts = name.split("/")
            for i in range(1, len(parts) + 1):
                self.datasets.add("/".join(parts[:i]))
            return ""
        elif subcommand == "snapshot":
            name = args[-1]
            if name.split("@")[0] not in self.datasets:
                raise libjailbuilder.errors.CommandFailure(
                    returncode=1,
                    output=f"cannot open '{name}': dataset does not exist"
                )
            self.snapshots.add(name)
            return ""
        elif subcommand == "clone":
            snapshot_name, target = args[-2:]
            if snapshot_name not in self.snapshots:
                raise libjailbuilder.errors.CommandFailure(
                    returncode=1,
                    output=f"cannot open '{snapshot_name}': does not exist"
                )
            self.datasets.add(target)
            if self.clone_hook is not None:
                self.clone_hook(snapshot_name, target)
            return ""
        elif subcommand == "list":
            name = args[-1]
            zfs_type = args[args.index("-t") + 1]
            if zfs_type == "snapshot":
                known = self.snapshots
            else:
                known = self.datasets
            if name in known:
                return f"{name}\n"
            raise libjailbuilder.errors.CommandFailure(
                returncode=1,
                output=f"cannot open '{name}': dataset does not exist"
            )
        raise libjailbuilder.errors.CommandFailure(returncode=2)


@pytest.fixture
def logger() -> 'libjailbuilder.Logger.Logger':
    """Make the libjailbuilder Logger available to the tests."""
    return libjailbuilder.Logger.Logger()


@pytest.fixture
def executor() -> RecordingExecutor:
    """Return a CommandExecutor that records instead of running commands."""
    return RecordingExecutor()


@pytest.fixture
def options(
    tmp_path: typing.Any
) -> 'libjailbuilder.BuildOptions.BuildOptions':
    """Return valid build options rooted in a temporary directory."""
    return libjailbuilder.BuildOptions.BuildOptions(
        base_dir=str(tmp_path / "jails"),
        release=TEST_RELEASE,
        dataset=TEST_DATASET
    )


@pytest.fixture
def cache_dir(tmp_path: typing.Any) -> str:
    """Return an empty package cache directory."""
    return str(tmp_path / "cache")


@pytest.fixture
def host_files(tmp_path: typing.Any) -> typing.Dict[str, str]:
    """Create stand-ins for the hosts localtime and resolv.conf files."""
    host_etc = tmp_path / "host" / "etc"
    host_etc.mkdir(parents=True)
    localtime = host_etc / "localtime"
    localtime.write_bytes(b"TZif2\x00\x01\x02 Europe/Berlin")
    resolv_conf = host_etc / "resolv.conf"
    resolv_conf.write_bytes(b"search example.com\nnameserver 192.0.2.53\n")
    return dict(localtime=str(localtime), resolv_conf=str(resolv_conf))


@pytest.fixture(scope="session")
def mirror(
    tmp_path_factory: typing.Any
) -> typing.Iterator[release_mirror.BackgroundServer]:
    """Serve generated base system packages over HTTP."""
    mirror_dir = str(tmp_path_factory.mktemp("mirror"))
    release_mirror.write_release(mirror_dir, TEST_RELEASE)
    server = release_mirror.BackgroundServer(mirror_dir)
    yield server
    server.stop()


@pytest.fixture
def builder(
    options: 'libjailbuilder.BuildOptions.BuildOptions',
    executor: RecordingExecutor,
    mirror: release_mirror.BackgroundServer,
    cache_dir: str,
    host_files: typing.Dict[str, str],
    logger: 'libjailbuilder.Logger.Logger'
) -> 'libjailbuilder.Builder.Builder':
    """Return a Builder using the local mirror and the recording executor."""

    def clone_jail_root(snapshot_name: str, target: str) -> None:
        # the clone of the release dataset is mounted at the jails root
        jail_dir = options.jail_dir(target.split("/")[-1])
        if os.path.isdir(options.release_dir):
            shutil.copytree(options.release_dir, jail_dir)
        else:
            os.makedirs(os.path.join(jail_dir, "etc"))

    executor.clone_hook = clone_jail_root
    return libjailbuilder.Builder.Builder(
        options,
        executor=executor,
        mirror_url=mirror.url,
        cache_dir=cache_dir,
        host_localtime=host_files["localtime"],
        host_resolv_conf=host_files["resolv_conf"],
        logger=logger
    )
