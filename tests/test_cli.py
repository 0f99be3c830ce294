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
"""Unit tests for the jailbuilder command line interface."""
import os
import typing

import click.testing
import pytest

import libjailbuilder
import libjailbuilder.Builder

import jailbuilder.cli
import jailbuilder.cli.create
import jailbuilder.cli.init
import jailbuilder.cli.status

import release_mirror


@pytest.fixture
def runner() -> click.testing.CliRunner:
    return click.testing.CliRunner()


@pytest.fixture
def cli_env(
    options: 'libjailbuilder.BuildOptions.BuildOptions'
) -> typing.Dict[str, str]:
    return dict(
        JAILBUILDER_BASE_DIR=options.base_dir,
        JAILBUILDER_RELEASE=options.release,
        JAILBUILDER_DATASET=options.dataset
    )


@pytest.fixture
def recording_builder(
    executor: 'conftest.RecordingExecutor',
    mirror: release_mirror.BackgroundServer,
    cache_dir: str,
    host_files: typing.Dict[str, str],
    monkeypatch: typing.Any
) -> 'conftest.RecordingExecutor':
    """Let the commands build with the recording executor."""

    def get_builder(
        logger: 'libjailbuilder.Logger.Logger',
        config: 'libjailbuilder.Config.BuildConfig'
    ) -> 'libjailbuilder.Builder.BuilderGenerator':
        return libjailbuilder.Builder.BuilderGenerator(
            config.build_options,
            executor=executor,
            mirror_url=mirror.url,
            cache_dir=cache_dir,
            host_localtime=host_files["localtime"],
            host_resolv_conf=host_files["resolv_conf"],
            logger=logger
        )

    for command in (
        jailbuilder.cli.create,
        jailbuilder.cli.init,
        jailbuilder.cli.status
    ):
        monkeypatch.setattr(command, "get_builder", get_builder)
    monkeypatch.setattr(os, "geteuid", lambda: 0)
    return executor


class TestCLI(object):

    def test_version(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(jailbuilder.cli.cli, ["--version"])
        assert result.exit_code == 0
        assert libjailbuilder.VERSION.split()[0] in result.output

    def test_lists_commands(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(jailbuilder.cli.cli, ["--help"])
        assert result.exit_code == 0
        for command in ["create", "init", "status"]:
            assert command in result.output
        assert "shared" not in result.output

    def test_init_requires_root(
        self,
        runner: click.testing.CliRunner,
        cli_env: typing.Dict[str, str],
        monkeypatch: typing.Any
    ) -> None:
        monkeypatch.setattr(os, "geteuid", lambda: 1000)
        result = runner.invoke(jailbuilder.cli.cli, ["init"], env=cli_env)
        assert result.exit_code == 1
        assert "Must be root" in result.output

    def test_init_reports_missing_options(
        self,
        runner: click.testing.CliRunner,
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        result = runner.invoke(
            jailbuilder.cli.cli,
            ["init", "--base-dir", "/jails", "--release", "12.0-RELEASE"]
        )
        assert result.exit_code == 1
        assert "Missing build option: dataset" in result.output
        assert recording_builder.calls == []

    def test_init_builds_the_base_system(
        self,
        runner: click.testing.CliRunner,
        cli_env: typing.Dict[str, str],
        options: 'libjailbuilder.BuildOptions.BuildOptions',
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        result = runner.invoke(
            jailbuilder.cli.cli,
            ["init", "-n", "192.0.2.1", "-n", "192.0.2.2"],
            env=cli_env
        )
        assert result.exit_code == 0, result.output
        assert "BaseSystemBuild@12.0-RELEASE" in result.output
        assert options.snapshot_name in recording_builder.snapshots

        path = os.path.join(options.release_dir, "etc/resolv.conf")
        with open(path, "r", encoding="utf-8") as f:
            assert f.read() == "nameserver 192.0.2.1\nnameserver 192.0.2.2\n"

    def test_create_jails(
        self,
        runner: click.testing.CliRunner,
        cli_env: typing.Dict[str, str],
        options: 'libjailbuilder.BuildOptions.BuildOptions',
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        recording_builder.snapshots.add(options.snapshot_name)
        result = runner.invoke(
            jailbuilder.cli.cli,
            ["create", "web1", "web2"],
            env=cli_env
        )
        assert result.exit_code == 0, result.output
        for name in ["web1", "web2"]:
            assert options.jail_dataset_name(name) in \
                recording_builder.datasets

    def test_create_fails_without_snapshot(
        self,
        runner: click.testing.CliRunner,
        cli_env: typing.Dict[str, str],
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        result = runner.invoke(
            jailbuilder.cli.cli,
            ["create", "web1"],
            env=cli_env
        )
        assert result.exit_code == 1
        assert "Snapshot not found" in result.output

    def test_status(
        self,
        runner: click.testing.CliRunner,
        cli_env: typing.Dict[str, str],
        options: 'libjailbuilder.BuildOptions.BuildOptions',
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        recording_builder.datasets.add(options.release_dataset_name)
        result = runner.invoke(jailbuilder.cli.cli, ["status"], env=cli_env)
        assert result.exit_code == 0, result.output
        assert f"{options.release_dataset_name} (yes)" in result.output
        assert f"{options.snapshot_name} (no)" in result.output

    def test_config_file(
        self,
        runner: click.testing.CliRunner,
        tmp_path: typing.Any,
        options: 'libjailbuilder.BuildOptions.BuildOptions',
        recording_builder: 'conftest.RecordingExecutor'
    ) -> None:
        config_file = tmp_path / "jailbuilder.json"
        config_file.write_text(
            f'{{"base_dir": "{options.base_dir}", '
            f'"release": "{options.release}", '
            f'"dataset": "{options.dataset}"}}'
        )
        result = runner.invoke(
            jailbuilder.cli.cli,
            ["status", "--config", str(config_file)]
        )
        assert result.exit_code == 0, result.output
        assert f"{options.snapshot_name} (no)" in result.output
