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
"""Unit tests for events, logging and helpers."""
import typing

import pytest

import libjailbuilder.errors
import libjailbuilder.events
import libjailbuilder.helpers
import libjailbuilder.Logger


class TestEvents(object):

    def test_events_share_a_scope(self) -> None:
        build = libjailbuilder.events.BaseSystemBuild("12.0-RELEASE")
        download = libjailbuilder.events.BaseSystemDownload(
            "12.0-RELEASE",
            scope=build.scope
        )
        assert list(build.scope) == [build, download]

        build.begin()
        download.begin()
        assert build.scope.PENDING_COUNT == 2
        assert download.parent_count == 1

        download.end()
        build.end()
        assert build.scope.PENDING_COUNT == 0
        assert build.duration is not None
        assert build.get_state_string() == "done"

    def test_finished_events_cannot_begin_again(self) -> None:
        event = libjailbuilder.events.JailClone("web1")
        event.begin()
        event.end()
        with pytest.raises(libjailbuilder.errors.EventAlreadyFinished):
            event.begin()

    def test_failed_and_skipped_states(self) -> None:
        failed = libjailbuilder.events.PackageDownload("base").begin()
        failed.fail(RuntimeError("broken"))
        assert failed.get_state_string() == "failed"

        skipped = libjailbuilder.events.PackageDownload("lib32").begin()
        skipped.skip("already downloaded")
        assert skipped.get_state_string() == "skipped"
        assert skipped.message == "already downloaded"

    def test_type_is_the_class_name(self) -> None:
        event = libjailbuilder.events.JailHostnameConfig("web1")
        assert event.type == "JailHostnameConfig"
        assert event.identifier == "web1"
        assert isinstance(event, libjailbuilder.events.JailCreate)


class TestLogger(object):

    def test_print_level_filters_entries(self, capsys: typing.Any) -> None:
        logger = libjailbuilder.Logger.Logger(print_level="warn")
        logger.error("an error")
        logger.verbose("some details")
        logger.screen("always shown")

        output = capsys.readouterr().out
        assert "an error" in output
        assert "some details" not in output
        assert "always shown" in output

    def test_invalid_log_level(self) -> None:
        with pytest.raises(libjailbuilder.errors.InvalidLogLevel):
            libjailbuilder.Logger.Logger(print_level="loud")
        with pytest.raises(libjailbuilder.errors.InvalidLogLevel):
            libjailbuilder.Logger.Logger(print_level="critical")

    def test_levels_are_colored(self, capsys: typing.Any) -> None:
        logger = libjailbuilder.Logger.Logger(print_level="spam")
        logger.error("red")
        logger.info("plain")

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["\033[1;31mred\033[0m", "plain"]

    def test_exceptions_are_logged(self, capsys: typing.Any) -> None:
        logger = libjailbuilder.Logger.Logger()
        libjailbuilder.errors.SnapshotNotFound("zroot/a@p1", logger=logger)
        assert "Snapshot not found: zroot/a@p1" in capsys.readouterr().out

    def test_only_screen_entries_can_be_redrawn(self) -> None:
        logger = libjailbuilder.Logger.Logger()
        entry = logger.error("not redrawable")
        with pytest.raises(libjailbuilder.errors.CannotRedrawLine):
            entry.edit("changed")


class TestHelpers(object):

    @pytest.mark.parametrize("name,valid", [
        ("web1", True),
        ("db-01.example", True),
        ("Base", True),
        ("", False),
        ("_web", False),
        ("web 1", False),
        ("web/1", False),
    ])
    def test_validate_name(self, name: str, valid: bool) -> None:
        assert libjailbuilder.helpers.validate_name(name) is valid

    def test_parse_list(self) -> None:
        parse_list = libjailbuilder.helpers.parse_list
        assert parse_list("1.1.1.1, 8.8.8.8") == ["1.1.1.1", "8.8.8.8"]
        assert parse_list(["192.0.2.1"]) == ["192.0.2.1"]
        assert parse_list("") == []
        assert parse_list(None) == []

    def test_parse_bool(self) -> None:
        assert libjailbuilder.helpers.parse_bool("on") is True
        assert libjailbuilder.helpers.parse_bool("NO") is False
        with pytest.raises(TypeError):
            libjailbuilder.helpers.parse_bool("/etc/passwd")

    def test_makedirs_safe_refuses_symlinks(
        self,
        tmp_path: typing.Any
    ) -> None:
        target = tmp_path / "target"
        target.mkdir()
        link = tmp_path / "link"
        link.symlink_to(target)

        with pytest.raises(libjailbuilder.errors.ConfigurationError):
            libjailbuilder.helpers.makedirs_safe(str(link / "releases"))

        libjailbuilder.helpers.makedirs_safe(str(target / "releases"))
        assert (target / "releases").is_dir()
