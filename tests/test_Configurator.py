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
"""Unit tests for the environment configuration of release trees."""
import typing

import pytest

import libjailbuilder.Configurator
import libjailbuilder.errors
import libjailbuilder.RCConf


@pytest.fixture
def root_dir(tmp_path: typing.Any) -> typing.Any:
    root = tmp_path / "root"
    (root / "etc").mkdir(parents=True)
    return root


@pytest.fixture
def configurator(
    root_dir: typing.Any,
    host_files: typing.Dict[str, str],
    logger: 'libjailbuilder.Logger.Logger'
) -> 'libjailbuilder.Configurator.EnvironmentConfigurator':
    return libjailbuilder.Configurator.EnvironmentConfigurator(
        root_dir=str(root_dir),
        host_localtime=host_files["localtime"],
        host_resolv_conf=host_files["resolv_conf"],
        logger=logger
    )


class TestEnvironmentConfigurator(object):

    def test_localtime_is_copied_from_the_host(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        root_dir: typing.Any,
        host_files: typing.Dict[str, str]
    ) -> None:
        configurator.set_localtime()
        with open(host_files["localtime"], "rb") as f:
            assert (root_dir / "etc" / "localtime").read_bytes() == f.read()

    def test_nameservers_are_written_in_order(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        root_dir: typing.Any
    ) -> None:
        resolv_conf = root_dir / "etc" / "resolv.conf"
        resolv_conf.write_text("nameserver 10.0.0.1\n")

        configurator.set_resolv_conf(["1.1.1.1", "8.8.8.8"])

        assert resolv_conf.read_text() == \
            "nameserver 1.1.1.1\nnameserver 8.8.8.8\n"

    @pytest.mark.parametrize("nameservers", [None, []])
    def test_host_resolv_conf_is_copied_without_nameservers(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        root_dir: typing.Any,
        host_files: typing.Dict[str, str],
        nameservers: typing.Optional[typing.List[str]]
    ) -> None:
        configurator.set_resolv_conf(nameservers)
        with open(host_files["resolv_conf"], "rb") as f:
            expected = f.read()
        assert (root_dir / "etc" / "resolv.conf").read_bytes() == expected

    def test_apply_configures_timezone_and_resolver(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        root_dir: typing.Any
    ) -> None:
        events = list(configurator.apply(
            release_name="12.0-RELEASE",
            nameservers=["192.0.2.1"]
        ))

        assert (root_dir / "etc" / "localtime").exists()
        assert (root_dir / "etc" / "resolv.conf").read_text() == \
            "nameserver 192.0.2.1\n"
        assert events[-1].type == "BaseSystemConfiguration"
        assert events[-1].done is True

    def test_missing_host_files_raise_configuration_errors(
        self,
        root_dir: typing.Any,
        tmp_path: typing.Any,
        logger: 'libjailbuilder.Logger.Logger'
    ) -> None:
        configurator = libjailbuilder.Configurator.EnvironmentConfigurator(
            root_dir=str(root_dir),
            host_localtime=str(tmp_path / "missing"),
            logger=logger
        )
        generator = configurator.apply(release_name="12.0-RELEASE")
        with pytest.raises(libjailbuilder.errors.ConfigurationError):
            list(generator)

    def test_hostname_is_declared_exactly_once(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        tmp_path: typing.Any
    ) -> None:
        jail_dir = tmp_path / "web1"
        (jail_dir / "etc").mkdir(parents=True)
        rc_conf = jail_dir / "etc" / "rc.conf"
        rc_conf.write_text(
            "# managed by jailbuilder\n"
            "hostname=\"base\"\n"
            "sshd_enable=\"YES\"\n"
            "hostname=\"old\"\n"
        )

        configurator.set_hostname(jail_name="web1", jail_dir=str(jail_dir))

        lines = rc_conf.read_text().splitlines()
        assert lines == [
            "# managed by jailbuilder",
            "hostname=\"web1\"",
            "sshd_enable=\"YES\""
        ]

    def test_hostname_keeps_other_lines_byte_for_byte(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        tmp_path: typing.Any
    ) -> None:
        jail_dir = tmp_path / "web1"
        (jail_dir / "etc").mkdir(parents=True)
        rc_conf = jail_dir / "etc" / "rc.conf"
        foreign_lines = (
            "ifconfig_em0=\"DHCP\" # primary nic\n"
            "sshd_flags=\"-o \\\"X=1\\\"\"\n"
            "  # indented comment\n"
            "sendmail_enable=NONE\n"
        )
        rc_conf.write_text(foreign_lines)

        configurator.set_hostname(jail_name="web1", jail_dir=str(jail_dir))

        assert rc_conf.read_text() == foreign_lines + "hostname=\"web1\"\n"

        configurator.set_hostname(jail_name="web2", jail_dir=str(jail_dir))

        assert rc_conf.read_text() == foreign_lines + "hostname=\"web2\"\n"

    def test_hostname_creates_a_missing_rc_conf(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        tmp_path: typing.Any
    ) -> None:
        jail_dir = tmp_path / "db1"
        (jail_dir / "etc").mkdir(parents=True)

        configurator.set_hostname(jail_name="db1", jail_dir=str(jail_dir))

        rc_conf = jail_dir / "etc" / "rc.conf"
        assert rc_conf.read_text() == "hostname=\"db1\"\n"

    def test_hostname_requires_the_jail_root(
        self,
        configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator',
        tmp_path: typing.Any
    ) -> None:
        with pytest.raises(libjailbuilder.errors.ConfigurationError):
            configurator.set_hostname(
                jail_name="web1",
                jail_dir=str(tmp_path / "missing")
            )


class TestRCConfFile(object):

    def test_reads_values_and_keeps_comments(
        self,
        tmp_path: typing.Any
    ) -> None:
        path = tmp_path / "rc.conf"
        path.write_text("# comment\nsshd_enable=\"YES\"\nifconfig_em0=DHCP\n")
        rc_conf = libjailbuilder.RCConf.RCConfFile(path=str(path))

        assert rc_conf["sshd_enable"] == "YES"
        assert rc_conf["ifconfig_em0"] == "DHCP"
        assert rc_conf.changed is False
        assert rc_conf.save() is False

        rc_conf["sendmail_enable"] = "NONE"
        assert rc_conf.save() is True
        assert path.read_text() == (
            "# comment\n"
            "sshd_enable=\"YES\"\n"
            "ifconfig_em0=DHCP\n"
            "sendmail_enable=\"NONE\"\n"
        )

    def test_deleted_keys_are_removed(self, tmp_path: typing.Any) -> None:
        path = tmp_path / "rc.conf"
        path.write_text("sshd_enable=\"YES\"\nhostname=\"old\"\n")
        rc_conf = libjailbuilder.RCConf.RCConfFile(path=str(path))

        del rc_conf["hostname"]
        rc_conf.save()

        assert path.read_text() == "sshd_enable=\"YES\"\n"
