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
"""Host equivalent timezone, resolver and hostname configuration."""
import os.path
import shutil
import typing

import libjailbuilder.errors
import libjailbuilder.events
import libjailbuilder.helpers_object
import libjailbuilder.RCConf

# MyPy
import libjailbuilder.Logger


class EnvironmentConfigurator:
    """
    Configure a base system tree like the host.

    The timezone and the resolver configuration of a release tree are
    derived from the host. Jails get their hostname stamped into their
    rc.conf file after they were cloned.
    """

    host_localtime: str = "/etc/localtime"
    host_resolv_conf: str = "/etc/resolv.conf"

    root_dir: str
    logger: 'libjailbuilder.Logger.Logger'

    def __init__(
        self,
        root_dir: str,
        host_localtime: typing.Optional[str]=None,
        host_resolv_conf: typing.Optional[str]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        self.root_dir = root_dir
        if host_localtime is not None:
            self.host_localtime = host_localtime
        if host_resolv_conf is not None:
            self.host_resolv_conf = host_resolv_conf

    @property
    def localtime_path(self) -> str:
        """Return the path of the trees localtime file."""
        return os.path.join(self.root_dir, "etc/localtime")

    @property
    def resolv_conf_path(self) -> str:
        """Return the path of the trees resolv.conf file."""
        return os.path.join(self.root_dir, "etc/resolv.conf")

    def apply(
        self,
        release_name: str,
        nameservers: typing.Optional[typing.List[str]]=None,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        """Apply the timezone and resolver configuration to the tree."""
        events = libjailbuilder.events
        baseSystemConfigurationEvent = events.BaseSystemConfiguration(
            release_name=release_name,
            scope=event_scope
        )
        yield baseSystemConfigurationEvent.begin()
        try:
            self.set_localtime()
            self.set_resolv_conf(nameservers)
        except libjailbuilder.errors.ConfigurationError as e:
            yield baseSystemConfigurationEvent.fail(e)
            raise
        yield baseSystemConfigurationEvent.end()

    def set_localtime(self) -> None:
        """Copy the hosts localtime file into the tree."""
        self._copy_from_host(self.host_localtime, self.localtime_path)
        self.logger.verbose("localtime copied from host")

    def set_resolv_conf(
        self,
        nameservers: typing.Optional[typing.List[str]]=None
    ) -> None:
        """
        Write the resolver configuration of the tree.

        Args:

            nameservers (list): (optional)

                When a non-empty list is given, one nameserver line is
                written per entry. Otherwise the hosts resolv.conf is copied.
        """
        if (nameservers is None) or (len(nameservers) == 0):
            self._copy_from_host(self.host_resolv_conf, self.resolv_conf_path)
            self.logger.verbose("resolv.conf copied from host")
            return

        lines = map(
            lambda address: f"nameserver {address}\n",
            nameservers
        )
        try:
            with open(self.resolv_conf_path, "w", encoding="utf-8") as f:
                f.write("".join(lines))
        except OSError as e:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Could not write {self.resolv_conf_path}: {e}",
                logger=self.logger
            )
        self.logger.verbose("resolv.conf written manually")

    def set_hostname(
        self,
        jail_name: str,
        jail_dir: str
    ) -> None:
        """Declare the jails hostname exactly once in its rc.conf file."""
        rc_conf_path = os.path.join(jail_dir, "etc/rc.conf")
        if os.path.isdir(os.path.dirname(rc_conf_path)) is False:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Jail {jail_name} has no etc directory in {jail_dir}",
                logger=self.logger
            )
        rc_conf = libjailbuilder.RCConf.RCConfFile(
            path=rc_conf_path,
            logger=self.logger
        )
        rc_conf["hostname"] = jail_name
        rc_conf.save()

    def _copy_from_host(self, source: str, destination: str) -> None:
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Could not copy {source} to {destination}: {e}",
                logger=self.logger
            )
