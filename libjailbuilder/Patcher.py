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
"""Patching of an extracted base system with freebsd-update."""
import typing

import libjailbuilder.errors
import libjailbuilder.helpers_object

# MyPy
import libjailbuilder.CommandExecutor
import libjailbuilder.Logger


class ReleasePatcher:
    """Bring an extracted release tree to the latest patch level."""

    update_name: str = "freebsd-update"

    release: str
    root_dir: str
    executor: 'libjailbuilder.CommandExecutor.CommandExecutor'
    logger: 'libjailbuilder.Logger.Logger'

    def __init__(
        self,
        release: str,
        root_dir: str,
        executor: typing.Optional[
            'libjailbuilder.CommandExecutor.CommandExecutor'
        ]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        self.executor = libjailbuilder.helpers_object.init_executor(
            self,
            executor
        )
        self.release = release
        self.root_dir = root_dir

    @property
    def _update_command(self) -> typing.List[str]:
        return [
            "env",
            f"UNAME_r={self.release}",
            self.update_name,
            "-b",
            self.root_dir,
            "--not-running-from-cron",
            "fetch",
            "install"
        ]

    def patch(self) -> int:
        """
        Fetch and install patches in one blocking invocation.

        Returns the exit status of the update tool. A non-zero exit raises
        libjailbuilder.errors.PatchError carrying that status.
        """
        self.logger.verbose(
            f"Patching release {self.release} in {self.root_dir}"
        )
        command = self._update_command
        try:
            output = self.executor.combined_output(command[0], *command[1:])
        except libjailbuilder.errors.CommandFailure as e:
            if e.output:
                self.logger.verbose(e.output)
            raise libjailbuilder.errors.PatchError(
                release_name=self.release,
                returncode=e.returncode,
                logger=self.logger
            )

        if output:
            self.logger.verbose(output)
        self.logger.debug(f"Release {self.release} patched")
        return 0
