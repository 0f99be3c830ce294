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
"""Execution of external storage and patch commands."""
import abc
import subprocess  # nosec: B404
import typing

import libjailbuilder.errors
import libjailbuilder.helpers
import libjailbuilder.helpers_object

# MyPy
import libjailbuilder.Logger


class CommandExecutor(metaclass=abc.ABCMeta):
    """
    Capability to run external commands to completion.

    Implementations must raise libjailbuilder.errors.CommandFailure when the
    command exits with a non-zero status. Tests replace the default
    SubprocessCommandExecutor with a recording implementation.
    """

    @abc.abstractmethod
    def combined_output(self, program: str, *args: str) -> str:
        """Run the command and return stdout and stderr combined."""
        pass

    @abc.abstractmethod
    def output(self, program: str, *args: str) -> str:
        """Run the command and return its stdout."""
        pass


class SubprocessCommandExecutor(CommandExecutor):
    """Run commands on the host with subprocess."""

    logger: 'libjailbuilder.Logger.Logger'
    env: typing.Optional[typing.Dict[str, str]]

    def __init__(
        self,
        env: typing.Optional[typing.Dict[str, str]]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        self.env = env

    def combined_output(self, program: str, *args: str) -> str:
        """Run the command and return stdout and stderr combined."""
        return self._exec([program] + list(args), stderr=subprocess.STDOUT)

    def output(self, program: str, *args: str) -> str:
        """Run the command and return its stdout."""
        return self._exec([program] + list(args))

    def _exec(
        self,
        command: typing.List[str],
        **subprocess_args: typing.Any
    ) -> str:
        try:
            stdout, _, _ = libjailbuilder.helpers.exec(
                command,
                logger=self.logger,
                env=self.env,
                **subprocess_args
            )
        except OSError as e:
            # the program could not be started at all
            raise libjailbuilder.errors.CommandFailure(
                returncode=127,
                output=str(e),
                logger=self.logger
            )
        return "" if (stdout is None) else stdout
