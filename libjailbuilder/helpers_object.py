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
"""Collection of jailbuilder helper functions used in objects."""
import typing

import libjailbuilder.Logger


def init_logger(
    self: typing.Any,
    logger: typing.Optional['libjailbuilder.Logger.Logger']=None
) -> 'libjailbuilder.Logger.Logger':
    """Attach or initialize a Logger object."""
    try:
        return self.logger
    except AttributeError:
        pass

    if logger is not None:
        object.__setattr__(self, 'logger', logger)
        return logger
    else:
        new_logger = libjailbuilder.Logger.Logger()
        object.__setattr__(self, 'logger', new_logger)
        return new_logger


def init_executor(
    self: typing.Any,
    executor: typing.Optional[
        'libjailbuilder.CommandExecutor.CommandExecutor'
    ]=None
) -> 'libjailbuilder.CommandExecutor.CommandExecutor':
    """Attach or initialize a CommandExecutor object."""
    try:
        return self.executor
    except AttributeError:
        pass

    import libjailbuilder.CommandExecutor
    CommandExecutor = libjailbuilder.CommandExecutor.CommandExecutor
    if (executor is not None) and isinstance(executor, CommandExecutor):
        object.__setattr__(self, 'executor', executor)
    else:
        _module = libjailbuilder.CommandExecutor
        new_executor = _module.SubprocessCommandExecutor(logger=self.logger)
        object.__setattr__(self, 'executor', new_executor)

    return object.__getattribute__(self, 'executor')


def init_zfs(
    self: typing.Any,
    zfs: typing.Optional['libjailbuilder.ZFS.ZFS']=None
) -> 'libjailbuilder.ZFS.ZFS':
    """Attach or initialize a ZFS object."""
    try:
        return self.zfs
    except AttributeError:
        pass

    import libjailbuilder.ZFS
    if (zfs is not None) and isinstance(zfs, libjailbuilder.ZFS.ZFS):
        object.__setattr__(self, 'zfs', zfs)
    else:
        new_zfs = libjailbuilder.ZFS.ZFS(
            executor=self.executor,
            logger=self.logger
        )
        object.__setattr__(self, 'zfs', new_zfs)

    return object.__getattribute__(self, 'zfs')
