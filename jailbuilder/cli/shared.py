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
"""Options and helpers shared by jailbuilder commands."""
import os
import typing

import click

import libjailbuilder.Builder
import libjailbuilder.Config
import libjailbuilder.errors

# MyPy
import libjailbuilder.Logger

_BUILD_OPTIONS = [
    click.option(
        "--config", "-c",
        type=click.Path(dir_okay=False),
        envvar="JAILBUILDER_CONFIG",
        help="JSON file with the build options."
    ),
    click.option(
        "--base-dir", "-b",
        envvar="JAILBUILDER_BASE_DIR",
        help="Directory of the release trees and jail roots."
    ),
    click.option(
        "--release", "-r",
        envvar="JAILBUILDER_RELEASE",
        help="The FreeBSD release, for example 12.0-RELEASE."
    ),
    click.option(
        "--dataset", "-d",
        envvar="JAILBUILDER_DATASET",
        help="ZFS dataset that holds the jails datasets."
    ),
]


def build_options(function: typing.Callable) -> typing.Callable:
    """Decorate a command with the mandatory build options."""
    for option in reversed(_BUILD_OPTIONS):
        function = option(function)
    return function


def require_root(logger: 'libjailbuilder.Logger.Logger', action: str) -> None:
    """Raise MustBeRoot unless running with root privileges."""
    if os.geteuid() != 0:
        raise libjailbuilder.errors.MustBeRoot(action, logger=logger)


def get_config(
    logger: 'libjailbuilder.Logger.Logger',
    **kwargs: typing.Any
) -> 'libjailbuilder.Config.BuildConfig':
    """Merge the config file with the options given on the command line."""
    config_file = kwargs.pop("config", None)
    if config_file is None:
        config = libjailbuilder.Config.BuildConfig(logger=logger)
    else:
        config = libjailbuilder.Config.BuildConfig.from_file(
            config_file,
            logger=logger
        )
    try:
        config.set_dict(kwargs)
    except (KeyError, TypeError) as e:
        raise libjailbuilder.errors.BuildConfigError(
            config_file=str(config_file),
            reason=str(e),
            logger=logger
        )
    return config


def get_builder(
    logger: 'libjailbuilder.Logger.Logger',
    config: 'libjailbuilder.Config.BuildConfig'
) -> 'libjailbuilder.Builder.BuilderGenerator':
    """Return a Builder for the given configuration."""
    return libjailbuilder.Builder.BuilderGenerator(
        config.build_options,
        logger=logger,
        **config.builder_args
    )
