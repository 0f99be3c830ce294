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
"""Show the state of a release build with the CLI."""
import typing

import click

import libjailbuilder.errors

from .shared import build_options, get_builder, get_config


def _yes_no(value: bool) -> str:
    return "yes" if (value is True) else "no"


@click.command(
    name="status",
    help="Show whether the dataset and snapshot of a release exist."
)
@click.pass_context
@build_options
def cli(  # noqa: T484
    ctx: click.Context,
    **kwargs: typing.Any
) -> None:
    """Print the release build status."""
    logger = ctx.parent.logger  # type: ignore

    try:
        config = get_config(logger, **kwargs)
        builder = get_builder(logger, config)
        status = builder.status()
    except libjailbuilder.errors.JailBuilderException:
        exit(1)

    options = builder.options
    logger.screen(f"release:  {options.release}")
    logger.screen(
        f"dataset:  {options.release_dataset_name} "
        f"({_yes_no(status.dataset_exists)})"
    )
    logger.screen(
        f"snapshot: {options.snapshot_name} "
        f"({_yes_no(status.snapshot_exists)})"
    )
    exit(0)
