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
"""Create jails from a release snapshot with the CLI."""
import typing

import click

import libjailbuilder.errors

from .shared import build_options, get_builder, get_config, require_root


@click.command(
    name="create",
    help="Create jails by cloning the snapshot of a built release."
)
@click.pass_context
@build_options
@click.argument("names", nargs=-1, required=True)
def cli(  # noqa: T484
    ctx: click.Context,
    names: typing.Tuple[str, ...],
    **kwargs: typing.Any
) -> None:
    """Create one or more jails."""
    logger = ctx.parent.logger  # type: ignore

    try:
        require_root(logger, "create jails")
        config = get_config(logger, **kwargs)
        builder = get_builder(logger, config)
        for name in names:
            ctx.parent.print_events(builder.create_jail(name))  # type: ignore
    except libjailbuilder.errors.JailBuilderException:
        exit(1)

    exit(0)
