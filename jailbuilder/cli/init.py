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
"""Build the base system of a release with the CLI."""
import typing

import click

import libjailbuilder.errors

from .shared import build_options, get_builder, get_config, require_root


@click.command(
    name="init",
    help="Build the base system of a release and create the base jail."
)
@click.pass_context
@build_options
@click.option(
    "--nameserver", "-n",
    "nameservers",
    multiple=True,
    help="Nameserver written to resolv.conf (default: copy the hosts file)."
)
@click.option(
    "--mirror-url", "-u",
    envvar="JAILBUILDER_MIRROR_URL",
    help="Remote URL of the releases directory."
)
@click.option(
    "--cache-dir",
    envvar="JAILBUILDER_CACHE_DIR",
    type=click.Path(file_okay=False),
    help="Directory the base system packages are downloaded to."
)
@click.option(
    "--verify-tls/--no-verify-tls",
    default=None,
    help="Validate the certificate of HTTPS mirrors."
)
def cli(  # noqa: T484
    ctx: click.Context,
    **kwargs: typing.Any
) -> None:
    """Build the release base system."""
    logger = ctx.parent.logger  # type: ignore
    nameservers = list(kwargs.pop("nameservers"))
    if len(nameservers) > 0:
        kwargs["nameservers"] = nameservers

    try:
        require_root(logger, "build a base system")
        config = get_config(logger, **kwargs)
        builder = get_builder(logger, config)
        ctx.parent.print_events(builder.initialize(  # type: ignore
            nameservers=config["nameservers"]
        ))
    except libjailbuilder.errors.JailBuilderException:
        exit(1)

    exit(0)
