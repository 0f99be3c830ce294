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
"""jailbuilder command line interface."""
import os
import signal
import typing

import click

import libjailbuilder.errors
import libjailbuilder.Logger

logger = libjailbuilder.Logger.Logger()

JAILBUILDER_CMD_FOLDER = os.path.abspath(os.path.dirname(__file__))

# If a utility decides to cut off the pipe, we don't care (IE: head)
signal.signal(signal.SIGPIPE, signal.SIG_DFL)


def print_events(
    generator: 'libjailbuilder.events.EventGenerator'
) -> None:
    """Print live updating lines for the events of a generator."""
    lines: typing.Dict[
        str,
        typing.Dict[str, 'libjailbuilder.Logger.LogEntry']
    ] = {}
    for event in generator:

        if event.identifier is None:
            identifier = "generic"
        else:
            identifier = event.identifier

        if event.type not in lines:
            lines[event.type] = {}

        # output fragments
        running_indicator = "+" if (event.done or event.skipped) else "-"
        name = event.type
        if event.identifier is not None:
            name += f"@{event.identifier}"

        output = f"[{running_indicator}] {name}: "

        if event.message is not None:
            output += event.message
        else:
            output += event.get_state_string(
                done="OK",
                error="FAILED",
                skipped="SKIPPED",
                pending="..."
            )

        if event.duration is not None:
            output += " [" + str(round(event.duration, 3)) + "s]"

        # new line or update of previous
        if identifier not in lines[event.type]:
            # Indent if previous task is not finished
            lines[event.type][identifier] = logger.screen(
                output,
                indent=event.parent_count
            )
        else:
            lines[event.type][identifier].edit(
                output,
                indent=event.parent_count
            )


class JailBuilderCLI(click.Group):
    """Load the cli definition of each module in the cli directory."""

    def list_commands(self, ctx: click.Context) -> typing.List[str]:
        """Return the names of all command modules."""
        rv = []

        for filename in os.listdir(JAILBUILDER_CMD_FOLDER):
            if filename.endswith('.py') is False:
                continue
            if filename.startswith("_") or (filename == "shared.py"):
                continue
            rv.append(filename[:-3])
        rv.sort()

        return rv

    def get_command(
        self,
        ctx: click.Context,
        name: str
    ) -> typing.Optional[click.Command]:
        """Import a command module and return its cli."""
        ctx.print_events = print_events  # type: ignore
        try:
            mod = __import__(f"jailbuilder.cli.{name}", None, None, ["cli"])
            return typing.cast(click.Command, mod.cli)
        except (ImportError, AttributeError):
            return None


@click.option(
    "--log-level", "-l",
    default=None,
    type=click.Choice(libjailbuilder.Logger.Logger.LOG_LEVELS),
    help="Set the verbosity of the output."
)
@click.command(cls=JailBuilderCLI)
@click.version_option(
    version=libjailbuilder.VERSION,
    prog_name="jailbuilder"
)
@click.pass_context
def cli(ctx: click.Context, log_level: typing.Optional[str]) -> None:
    """Provision jails from ZFS snapshots of a FreeBSD release."""
    logger.print_level = log_level
    ctx.logger = logger  # type: ignore
