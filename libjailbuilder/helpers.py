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
"""Collection of jailbuilder helper functions."""
import typing
import os
import re
import subprocess  # nosec: B404

import libjailbuilder.errors
import libjailbuilder.Logger

CommandOutput = typing.Tuple[typing.Optional[str], typing.Optional[str], int]


def exec(
    command: typing.List[str],
    logger: typing.Optional['libjailbuilder.Logger.Logger']=None,
    ignore_error: bool=False,
    **subprocess_args: typing.Any
) -> CommandOutput:
    """Execute a shell command."""
    if isinstance(command, str):
        command = [command]

    command_str = " ".join(command)

    if logger is not None:
        logger.log(f"Executing: {command_str}", level="spam")

    subprocess_args["stdout"] = subprocess_args.get("stdout", subprocess.PIPE)
    subprocess_args["stderr"] = subprocess_args.get("stderr", subprocess.PIPE)
    subprocess_args["shell"] = subprocess_args.get("shell", False)

    child = subprocess.Popen(  # nosec: B603
        command,
        **subprocess_args
    )

    stdout, stderr = child.communicate()

    if stderr is not None:
        stderr = stderr.decode("UTF-8").strip()

    if (stdout is not None):
        stdout = stdout.decode("UTF-8").strip()
        if logger:
            logger.spam(_prettify_output(stdout))

    returncode = child.wait()
    if returncode != 0:

        if logger:
            log_level = "spam" if ignore_error else "warn"
            logger.log(
                f"Command exited with {returncode}: {command_str}",
                level=log_level
            )
            if stderr:
                logger.log(_prettify_output(stderr), level=log_level)

        if ignore_error is False:
            raise libjailbuilder.errors.CommandFailure(
                returncode=returncode,
                output=stderr if stderr else stdout,
                logger=logger
            )

    return stdout, stderr, returncode


def _prettify_output(output: str) -> str:
    return "\n".join(map(
        lambda line: f"    {line}",
        output.strip().splitlines()
    ))


# helper function to validate names
_validate_name = re.compile(r"[a-z0-9][a-z0-9\.\-_]{0,31}", re.I)


def validate_name(name: str) -> bool:
    """Return True if the name matches the naming convention."""
    return _validate_name.fullmatch(name) is not None


def parse_none(
    data: typing.Any,
    none_matches: typing.List[str]=["none", "-", ""]
) -> None:
    """Raise if the input does not translate to None."""
    if data is None:
        return None
    if isinstance(data, str) and (data.lower() in none_matches):
        return None
    raise TypeError("Value is not None")


def parse_list(
    data: typing.Optional[typing.Union[str, typing.List[str]]]
) -> typing.List[str]:
    """
    Transform a comma separated string into a list.

    Always returns a list of strings. This list is empty when an empty string
    is provided or the value is None. In any other case the string is split by
    comma and returned as list.
    """
    empty_list: typing.List[str] = []
    try:
        parse_none(data)
        return empty_list
    except TypeError:
        pass
    if data is None:
        return empty_list
    if isinstance(data, list):
        return data
    return [x.strip() for x in data.split(",") if x.strip() != ""]


def parse_bool(data: typing.Optional[typing.Union[str, bool]]) -> bool:
    """
    Try to parse booleans from strings.

    On success, it returns the parsed boolean on failure it raises a TypeError.

    Usage:
        >>> parse_bool("YES")
        True
        >>> parse_bool("false")
        False
        >>> parse_bool("/etc/passwd")
        Traceback (most recent call last):
          File "<stdin>", line 1, in <module>
        TypeError: Not a boolean value
    """
    if isinstance(data, bool):
        return data
    if isinstance(data, str):
        val = data.lower()
        if val in ["yes", "true", "on", "1"]:
            return True
        elif val in ["no", "false", "off", "0"]:
            return False

    raise TypeError("Value is not a boolean")


def require_no_symlink(
    path: str,
    logger: typing.Optional['libjailbuilder.Logger.Logger']=None
) -> None:
    """Raise when the path contains a symlink."""
    directories = path.split("/")
    while len(directories) > 0:
        current_directory = "/".join(directories)
        if os.path.exists(current_directory):
            if os.path.islink(current_directory):
                raise libjailbuilder.errors.ConfigurationError(
                    message=f"Path {path} contains a symbolic link",
                    logger=logger
                )
        directories.pop()


def makedirs_safe(
    target: str,
    mode: int=0o755,
    logger: typing.Optional['libjailbuilder.Logger.Logger']=None
) -> None:
    """Create a directory without following symlinks."""
    require_no_symlink(target, logger=logger)
    if logger is not None:
        logger.verbose(f"Safely creating {target} directory")
    os.makedirs(target, mode=mode, exist_ok=True)
