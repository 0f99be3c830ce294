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
"""Abstraction of a jails /etc/rc.conf file."""
import os.path
import typing

import libjailbuilder.errors

# MyPy
import libjailbuilder.Logger


def _line_key(line: str) -> typing.Optional[str]:
    """Return the key a raw rc.conf line declares, if any."""
    stripped = line.strip()
    if (stripped == "") or stripped.startswith("#") or ("=" not in stripped):
        return None
    return stripped.split("=", 1)[0].strip()


def _to_string(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "YES" if (value is True) else "NO"
    if isinstance(value, list):
        # repeated declarations, the last one wins
        return _to_string(value[-1])
    return str(value)


class RCConfFile(dict):
    """
    Key/value view of an rc.conf file parsed with UCL.

    Lines of keys that were not modified are written back untouched. A
    modified key is declared exactly once, at the position of its first
    declaration, or appended to the file.
    """

    path: str
    logger: typing.Optional['libjailbuilder.Logger.Logger']
    _lines: typing.List[str]
    _changed_keys: typing.Set[str]
    _duplicate_keys: typing.Set[str]

    def __init__(
        self,
        path: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        dict.__init__(self, {})
        self.path = path
        self.logger = logger
        self._lines = []
        self._changed_keys = set()
        self._duplicate_keys = set()
        self._read_file()

    @property
    def changed(self) -> bool:
        """Return true when the data was changed since reading the file."""
        return (len(self._changed_keys) > 0)

    def _read_file(self) -> None:
        if os.path.isfile(self.path) is False:
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Could not read {self.path}: {e}",
                logger=self.logger
            )

        import ucl
        try:
            data = dict(ucl.load(content))
        except ValueError as e:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Could not parse {self.path}: {e}",
                logger=self.logger
            )

        for key, value in data.items():
            dict.__setitem__(self, key, _to_string(value))

        self._lines = content.splitlines(keepends=True)
        declared_keys: typing.Set[str] = set()
        for line in self._lines:
            key = _line_key(line)
            if key is None:
                continue
            if key in declared_keys:
                self._duplicate_keys.add(key)
            declared_keys.add(key)

        if self.logger is not None:
            self.logger.spam(f"rc.conf was read from {self.path}")

    def __setitem__(self, key: str, value: str) -> None:
        """Set a value in the config file."""
        value = str(value)
        try:
            if (dict.__getitem__(self, key) == value) and \
                    (key not in self._duplicate_keys):
                return
        except KeyError:
            pass

        dict.__setitem__(self, key, value)
        self._changed_keys.add(key)

    def __delitem__(self, key: str) -> None:
        """Remove a key from the config file."""
        dict.__delitem__(self, key)
        self._changed_keys.add(key)

    def _render(self) -> str:
        output: typing.List[str] = []
        written_keys: typing.Set[str] = set()
        for line in self._lines:
            key = _line_key(line)
            if (key is None) or (key not in self._changed_keys):
                output.append(line)
                continue
            if (key in written_keys) or (key not in self.keys()):
                continue
            output.append(self._format_line(key))
            written_keys.add(key)

        for key in sorted(self._changed_keys - written_keys):
            if key not in self.keys():
                continue
            if (len(output) > 0) and (output[-1].endswith("\n") is False):
                output[-1] += "\n"
            output.append(self._format_line(key))

        return "".join(output)

    def _format_line(self, key: str) -> str:
        import ucl
        data = {key: dict.__getitem__(self, key)}
        output = ucl.dump(data, ucl.UCL_EMIT_CONFIG)
        output = output.replace(" = \"", "=\"")
        output = output.replace("\";\n", "\"\n")
        return output

    def save(self) -> bool:
        """Save the changes to the file."""
        if self.changed is False:
            if self.logger is not None:
                self.logger.debug("rc.conf was not modified - skipping write")
            return False

        output = self._render()
        try:
            with open(self.path, "w", encoding="utf-8") as rcconf:
                rcconf.write(output)
        except OSError as e:
            raise libjailbuilder.errors.ConfigurationError(
                message=f"Could not write {self.path}: {e}",
                logger=self.logger
            )

        self._lines = output.splitlines(keepends=True)
        self._changed_keys = set()
        self._duplicate_keys = set()
        if self.logger is not None:
            self.logger.verbose(f"Writing rc.conf to {self.path}")
            self.logger.spam(output.rstrip("\n"), indent=1)
        return True
