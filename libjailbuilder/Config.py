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
"""Builder configuration stored in a JSON file."""
import copy
import json
import typing

import libjailbuilder.BasePackage
import libjailbuilder.BuildOptions
import libjailbuilder.errors
import libjailbuilder.helpers

# MyPy
import libjailbuilder.Logger


class BuildConfig(dict):
    """
    Settings of a provisioning run.

    The mandatory options base_dir, release and dataset are turned into
    BuildOptions, everything else is passed to the Builder as keyword
    arguments.
    """

    DEFAULTS: typing.Dict[str, typing.Any] = {
        "base_dir": None,
        "release": None,
        "dataset": None,
        "nameservers": [],
        "mirror_url": libjailbuilder.BasePackage.DEFAULT_MIRROR_URL,
        "cache_dir": libjailbuilder.BasePackage.DEFAULT_CACHE_DIR,
        "verify_tls": False
    }

    logger: typing.Optional['libjailbuilder.Logger.Logger']

    def __init__(
        self,
        data: typing.Optional[typing.Dict[str, typing.Any]]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = logger
        dict.__init__(self, copy.deepcopy(self.DEFAULTS))
        if data is not None:
            self.set_dict(data)

    @classmethod
    def from_file(
        cls,
        config_file: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> 'BuildConfig':
        """Read the configuration from a JSON file."""
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                content = f.read().strip()
        except OSError as e:
            raise libjailbuilder.errors.BuildConfigError(
                config_file=config_file,
                reason=str(e),
                logger=logger
            )

        if content == "":
            return cls(logger=logger)

        try:
            data = json.loads(content)
        except json.decoder.JSONDecodeError as e:
            raise libjailbuilder.errors.BuildConfigError(
                config_file=config_file,
                reason=str(e),
                logger=logger
            )

        if isinstance(data, dict) is False:
            raise libjailbuilder.errors.BuildConfigError(
                config_file=config_file,
                reason="A JSON object is expected",
                logger=logger
            )

        try:
            return cls(data, logger=logger)
        except KeyError as e:
            raise libjailbuilder.errors.BuildConfigError(
                config_file=config_file,
                reason=f"Unknown property {e}",
                logger=logger
            )
        except TypeError as e:
            raise libjailbuilder.errors.BuildConfigError(
                config_file=config_file,
                reason=str(e),
                logger=logger
            )

    def set_dict(self, data: typing.Dict[str, typing.Any]) -> None:
        """Set all non-None values of a dict."""
        for key, value in data.items():
            if value is None:
                continue
            self[key] = value

    def __setitem__(self, key: str, value: typing.Any) -> None:
        """Set a known property and normalize its value."""
        if key not in self.DEFAULTS.keys():
            raise KeyError(key)

        if key == "nameservers":
            value = libjailbuilder.helpers.parse_list(value)
        elif key == "verify_tls":
            value = libjailbuilder.helpers.parse_bool(value)

        dict.__setitem__(self, key, value)

    @property
    def build_options(self) -> 'libjailbuilder.BuildOptions.BuildOptions':
        """Return the BuildOptions of the configuration."""
        return libjailbuilder.BuildOptions.BuildOptions(
            base_dir=self["base_dir"],
            release=self["release"],
            dataset=self["dataset"]
        )

    @property
    def builder_args(self) -> typing.Dict[str, typing.Any]:
        """Return keyword arguments for a Builder."""
        return dict(
            mirror_url=self["mirror_url"],
            cache_dir=self["cache_dir"],
            verify_tls=self["verify_tls"]
        )
