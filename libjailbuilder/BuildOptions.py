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
"""Options of a base system build."""
import os.path
import typing

import libjailbuilder.errors

# MyPy
import libjailbuilder.Logger


class BuildOptions:
    """
    Mandatory parameters of a provisioning run.

    Args:

        base_dir (str):

            Directory under which the release trees and jail roots live.

        release (str):

            The FreeBSD release identifier, for example 12.0-RELEASE.

        dataset (str):

            Name of the ZFS dataset that holds the jails datasets.
    """

    REQUIRED_OPTIONS = (
        "base_dir",
        "release",
        "dataset"
    )

    SNAPSHOT_IDENTIFIER = "p1"

    _base_dir: typing.Optional[str]
    _release: typing.Optional[str]
    _dataset: typing.Optional[str]

    def __init__(
        self,
        base_dir: typing.Optional[str]=None,
        release: typing.Optional[str]=None,
        dataset: typing.Optional[str]=None
    ) -> None:
        self._base_dir = base_dir
        self._release = release
        self._dataset = dataset

    @property
    def base_dir(self) -> str:
        """Return the base directory."""
        return self._get_option("base_dir")

    @property
    def release(self) -> str:
        """Return the release identifier."""
        return self._get_option("release")

    @property
    def dataset(self) -> str:
        """Return the dataset root name."""
        return self._get_option("dataset")

    def validate(
        self,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        """Raise MissingBuildOption for the first empty option."""
        for option_name in self.REQUIRED_OPTIONS:
            self._get_option(option_name, logger=logger)

    def _get_option(
        self,
        option_name: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> str:
        value = object.__getattribute__(self, f"_{option_name}")
        if (value is None) or (value == ""):
            raise libjailbuilder.errors.MissingBuildOption(
                option_name=option_name,
                logger=logger
            )
        return str(value)

    @property
    def release_dir(self) -> str:
        """Return the directory the base system gets extracted to."""
        return os.path.join(self.base_dir, "releases", self.release)

    @property
    def release_dataset_name(self) -> str:
        """Return the name of the releases ZFS dataset."""
        return f"{self.dataset}/jails/releases/{self.release}"

    @property
    def snapshot_name(self) -> str:
        """Return the full name of the release snapshot jails clone from."""
        return f"{self.release_dataset_name}@{self.SNAPSHOT_IDENTIFIER}"

    def jail_dataset_name(self, jail_name: str) -> str:
        """Return the name of a jails ZFS dataset."""
        return f"{self.dataset}/jails/{jail_name}"

    def jail_dir(self, jail_name: str) -> str:
        """Return the root directory of a jail."""
        return os.path.join(self.base_dir, jail_name)

    def __repr__(self) -> str:
        """Return a debug representation of the options."""
        return (
            f"BuildOptions(base_dir={self._base_dir!r}, "
            f"release={self._release!r}, dataset={self._dataset!r})"
        )
