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
"""Base system packages required to populate a jail root."""
import os.path
import typing

DEFAULT_MIRROR_URL = "http://ftp.freebsd.org/pub/FreeBSD/releases/amd64/amd64"
DEFAULT_CACHE_DIR = "/tmp"  # nosec: B108


class BasePackage:
    """A single release asset archive like base.txz."""

    name: str
    extension: str

    def __init__(self, name: str, extension: str="txz") -> None:
        self.name = name
        self.extension = extension

    @property
    def filename(self) -> str:
        """Return the archive file name on the mirror."""
        return f"{self.name}.{self.extension}"

    def url(self, mirror_url: str, release: str) -> str:
        """Return the download URL of the package for a release."""
        return f"{mirror_url.rstrip('/')}/{release}/{self.filename}"

    def cache_path(
        self,
        release: str,
        cache_dir: str=DEFAULT_CACHE_DIR
    ) -> str:
        """Return the local path the package is downloaded to."""
        return os.path.join(cache_dir, release, self.filename)

    def __str__(self) -> str:
        """Return the package name."""
        return self.name

    def __repr__(self) -> str:
        """Return a debug representation of the package."""
        return f"BasePackage({self.name!r})"


BASE_PACKAGES: typing.Tuple[BasePackage, ...] = (
    BasePackage("base"),
    BasePackage("lib32"),
    BasePackage("ports"),
)
