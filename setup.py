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
"""Installs libjailbuilder using setuptools."""
import sys
import typing
from setuptools import find_packages, setup


def _read_requirements(
    filename: str="requirements.txt"
) -> typing.List[str]:
    with open(filename, "r", encoding="utf-8") as f:
        lines = [line.split("#")[0].strip() for line in f.read().splitlines()]
    return [line for line in lines if line != ""]


if sys.version_info < (3, 6):
    exit("Only Python 3.6 and higher is supported.")

with open("libjailbuilder/VERSION", "r") as f:
    version = f.read().split()[0]

setup(
    name='libjailbuilder',
    license='BSD',
    version=version,
    description='A Python library to provision jails from ZFS snapshots',
    keywords='FreeBSD jail ZFS',
    author='jailbuilder Contributors',
    python_requires='>=3.6',
    packages=find_packages(include=[
        "libjailbuilder",
        "libjailbuilder.*",
        "jailbuilder",
        "jailbuilder.*"
    ]),
    package_data={'libjailbuilder': ['VERSION']},
    include_package_data=True,
    install_requires=_read_requirements("requirements.txt"),
    extras_require=dict(
        test=_read_requirements("requirements-test.txt")
    ),
    entry_points={
        "console_scripts": [
            "jailbuilder=jailbuilder.cli:cli"
        ]
    }
)
