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
"""ZFS dataset, snapshot and clone management with the zfs command."""
import typing

import libjailbuilder.errors
import libjailbuilder.helpers_object

# MyPy
import libjailbuilder.CommandExecutor
import libjailbuilder.Logger


class ZFS:
    """
    Storage operations on the hosts ZFS pools.

    All operations are synchronous invocations of the zfs command through a
    CommandExecutor. Locking is left to ZFS itself.
    """

    command: str = "zfs"

    executor: 'libjailbuilder.CommandExecutor.CommandExecutor'
    logger: 'libjailbuilder.Logger.Logger'

    def __init__(
        self,
        executor: typing.Optional[
            'libjailbuilder.CommandExecutor.CommandExecutor'
        ]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        self.executor = libjailbuilder.helpers_object.init_executor(
            self,
            executor
        )

    def create_dataset(self, dataset_name: str) -> None:
        """Create a dataset and its parents unless it already exists."""
        self.logger.verbose(f"Creating ZFS dataset {dataset_name}")
        try:
            output = self.executor.combined_output(
                self.command,
                "create",
                "-p",
                dataset_name
            )
        except libjailbuilder.errors.CommandFailure as e:
            if (e.output is not None) and ("already exists" in e.output):
                self.logger.verbose(f"Dataset {dataset_name} already exists")
                return
            self._print_output(e.output)
            raise libjailbuilder.errors.DatasetCreationFailed(
                dataset_name=dataset_name,
                returncode=e.returncode,
                logger=self.logger
            )
        self._print_output(output)

    def snapshot(self, dataset_name: str, identifier: str) -> str:
        """Take a snapshot of a dataset and return the snapshots name."""
        snapshot_name = f"{dataset_name}@{identifier}"
        self.logger.verbose(f"Creating ZFS snapshot {snapshot_name}")
        try:
            output = self.executor.output(
                self.command,
                "snapshot",
                snapshot_name
            )
        except libjailbuilder.errors.CommandFailure as e:
            self._print_output(e.output)
            raise libjailbuilder.errors.SnapshotCreationFailed(
                snapshot_name=snapshot_name,
                returncode=e.returncode,
                logger=self.logger
            )
        self._print_output(output)
        return snapshot_name

    def clone(self, snapshot_name: str, target: str) -> None:
        """Clone a snapshot to the target dataset name."""
        self.logger.verbose(f"Cloning snapshot {snapshot_name} to {target}")
        try:
            output = self.executor.output(
                self.command,
                "clone",
                snapshot_name,
                target
            )
        except libjailbuilder.errors.CommandFailure as e:
            self._print_output(e.output)
            raise libjailbuilder.errors.SnapshotCloneFailed(
                snapshot_name=snapshot_name,
                target=target,
                returncode=e.returncode,
                logger=self.logger
            )
        self._print_output(output)
        self.logger.verbose(
            f"Successfully cloned {snapshot_name} to {target}"
        )

    def dataset_exists(self, dataset_name: str) -> bool:
        """Return True if the dataset exists."""
        return self._exists(dataset_name, "filesystem")

    def snapshot_exists(self, snapshot_name: str) -> bool:
        """Return True if the snapshot exists."""
        return self._exists(snapshot_name, "snapshot")

    def _exists(self, name: str, zfs_type: str) -> bool:
        try:
            output = self.executor.output(
                self.command,
                "list",
                "-H",
                "-o",
                "name",
                "-t",
                zfs_type,
                name
            )
        except libjailbuilder.errors.CommandFailure:
            return False
        return name in output.splitlines()

    def _print_output(self, output: typing.Optional[str]) -> None:
        if output:
            self.logger.info(output)
