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
"""Build a release base system and create jails from its snapshot."""
import functools
import typing

import libjailbuilder.BasePackage
import libjailbuilder.BuildOptions
import libjailbuilder.Configurator
import libjailbuilder.errors
import libjailbuilder.events
import libjailbuilder.Fetcher
import libjailbuilder.helpers
import libjailbuilder.helpers_object
import libjailbuilder.Patcher
import libjailbuilder.SecureTarfile

# MyPy
import libjailbuilder.CommandExecutor
import libjailbuilder.Logger
import libjailbuilder.ZFS

StepAction = typing.Callable[..., 'libjailbuilder.events.EventGenerator']


class BuildStep(typing.NamedTuple):
    """A named pipeline step whose action yields events or raises."""

    name: str
    action: StepAction


class BuildStatus(typing.NamedTuple):
    """Observable state of a release build."""

    dataset_exists: bool
    snapshot_exists: bool
    completed_steps: typing.List[str]
    failed_step: typing.Optional[str]


class BuilderGenerator:
    """
    Provisioning pipeline with generator interfaces.

    The base system of a release is built once by running the steps
    returned by `steps()` in order. The first failing step aborts the build
    and is remembered as `failed_step`; already completed steps are not
    rolled back. Jails are created by cloning the release snapshot.
    """

    BASE_JAIL_NAME: str = "base"

    options: 'libjailbuilder.BuildOptions.BuildOptions'
    executor: 'libjailbuilder.CommandExecutor.CommandExecutor'
    zfs: 'libjailbuilder.ZFS.ZFS'
    logger: 'libjailbuilder.Logger.Logger'
    fetcher: 'libjailbuilder.Fetcher.BaseSystemFetcherGenerator'
    patcher: 'libjailbuilder.Patcher.ReleasePatcher'
    configurator: 'libjailbuilder.Configurator.EnvironmentConfigurator'
    completed_steps: typing.List[str]
    failed_step: typing.Optional[str]

    def __init__(
        self,
        options: 'libjailbuilder.BuildOptions.BuildOptions',
        executor: typing.Optional[
            'libjailbuilder.CommandExecutor.CommandExecutor'
        ]=None,
        zfs: typing.Optional['libjailbuilder.ZFS.ZFS']=None,
        mirror_url: str=libjailbuilder.BasePackage.DEFAULT_MIRROR_URL,
        cache_dir: str=libjailbuilder.BasePackage.DEFAULT_CACHE_DIR,
        verify_tls: bool=False,
        max_concurrent_downloads: typing.Optional[int]=None,
        host_localtime: typing.Optional[str]=None,
        host_resolv_conf: typing.Optional[str]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        options.validate(logger=self.logger)
        self.options = options

        self.executor = libjailbuilder.helpers_object.init_executor(
            self,
            executor
        )
        self.zfs = libjailbuilder.helpers_object.init_zfs(self, zfs)

        self.fetcher = libjailbuilder.Fetcher.BaseSystemFetcherGenerator(
            release=options.release,
            mirror_url=mirror_url,
            cache_dir=cache_dir,
            max_concurrent_downloads=max_concurrent_downloads,
            verify_tls=verify_tls,
            logger=self.logger
        )
        self.patcher = libjailbuilder.Patcher.ReleasePatcher(
            release=options.release,
            root_dir=options.release_dir,
            executor=self.executor,
            logger=self.logger
        )
        Configurator = libjailbuilder.Configurator
        self.configurator = Configurator.EnvironmentConfigurator(
            root_dir=options.release_dir,
            host_localtime=host_localtime,
            host_resolv_conf=host_resolv_conf,
            logger=self.logger
        )

        self.completed_steps = []
        self.failed_step = None

    @property
    def release(self) -> str:
        """Return the release identifier of the build."""
        return self.options.release

    def steps(
        self,
        nameservers: typing.Optional[typing.List[str]]=None
    ) -> typing.List[BuildStep]:
        """Return the ordered steps of a base system build."""
        _class = BuilderGenerator
        return [
            BuildStep("create_dataset", self._create_dataset),
            BuildStep("fetch", self._fetch),
            BuildStep("extract", self._extract),
            BuildStep("patch", self._patch),
            BuildStep(
                "configure",
                functools.partial(self._configure, nameservers=nameservers)
            ),
            BuildStep("snapshot", self._snapshot),
            BuildStep(
                "create_base_jail",
                functools.partial(
                    _class.create_jail,
                    self,
                    self.BASE_JAIL_NAME
                )
            )
        ]

    def initialize(
        self,
        nameservers: typing.Optional[typing.List[str]]=None,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        """
        Build the base system and create the base jail.

        Args:

            nameservers (list): (optional)

                Nameservers written to the base systems resolv.conf. The
                hosts resolv.conf is copied when none are given.

            event_scope (libjailbuilder.events.Scope): (optional)

                Pass on the event stack for use in higher order functions.
        """
        events = libjailbuilder.events
        baseSystemBuildEvent = events.BaseSystemBuild(
            release_name=self.release,
            scope=event_scope
        )
        _scope = baseSystemBuildEvent.scope
        yield baseSystemBuildEvent.begin()

        self.completed_steps = []
        self.failed_step = None

        for step in self.steps(nameservers=nameservers):
            self.logger.debug(f"Running build step {step.name}")
            try:
                yield from step.action(event_scope=_scope)
            except Exception as e:
                self.failed_step = step.name
                self.logger.verbose(
                    f"Build of {self.release} aborted in step {step.name}"
                )
                yield baseSystemBuildEvent.fail(e)
                raise
            self.completed_steps.append(step.name)

        yield baseSystemBuildEvent.end()

    def create_jail(
        self,
        name: str,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        """Clone the release snapshot to a new jail and set its hostname."""
        if libjailbuilder.helpers.validate_name(name) is False:
            raise libjailbuilder.errors.InvalidJailName(
                name=name,
                logger=self.logger
            )

        events = libjailbuilder.events
        jailCreateEvent = events.JailCreate(
            jail_name=name,
            scope=event_scope
        )
        _scope = jailCreateEvent.scope
        jailCloneEvent = events.JailClone(
            jail_name=name,
            scope=_scope
        )
        jailHostnameConfigEvent = events.JailHostnameConfig(
            jail_name=name,
            scope=_scope
        )

        yield jailCreateEvent.begin()

        yield jailCloneEvent.begin()
        try:
            self.clone_base_to_jail(name)
        except libjailbuilder.errors.JailBuilderException as e:
            yield jailCloneEvent.fail(e)
            yield jailCreateEvent.fail(e)
            raise
        yield jailCloneEvent.end()

        yield jailHostnameConfigEvent.begin()
        try:
            self.configure_jail_hostname(name)
        except libjailbuilder.errors.JailBuilderException as e:
            yield jailHostnameConfigEvent.fail(e)
            yield jailCreateEvent.fail(e)
            raise
        yield jailHostnameConfigEvent.end()

        yield jailCreateEvent.end()

    def clone_base_to_jail(self, name: str) -> str:
        """Clone the existing release snapshot to the jails dataset."""
        snapshot_name = self.options.snapshot_name
        if self.zfs.snapshot_exists(snapshot_name) is False:
            raise libjailbuilder.errors.SnapshotNotFound(
                snapshot_name=snapshot_name,
                logger=self.logger
            )
        target = self.options.jail_dataset_name(name)
        self.zfs.clone(snapshot_name, target)
        return target

    def configure_jail_hostname(self, name: str) -> None:
        """Set the hostname in the rc.conf file of a jail."""
        self.configurator.set_hostname(
            jail_name=name,
            jail_dir=self.options.jail_dir(name)
        )

    def status(self) -> BuildStatus:
        """Return which parts of the release build exist."""
        return BuildStatus(
            dataset_exists=self.zfs.dataset_exists(
                self.options.release_dataset_name
            ),
            snapshot_exists=self.zfs.snapshot_exists(
                self.options.snapshot_name
            ),
            completed_steps=list(self.completed_steps),
            failed_step=self.failed_step
        )

    def _create_dataset(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        datasetCreateEvent = libjailbuilder.events.DatasetCreate(
            release_name=self.release,
            scope=event_scope
        )
        yield datasetCreateEvent.begin()
        try:
            self.zfs.create_dataset(self.options.release_dataset_name)
        except libjailbuilder.errors.StorageError as e:
            yield datasetCreateEvent.fail(e)
            raise
        yield datasetCreateEvent.end()

    def _fetch(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        yield from self.fetcher.fetch(event_scope=event_scope)

    def _extract(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        events = libjailbuilder.events
        baseSystemExtractionEvent = events.BaseSystemExtraction(
            release_name=self.release,
            scope=event_scope
        )
        _scope = baseSystemExtractionEvent.scope
        yield baseSystemExtractionEvent.begin()

        destination = self.options.release_dir
        try:
            libjailbuilder.helpers.makedirs_safe(
                destination,
                logger=self.logger
            )
        except (OSError, libjailbuilder.errors.ConfigurationError) as e:
            yield baseSystemExtractionEvent.fail(e)
            raise libjailbuilder.errors.ArchiveExtractionFailed(
                asset_name=destination,
                reason=str(e),
                logger=self.logger
            )

        for package in self.fetcher.packages:
            packageExtractionEvent = events.PackageExtraction(
                package_name=package.name,
                scope=_scope
            )
            yield packageExtractionEvent.begin()
            try:
                libjailbuilder.SecureTarfile.extract(
                    file=package.cache_path(
                        self.release,
                        cache_dir=self.fetcher.cache_dir
                    ),
                    destination=destination,
                    compression_format="xz",
                    logger=self.logger
                )
            except libjailbuilder.errors.ExtractionError as e:
                yield packageExtractionEvent.fail(e)
                yield baseSystemExtractionEvent.fail(e)
                raise
            yield packageExtractionEvent.end()

        yield baseSystemExtractionEvent.end()

    def _patch(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        baseSystemPatchEvent = libjailbuilder.events.BaseSystemPatch(
            release_name=self.release,
            scope=event_scope
        )
        yield baseSystemPatchEvent.begin()
        try:
            self.patcher.patch()
        except libjailbuilder.errors.PatchError as e:
            yield baseSystemPatchEvent.fail(e)
            raise
        yield baseSystemPatchEvent.end()

    def _configure(
        self,
        nameservers: typing.Optional[typing.List[str]]=None,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        yield from self.configurator.apply(
            release_name=self.release,
            nameservers=nameservers,
            event_scope=event_scope
        )

    def _snapshot(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        releaseSnapshotEvent = libjailbuilder.events.ReleaseSnapshot(
            release_name=self.release,
            scope=event_scope
        )
        yield releaseSnapshotEvent.begin()
        try:
            self.zfs.snapshot(
                self.options.release_dataset_name,
                self.options.SNAPSHOT_IDENTIFIER
            )
        except libjailbuilder.errors.StorageError as e:
            yield releaseSnapshotEvent.fail(e)
            raise
        yield releaseSnapshotEvent.end()


class Builder(BuilderGenerator):
    """Provisioning pipeline with synchronous interfaces."""

    def initialize(  # noqa: T484
        self,
        nameservers: typing.Optional[typing.List[str]]=None,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> typing.List['libjailbuilder.events.JailBuilderEvent']:
        """Build the base system and create the base jail synchronously."""
        return list(BuilderGenerator.initialize(
            self,
            nameservers=nameservers,
            event_scope=event_scope
        ))

    def create_jail(  # noqa: T484
        self,
        name: str,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> typing.List['libjailbuilder.events.JailBuilderEvent']:
        """Create a jail from the release snapshot synchronously."""
        return list(BuilderGenerator.create_jail(
            self,
            name=name,
            event_scope=event_scope
        ))
