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
"""jailbuilder events collection."""
import typing
from timeit import default_timer as timer

import libjailbuilder.errors

EVENT_STATUS = (
    "pending",
    "done",
    "failed"
)


class Scope(list):
    """An independent event history scope."""

    PENDING_COUNT: int

    def __init__(self) -> None:
        self.PENDING_COUNT = 0
        super().__init__([])


class JailBuilderEvent:
    """The base event class of libjailbuilder."""

    _scope: Scope

    identifier: typing.Optional[str]
    _started_at: float
    _stopped_at: float
    _pending: bool
    skipped: bool
    done: bool
    error: typing.Optional[typing.Union[bool, BaseException]]

    def __init__(
        self,
        message: typing.Optional[str]=None,
        scope: typing.Optional[Scope]=None
    ) -> None:
        """Initialize a JailBuilderEvent."""
        self.scope = scope

        self._pending = False
        self.skipped = False
        self.done = True
        self.error = None

        self.number = len(self.scope) + 1
        self.parent_count = self.scope.PENDING_COUNT
        self.scope.append(self)

        self.message = message

    @property
    def scope(self) -> Scope:
        """Return the currently used event scope."""
        return self._scope

    @scope.setter
    def scope(self, scope: typing.Optional[Scope]) -> None:
        if scope is None:
            self._scope = Scope()
        else:
            self._scope = scope

    def get_state_string(
        self,
        error: str="failed",
        skipped: str="skipped",
        done: str="done",
        pending: str="pending"
    ) -> str:
        """Get a humanreadable string according to the event state."""
        if self.error is not None:
            return error

        if self.skipped is True:
            return skipped

        if self.done is True:
            return done

        return pending

    @property
    def type(self) -> str:
        """
        Return the events type.

        The event type is obtained from the event's class name.
        """
        return type(self).__name__

    @property
    def pending(self) -> bool:
        """Return True if the event is pending."""
        return self._pending

    @pending.setter
    def pending(self, state: bool) -> None:
        """
        Set the pending state.

        Changes invoke internal processing as for example the calculation of
        the event duration and the scopes PENDING_COUNT.
        """
        current = self._pending
        new_state = (state is True)

        if current == new_state:
            return

        if new_state is True:
            try:
                self._started_at
                raise libjailbuilder.errors.EventAlreadyFinished(event=self)
            except AttributeError:
                self._started_at = float(timer())
        if new_state is False:
            self._stopped_at = float(timer())

        self._pending = new_state
        self.scope.PENDING_COUNT += 1 if (state is True) else -1

    @property
    def duration(self) -> typing.Optional[float]:
        """Return the duration of finished events."""
        try:
            return self._stopped_at - self._started_at
        except AttributeError:
            return None

    def _update_message(
        self,
        message: typing.Optional[str]=None,
    ) -> None:
        self.message = message

    def begin(self, message: typing.Optional[str]=None) -> 'JailBuilderEvent':
        """Begin an event."""
        self._update_message(message)
        self.pending = True
        self.done = False
        self.parent_count = self.scope.PENDING_COUNT - 1
        return self

    def end(self, message: typing.Optional[str]=None) -> 'JailBuilderEvent':
        """Successfully finish an event."""
        self._update_message(message)
        self.done = True
        self.pending = False
        self.parent_count = self.scope.PENDING_COUNT
        return self

    def step(self, message: typing.Optional[str]=None) -> 'JailBuilderEvent':
        """Reflect partial event progress."""
        self._update_message(message)
        self.parent_count = self.scope.PENDING_COUNT
        return self

    def skip(self, message: typing.Optional[str]=None) -> 'JailBuilderEvent':
        """Mark an event as skipped."""
        self._update_message(message)
        self.skipped = True
        self.pending = False
        self.parent_count = self.scope.PENDING_COUNT
        return self

    def fail(
        self,
        exception: typing.Union[bool, BaseException]=True,
        message: typing.Optional[str]=None
    ) -> 'JailBuilderEvent':
        """End an event with a failure."""
        self._update_message(message)
        self.error = exception
        self.pending = False
        self.parent_count = self.scope.PENDING_COUNT
        return self

    def __hash__(self) -> typing.Any:
        """Compare an event by its type and identifier."""
        has_identifier = ("identifier" in self.__dir__()) is True
        identifier = "generic" if has_identifier is False else self.identifier
        return hash((self.type, identifier))


# Release


class ReleaseEvent(JailBuilderEvent):
    """Event related to the base system of a release."""

    release_name: str

    def __init__(
        self,
        release_name: str,
        message: typing.Optional[str]=None,
        scope: typing.Optional[Scope]=None
    ) -> None:

        self.identifier = release_name
        self.release_name = release_name
        JailBuilderEvent.__init__(self, message=message, scope=scope)


class BaseSystemBuild(ReleaseEvent):
    """Build the base system of a release from scratch."""

    pass


class DatasetCreate(ReleaseEvent):
    """Create the ZFS dataset of a release."""

    pass


class BaseSystemDownload(ReleaseEvent):
    """Download all missing base system packages."""

    pass


class BaseSystemExtraction(ReleaseEvent):
    """Extract all base system packages."""

    pass


class BaseSystemPatch(ReleaseEvent):
    """Fetch and install base system patches."""

    pass


class BaseSystemConfiguration(ReleaseEvent):
    """Copy the hosts timezone and resolver config into the base system."""

    pass


class ReleaseSnapshot(ReleaseEvent):
    """Snapshot the prepared base system."""

    pass


# Packages


class PackageEvent(JailBuilderEvent):
    """Event related to a single base system package."""

    package_name: str

    def __init__(
        self,
        package_name: str,
        message: typing.Optional[str]=None,
        scope: typing.Optional[Scope]=None
    ) -> None:

        self.identifier = package_name
        self.package_name = package_name
        JailBuilderEvent.__init__(self, message=message, scope=scope)


class PackageDownload(PackageEvent):
    """Download a base system package."""

    pass


class PackageExtraction(PackageEvent):
    """Extract a base system package."""

    pass


# Jail


class JailEvent(JailBuilderEvent):
    """Any event related to a jail."""

    jail_name: str

    def __init__(
        self,
        jail_name: str,
        message: typing.Optional[str]=None,
        scope: typing.Optional[Scope]=None
    ) -> None:

        self.identifier = jail_name
        self.jail_name = jail_name
        JailBuilderEvent.__init__(self, message=message, scope=scope)


class JailCreate(JailEvent):
    """Create a jail from the release snapshot."""

    pass


class JailClone(JailCreate):
    """Clone the release snapshot to the jails dataset."""

    pass


class JailHostnameConfig(JailCreate):
    """Write the jails hostname to its rc.conf file."""

    pass


EventGenerator = typing.Generator[JailBuilderEvent, None, None]
