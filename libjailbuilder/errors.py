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
"""Collection of jailbuilder errors."""
import typing

# MyPy
import libjailbuilder.Logger


class JailBuilderException(Exception):
    """A well-known exception raised by libjailbuilder."""

    def __init__(
        self,
        message: str,
        level: str="error",
        silent: bool=False,
        append_warning: bool=False,
        warning: typing.Optional[str]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        if (logger is not None) and (silent is False):
            logger.__getattribute__(level)(message)
            if (append_warning is True) and (warning is not None):
                logger.warn(warning)
        super().__init__(message)


# Validation


class ValidationError(JailBuilderException, ValueError):
    """Raised when required configuration is missing or invalid."""

    pass


class MissingBuildOption(ValidationError):
    """Raised when a mandatory build option is empty."""

    option_name: str

    def __init__(
        self,
        option_name: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.option_name = option_name
        msg = f"Missing build option: {option_name}"
        ValidationError.__init__(self, message=msg, logger=logger)


class InvalidJailName(ValidationError):
    """Raised when a jail has an invalid name."""

    def __init__(
        self,
        name: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = (
            f"Invalid jail name '{name}': "
            "Names may only contain alphanumeric characters, dots and dash"
        )
        ValidationError.__init__(self, message=msg, logger=logger)


class InvalidMirrorURL(ValidationError):
    """Raised when the base system mirror URL has an unsupported scheme."""

    def __init__(
        self,
        url: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Invalid mirror URL '{url}'"
        ValidationError.__init__(self, message=msg, logger=logger)


# Commands


class CommandFailure(JailBuilderException):
    """Raised when an external command exits with a code > 0."""

    returncode: int
    output: typing.Optional[str]

    def __init__(
        self,
        returncode: int,
        output: typing.Optional[str]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.returncode = returncode
        self.output = output
        msg = f"Command exited with {returncode}"
        JailBuilderException.__init__(self, message=msg, logger=logger)


# Transfer


class TransferError(JailBuilderException):
    """Raised when a network transfer fails."""

    pass


class DownloadFailed(TransferError):
    """Raised when a base system package could not be downloaded."""

    url: str

    def __init__(
        self,
        url: str,
        code: typing.Union[int, str],
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.url = url
        msg = f"Failed downloading {url}: {code}"
        TransferError.__init__(self, message=msg, logger=logger)


# Extraction


class ExtractionError(JailBuilderException):
    """Raised when a base system archive could not be extracted."""

    pass


class IllegalArchiveContent(ExtractionError):
    """Raised when a base system archive contains malicious content."""

    def __init__(
        self,
        asset_name: str,
        reason: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Asset {asset_name} contains illegal files - {reason}"
        ExtractionError.__init__(self, message=msg, logger=logger)


class ArchiveExtractionFailed(ExtractionError):
    """Raised when tar could not read or write an archive."""

    def __init__(
        self,
        asset_name: str,
        reason: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Extracting {asset_name} failed: {reason}"
        ExtractionError.__init__(self, message=msg, logger=logger)


# Patching


class PatchError(JailBuilderException):
    """Raised when the update tool exits with a code > 0."""

    returncode: int

    def __init__(
        self,
        release_name: str,
        returncode: int,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.returncode = returncode
        msg = f"Patching release '{release_name}' exited with {returncode}"
        JailBuilderException.__init__(self, message=msg, logger=logger)


# Storage


class StorageError(JailBuilderException):
    """Raised when a ZFS command fails."""

    returncode: typing.Optional[int] = None

    def __init__(
        self,
        message: str,
        returncode: typing.Optional[int]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.returncode = returncode
        JailBuilderException.__init__(self, message=message, logger=logger)


class DatasetCreationFailed(StorageError):
    """Raised when a ZFS dataset could not be created."""

    def __init__(
        self,
        dataset_name: str,
        returncode: typing.Optional[int]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Creating dataset {dataset_name} failed"
        StorageError.__init__(
            self,
            message=msg,
            returncode=returncode,
            logger=logger
        )


class SnapshotCreationFailed(StorageError):
    """Raised when a ZFS snapshot could not be taken."""

    def __init__(
        self,
        snapshot_name: str,
        returncode: typing.Optional[int]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Snapshot creation of {snapshot_name} failed"
        StorageError.__init__(
            self,
            message=msg,
            returncode=returncode,
            logger=logger
        )


class SnapshotCloneFailed(StorageError):
    """Raised when a ZFS snapshot could not be cloned."""

    def __init__(
        self,
        snapshot_name: str,
        target: str,
        returncode: typing.Optional[int]=None,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Could not clone {snapshot_name} to {target}"
        StorageError.__init__(
            self,
            message=msg,
            returncode=returncode,
            logger=logger
        )


class SnapshotNotFound(StorageError):
    """Raised when a snapshot required for cloning does not exist."""

    def __init__(
        self,
        snapshot_name: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Snapshot not found: {snapshot_name}"
        StorageError.__init__(self, message=msg, logger=logger)


# Configuration


class ConfigurationError(JailBuilderException):
    """Raised when a config file could not be copied or written."""

    pass


class BuildConfigError(ConfigurationError):
    """Raised when the builder config file cannot be used."""

    def __init__(
        self,
        config_file: str,
        reason: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Invalid build config {config_file}: {reason}"
        ConfigurationError.__init__(self, message=msg, logger=logger)


# Logging


class InvalidLogLevel(JailBuilderException):
    """Raised when the logger was initialized with an invalid log level."""

    def __init__(
        self,
        log_level: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        available_log_levels = libjailbuilder.Logger.Logger.LOG_LEVELS
        available_log_levels_string = ", ".join(available_log_levels)
        msg = (
            f"Invalid log-level '{log_level}'. Choose one of "
            f"{available_log_levels_string}"
        )
        JailBuilderException.__init__(self, message=msg, logger=logger)


class CannotRedrawLine(JailBuilderException):
    """Raised when the logger cannot redraw a line."""

    def __init__(
        self,
        reason: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"Logger can't redraw line: {reason}"
        JailBuilderException.__init__(self, message=msg, logger=logger)


class MustBeRoot(JailBuilderException):
    """Raised when an operation requires root privileges."""

    def __init__(
        self,
        msg: str,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        _msg = (
            f"Must be root to {msg}"
        )
        JailBuilderException.__init__(self, message=_msg, logger=logger)


# Events


class EventAlreadyFinished(JailBuilderException):
    """Raised when a finished event is started again."""

    def __init__(
        self,
        event: 'libjailbuilder.events.JailBuilderEvent',
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        msg = f"This {event.type} event is already finished"
        JailBuilderException.__init__(self, message=msg, logger=logger)
