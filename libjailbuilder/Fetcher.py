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
"""Download of the base system packages of a release."""
import concurrent.futures
import http.client
import os
import os.path
import shutil
import ssl
import typing
import urllib.error
import urllib.parse
import urllib.request

import libjailbuilder.BasePackage
import libjailbuilder.errors
import libjailbuilder.events
import libjailbuilder.helpers_object

# MyPy
import libjailbuilder.Logger

BasePackage = libjailbuilder.BasePackage.BasePackage


class BaseSystemFetcherGenerator:
    """
    Idempotently download the base system packages of a release.

    Packages whose local cache file already exists are skipped. All missing
    packages are downloaded concurrently. The fetch waits for every launched
    download and raises the first error that occurred, without cancelling
    the other downloads or removing partially written files.
    """

    DOWNLOAD_TIMEOUT: int = 300

    release: str
    cache_dir: str
    packages: typing.Tuple[BasePackage, ...]
    max_concurrent_downloads: int
    timeout: int
    verify_tls: bool
    launched_packages: typing.List[BasePackage]
    logger: 'libjailbuilder.Logger.Logger'
    _mirror_url: str

    def __init__(
        self,
        release: str,
        mirror_url: str=libjailbuilder.BasePackage.DEFAULT_MIRROR_URL,
        cache_dir: str=libjailbuilder.BasePackage.DEFAULT_CACHE_DIR,
        packages: typing.Optional[typing.Iterable[BasePackage]]=None,
        max_concurrent_downloads: typing.Optional[int]=None,
        timeout: int=DOWNLOAD_TIMEOUT,
        verify_tls: bool=False,
        logger: typing.Optional['libjailbuilder.Logger.Logger']=None
    ) -> None:
        self.logger = libjailbuilder.helpers_object.init_logger(self, logger)
        self.release = release
        self.mirror_url = mirror_url
        self.cache_dir = cache_dir

        if packages is None:
            self.packages = libjailbuilder.BasePackage.BASE_PACKAGES
        else:
            self.packages = tuple(packages)

        if max_concurrent_downloads is None:
            self.max_concurrent_downloads = len(self.packages)
        else:
            self.max_concurrent_downloads = max(1, max_concurrent_downloads)

        self.timeout = timeout
        self.verify_tls = (verify_tls is True)
        self.launched_packages = []

    @property
    def _supported_url_schemes(self) -> typing.List[str]:
        return ["https", "http", "ftp"]

    @property
    def mirror_url(self) -> str:
        """Return the URL of the release directory listing."""
        return self._mirror_url

    @mirror_url.setter
    def mirror_url(self, value: str) -> None:
        """Override the default release mirror URL."""
        url = urllib.parse.urlparse(value)
        if url.scheme not in self._supported_url_schemes:
            raise libjailbuilder.errors.InvalidMirrorURL(
                url=value,
                logger=self.logger
            )
        self._mirror_url = url.geturl()

    @property
    def download_directory(self) -> str:
        """Return the directory the packages are cached in."""
        return os.path.join(self.cache_dir, self.release)

    @property
    def pending_packages(self) -> typing.List[BasePackage]:
        """Return the packages that were not downloaded yet."""
        return [
            package for package in self.packages
            if os.path.exists(self._get_package_location(package)) is False
        ]

    @property
    def ssl_context(self) -> ssl.SSLContext:
        """Return the SSL context used for HTTPS mirrors."""
        context = ssl.create_default_context()
        if self.verify_tls is False:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def fetch(
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> 'libjailbuilder.events.EventGenerator':
        """Download all missing base system packages."""
        events = libjailbuilder.events
        baseSystemDownloadEvent = events.BaseSystemDownload(
            release_name=self.release,
            scope=event_scope
        )
        _scope = baseSystemDownloadEvent.scope
        yield baseSystemDownloadEvent.begin()

        self.launched_packages = []
        try:
            if os.path.isdir(self.download_directory) is False:
                os.makedirs(self.download_directory)
        except OSError as e:
            yield baseSystemDownloadEvent.fail(e)
            raise libjailbuilder.errors.DownloadFailed(
                url=self.mirror_url,
                code=str(e),
                logger=self.logger
            )

        pending_packages = self.pending_packages
        package_events: typing.Dict[
            str,
            'libjailbuilder.events.PackageDownload'
        ] = {}
        for package in self.packages:
            packageDownloadEvent = events.PackageDownload(
                package_name=package.name,
                scope=_scope
            )
            package_events[package.name] = packageDownloadEvent
            yield packageDownloadEvent.begin()
            if package not in pending_packages:
                path = self._get_package_location(package)
                yield packageDownloadEvent.skip(f"{path} already exists")

        if len(pending_packages) == 0:
            self.logger.verbose(
                f"Base system of {self.release} was already downloaded"
            )
            yield baseSystemDownloadEvent.skip(message="already downloaded")
            return

        error: typing.Optional[BaseException] = None
        for package, package_error in self._download_packages(
            pending_packages
        ):
            packageDownloadEvent = package_events[package.name]
            if package_error is None:
                yield packageDownloadEvent.end()
            else:
                yield packageDownloadEvent.fail(package_error)
                if error is None:
                    error = package_error

        if error is not None:
            yield baseSystemDownloadEvent.fail(error)
            raise error

        yield baseSystemDownloadEvent.end()

    def _download_packages(
        self,
        pending_packages: typing.List[BasePackage]
    ) -> typing.Generator[
        typing.Tuple[BasePackage, typing.Optional[BaseException]],
        None,
        None
    ]:
        """Download packages concurrently, in order of completion."""
        self.launched_packages = list(pending_packages)
        max_workers = min(
            len(pending_packages),
            self.max_concurrent_downloads
        )
        self.logger.debug(
            f"Downloading {len(pending_packages)} packages "
            f"with {max_workers} concurrent tasks"
        )
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers
        ) as pool:
            futures = {
                pool.submit(self._download_package, package): package
                for package in pending_packages
            }
            for future in concurrent.futures.as_completed(futures):
                yield futures[future], future.exception()

    def _download_package(self, package: BasePackage) -> None:
        url = package.url(self.mirror_url, self.release)
        path = self._get_package_location(package)
        # incomplete downloads never appear at the cache path
        partial_path = f"{path}.part"
        self.logger.debug(f"Starting download of {url}")
        try:
            with open(partial_path, "wb") as f:
                request = urllib.request.Request(url, method="GET")
                with urllib.request.urlopen(  # nosec: validated in @setter
                    request,
                    timeout=self.timeout,
                    context=self.ssl_context
                ) as response:
                    expected_length = self._get_content_length(response)
                    shutil.copyfileobj(response, f)
                    received_length = f.tell()
            if (expected_length is not None) and \
                    (received_length != expected_length):
                raise libjailbuilder.errors.DownloadFailed(
                    url=url,
                    code=(
                        f"received {received_length} of "
                        f"{expected_length} bytes"
                    ),
                    logger=self.logger
                )
            os.replace(partial_path, path)
        except urllib.error.HTTPError as http_error:
            raise libjailbuilder.errors.DownloadFailed(
                url=url,
                code=http_error.code,
                logger=self.logger
            )
        except urllib.error.URLError as url_error:
            raise libjailbuilder.errors.DownloadFailed(
                url=url,
                code=str(url_error.reason),
                logger=self.logger
            )
        except http.client.HTTPException as http_exception:
            raise libjailbuilder.errors.DownloadFailed(
                url=url,
                code=f"{type(http_exception).__name__}: {http_exception}",
                logger=self.logger
            )
        except OSError as e:
            raise libjailbuilder.errors.DownloadFailed(
                url=url,
                code=str(e),
                logger=self.logger
            )
        self.logger.verbose(f"{url} was saved to {path}")

    def _get_content_length(
        self,
        response: typing.Any
    ) -> typing.Optional[int]:
        content_length = response.headers.get("Content-Length")
        if content_length is None:
            return None
        try:
            return int(content_length)
        except ValueError:
            return None

    def _get_package_location(self, package: BasePackage) -> str:
        return package.cache_path(self.release, cache_dir=self.cache_dir)


class BaseSystemFetcher(BaseSystemFetcherGenerator):
    """Base system fetcher with synchronous interfaces."""

    def fetch(  # noqa: T484
        self,
        event_scope: typing.Optional['libjailbuilder.events.Scope']=None
    ) -> typing.List['libjailbuilder.events.JailBuilderEvent']:
        """Download all missing base system packages synchronously."""
        return list(BaseSystemFetcherGenerator.fetch(
            self,
            event_scope=event_scope
        ))
