"""Client for the PurpurMC build API (v2).
"""

from .util import NotFoundError, check_type, get_field
from .http import HttpResponse, http_request

from typing import List, Optional, Any


PURPURMC_URL = "https://api.purpurmc.org/v2"


def _request(path: str) -> Any:
    return http_request("GET", f"{PURPURMC_URL}{path}", accept="application/json").json()


class PurpurCommit:
    __slots__ = "author", "email", "description", "hash", "timestamp"
    def __init__(self, author: str, email: str, description: str, hash: str, timestamp: int) -> None:
        self.author = author
        self.email = email
        self.description = description
        self.hash = hash
        self.timestamp = timestamp

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PurpurCommit":
        check_type(value, dict, path)
        return cls(
            get_field(value, "author", str, path),
            get_field(value, "email", str, path),
            get_field(value, "description", str, path),
            get_field(value, "hash", str, path),
            get_field(value, "timestamp", int, path))


class PurpurBuild:
    """A build of a Purpur version. The result is 'SUCCESS' or 'FAILURE', the duration
    and timestamp are in milliseconds.
    """

    __slots__ = "project", "version", "build", "result", "timestamp", "duration", "commits", "md5"

    def __init__(self, project: str, version: str, build: str, result: str, timestamp: int,
        duration: int, commits: List[PurpurCommit], md5: str
    ) -> None:
        self.project = project
        self.version = version
        self.build = build
        self.result = result
        self.timestamp = timestamp
        self.duration = duration
        self.commits = commits
        self.md5 = md5

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PurpurBuild":
        check_type(value, dict, path)
        commits = get_field(value, "commits", list, path, [])
        return cls(
            get_field(value, "project", str, path),
            get_field(value, "version", str, path),
            get_field(value, "build", str, path),
            get_field(value, "result", str, path),
            get_field(value, "timestamp", int, path),
            get_field(value, "duration", int, path),
            [PurpurCommit.from_json(c, f"{path}/commits/{i}") for i, c in enumerate(commits)],
            get_field(value, "md5", str, path, ""))

    def download(self) -> HttpResponse:
        return download_build(self.version, self.build)

    def __repr__(self) -> str:
        return f"<PurpurBuild {self.version} #{self.build}>"


class PurpurVersion:
    """A version with the details of all its builds, see `fetch_version`.
    """

    __slots__ = "project", "version", "latest", "builds"

    def __init__(self, project: str, version: str, latest: PurpurBuild, builds: List[PurpurBuild]) -> None:
        self.project = project
        self.version = version
        self.latest = latest
        self.builds = builds

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PurpurVersion":
        check_type(value, dict, path)
        builds = get_field(value, "builds", dict, path)
        all_builds = get_field(builds, "all", list, f"{path}/builds")
        return cls(
            get_field(value, "project", str, path),
            get_field(value, "version", str, path),
            PurpurBuild.from_json(builds.get("latest"), f"{path}/builds/latest"),
            [PurpurBuild.from_json(b, f"{path}/builds/all/{i}") for i, b in enumerate(all_builds)])

    def get_latest_build(self) -> PurpurBuild:
        return self.latest

    def get_build(self, build_id: str) -> Optional[PurpurBuild]:
        for build in self.builds:
            if build.build == build_id:
                return build
        return None

    def download_latest_build(self) -> HttpResponse:
        return self.latest.download()

    def download_build(self, build_id: str) -> HttpResponse:
        """Download a build of this version.

        :raises NotFoundError: If the build doesn't exist in this version.
        :raises HttpError: If the build cannot be downloaded.
        """
        build = self.get_build(build_id)
        if build is None:
            raise NotFoundError(f"purpur {self.version} build {build_id}")
        return build.download()

    def __repr__(self) -> str:
        return f"<PurpurVersion {self.version}>"


class PurpurVersionShort:
    """A version with only the identifiers of its builds, see `fetch_version_short`.
    """

    __slots__ = "project", "version", "latest", "builds"

    def __init__(self, project: str, version: str, latest: str, builds: List[str]) -> None:
        self.project = project
        self.version = version
        self.latest = latest
        self.builds = builds

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PurpurVersionShort":
        check_type(value, dict, path)
        builds = get_field(value, "builds", dict, path)
        all_builds = get_field(builds, "all", list, f"{path}/builds")
        for i, build in enumerate(all_builds):
            check_type(build, str, f"{path}/builds/all/{i}")
        return cls(
            get_field(value, "project", str, path),
            get_field(value, "version", str, path),
            get_field(builds, "latest", str, f"{path}/builds"),
            all_builds)

    def get_latest_build_id(self) -> str:
        return self.latest

    def fetch_latest_build(self) -> PurpurBuild:
        return fetch_build(self.version, self.latest)

    def fetch_build(self, build_id: str) -> PurpurBuild:
        return fetch_build(self.version, build_id)

    def download_latest_build(self) -> HttpResponse:
        return download_build(self.version, self.latest)

    def download_build(self, build_id: str) -> HttpResponse:
        return download_build(self.version, build_id)

    def __repr__(self) -> str:
        return f"<PurpurVersionShort {self.version}>"


def fetch_versions() -> List[str]:
    """Fetch all Purpur versions, oldest first.
    """
    path = "purpur: /purpur"
    data = check_type(_request("/purpur"), dict, path)
    versions = get_field(data, "versions", list, path)
    for i, version in enumerate(versions):
        check_type(version, str, f"{path}/versions/{i}")
    return versions


def fetch_version(version: str) -> PurpurVersion:
    """Fetch a version with the details of all its builds, use `fetch_version_short`
    to only get the build identifiers.
    """
    return PurpurVersion.from_json(_request(f"/purpur/{version}?detailed=true"), f"purpur: /purpur/{version}")


def fetch_version_short(version: str) -> PurpurVersionShort:
    return PurpurVersionShort.from_json(_request(f"/purpur/{version}"), f"purpur: /purpur/{version}")


def fetch_build(version: str, build_id: str) -> PurpurBuild:
    return PurpurBuild.from_json(_request(f"/purpur/{version}/{build_id}"), f"purpur: /purpur/{version}/{build_id}")


def download_build(version: str, build_id: str) -> HttpResponse:
    """Download the server JAR of a build, the build id can also be 'latest'.

    :raises HttpError: If the build cannot be downloaded.
    """
    return http_request("GET", f"{PURPURMC_URL}/purpur/{version}/{build_id}/download",
        accept="application/java-archive")
