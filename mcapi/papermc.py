"""Client for the PaperMC build API (v2), used for the Paper and Folia servers and the
Velocity and Waterfall proxies.
"""

from .util import check_type, get_field
from .http import HttpResponse, http_request

from typing import Dict, List, Any


PAPERMC_URL = "https://api.papermc.io/v2"

CHANNELS = ("default", "experimental")


def _request(path: str) -> Any:
    return http_request("GET", f"{PAPERMC_URL}{path}", accept="application/json").json()


def _parse_str_list(value: dict, key: str, path: str) -> List[str]:
    items = get_field(value, key, list, path)
    for i, item in enumerate(items):
        check_type(item, str, f"{path}/{key}/{i}")
    return items


class PaperChange:
    """A commit included in a build.
    """
    __slots__ = "commit", "summary", "message"
    def __init__(self, commit: str, summary: str, message: str) -> None:
        self.commit = commit
        self.summary = summary
        self.message = message

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperChange":
        check_type(value, dict, path)
        return cls(
            get_field(value, "commit", str, path),
            get_field(value, "summary", str, path),
            get_field(value, "message", str, path))


class PaperDownload:
    """A file of a build, the download name is the key in the build's downloads, the
    main server JAR is 'application'.
    """
    __slots__ = "name", "sha256"
    def __init__(self, name: str, sha256: str) -> None:
        self.name = name
        self.sha256 = sha256

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperDownload":
        check_type(value, dict, path)
        return cls(get_field(value, "name", str, path), get_field(value, "sha256", str, path))


class PaperBuildInfo:
    """Common information of a build, as listed in builds responses.
    """

    __slots__ = "build", "time", "channel", "promoted", "changes", "downloads"

    def __init__(self, build: int, time: str, channel: str, promoted: bool,
        changes: List[PaperChange],
        downloads: Dict[str, PaperDownload]
    ) -> None:
        self.build = build
        self.time = time
        self.channel = channel
        self.promoted = promoted
        self.changes = changes
        self.downloads = downloads

    @staticmethod
    def _parse_info(value: Any, path: str) -> tuple:
        check_type(value, dict, path)
        channel = get_field(value, "channel", str, path)
        if channel not in CHANNELS:
            raise ValueError(f"{path}/channel must be 'default' or 'experimental'")
        changes = get_field(value, "changes", list, path, [])
        downloads = get_field(value, "downloads", dict, path, {})
        return (
            get_field(value, "build", int, path),
            get_field(value, "time", str, path),
            channel,
            get_field(value, "promoted", bool, path, False),
            [PaperChange.from_json(c, f"{path}/changes/{i}") for i, c in enumerate(changes)],
            {k: PaperDownload.from_json(d, f"{path}/downloads/{k}") for k, d in downloads.items()},
        )

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperBuildInfo":
        return cls(*cls._parse_info(value, path))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.build} ({self.channel})>"


class PaperVersionGroupBuild(PaperBuildInfo):
    """A build listed in a version group, it also gives its version.
    """

    __slots__ = "version",

    def __init__(self, version: str, *args) -> None:
        super().__init__(*args)
        self.version = version

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperVersionGroupBuild":
        info = cls._parse_info(value, path)
        return cls(get_field(value, "version", str, path), *info)


class PaperBuild(PaperBuildInfo):
    """A build of a project's version, with its project and version.
    """

    __slots__ = "project_id", "project_name", "version"

    def __init__(self, project_id: str, project_name: str, version: str, *args) -> None:
        super().__init__(*args)
        self.project_id = project_id
        self.project_name = project_name
        self.version = version

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperBuild":
        info = cls._parse_info(value, path)
        return cls(
            get_field(value, "project_id", str, path),
            get_field(value, "project_name", str, path),
            get_field(value, "version", str, path),
            *info)

    def download_url(self, download: str = "application") -> str:
        return download_url(self.project_id, self.version, self.build, self._download_name(download))

    def download(self, download: str = "application") -> HttpResponse:
        """Download a file of this build, by its download key ('application' is the
        main JAR).

        :raises HttpError: If the file cannot be downloaded.
        """
        return http_request("GET", self.download_url(download), accept="application/java-archive")

    def _download_name(self, download: str) -> str:
        # The API needs the file name, the key is accepted for convenience.
        entry = self.downloads.get(download)
        return download if entry is None else entry.name


class PaperBuildsResponse:
    """All builds of a project's version.
    """

    __slots__ = "project_id", "project_name", "version", "builds"

    def __init__(self, project_id: str, project_name: str, version: str, builds: List[PaperBuildInfo]) -> None:
        self.project_id = project_id
        self.project_name = project_name
        self.version = version
        self.builds = builds

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperBuildsResponse":
        check_type(value, dict, path)
        builds = get_field(value, "builds", list, path)
        return cls(
            get_field(value, "project_id", str, path),
            get_field(value, "project_name", str, path),
            get_field(value, "version", str, path),
            [PaperBuildInfo.from_json(b, f"{path}/builds/{i}") for i, b in enumerate(builds)])


class PaperVersion:
    """A version of a project, with the identifiers of its builds.
    """

    __slots__ = "project_id", "project_name", "version", "builds"

    def __init__(self, project_id: str, project_name: str, version: str, builds: List[int]) -> None:
        self.project_id = project_id
        self.project_name = project_name
        self.version = version
        self.builds = builds

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperVersion":
        check_type(value, dict, path)
        builds = get_field(value, "builds", list, path)
        for i, build in enumerate(builds):
            check_type(build, int, f"{path}/builds/{i}")
        return cls(
            get_field(value, "project_id", str, path),
            get_field(value, "project_name", str, path),
            get_field(value, "version", str, path),
            builds)

    def fetch_build(self, build: int) -> PaperBuild:
        return fetch_build(self.project_id, self.version, build)

    def fetch_latest_build(self) -> PaperBuild:
        """Fetch the latest build of this version.

        :raises ValueError: If this version has no build.
        """
        if not len(self.builds):
            raise ValueError(f"{self.project_id} {self.version} has no build")
        return self.fetch_build(max(self.builds))

    def __repr__(self) -> str:
        return f"<PaperVersion {self.project_id} {self.version}>"


class PaperVersionGroup:
    """A group of versions (like '1.20' for '1.20', '1.20.1'...).
    """

    __slots__ = "project_id", "project_name", "version_group", "versions"

    def __init__(self, project_id: str, project_name: str, version_group: str, versions: List[str]) -> None:
        self.project_id = project_id
        self.project_name = project_name
        self.version_group = version_group
        self.versions = versions

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperVersionGroup":
        check_type(value, dict, path)
        return cls(
            get_field(value, "project_id", str, path),
            get_field(value, "project_name", str, path),
            get_field(value, "version_group", str, path),
            _parse_str_list(value, "versions", path))


class PaperVersionGroupBuildsResponse(PaperVersionGroup):
    """All builds of all versions of a version group.
    """

    __slots__ = "builds",

    def __init__(self, project_id: str, project_name: str, version_group: str, versions: List[str],
        builds: List[PaperVersionGroupBuild]
    ) -> None:
        super().__init__(project_id, project_name, version_group, versions)
        self.builds = builds

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperVersionGroupBuildsResponse":
        group = PaperVersionGroup.from_json(value, path)
        builds = get_field(value, "builds", list, path)
        return cls(group.project_id, group.project_name, group.version_group, group.versions,
            [PaperVersionGroupBuild.from_json(b, f"{path}/builds/{i}") for i, b in enumerate(builds)])


class PaperProject:
    """A project, with its version groups and versions, oldest first.
    """

    __slots__ = "project_id", "project_name", "version_groups", "versions"

    def __init__(self, project_id: str, project_name: str, version_groups: List[str], versions: List[str]) -> None:
        self.project_id = project_id
        self.project_name = project_name
        self.version_groups = version_groups
        self.versions = versions

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PaperProject":
        check_type(value, dict, path)
        return cls(
            get_field(value, "project_id", str, path),
            get_field(value, "project_name", str, path),
            _parse_str_list(value, "version_groups", path),
            _parse_str_list(value, "versions", path))

    def fetch_version(self, version: str) -> PaperVersion:
        return fetch_version(self.project_id, version)

    def fetch_version_group(self, version_group: str) -> PaperVersionGroup:
        return fetch_version_group(self.project_id, version_group)

    def __repr__(self) -> str:
        return f"<PaperProject {self.project_id}>"


def fetch_projects() -> List[str]:
    """Fetch the identifiers of all projects (paper, folia, velocity, waterfall).
    """
    path = "papermc: /projects"
    data = check_type(_request("/projects"), dict, path)
    return _parse_str_list(data, "projects", path)


def fetch_project(project_id: str) -> PaperProject:
    return PaperProject.from_json(_request(f"/projects/{project_id}"), f"papermc: /projects/{project_id}")


def fetch_version(project_id: str, version: str) -> PaperVersion:
    path = f"/projects/{project_id}/versions/{version}"
    return PaperVersion.from_json(_request(path), f"papermc: {path}")


def fetch_builds(project_id: str, version: str) -> PaperBuildsResponse:
    path = f"/projects/{project_id}/versions/{version}/builds"
    return PaperBuildsResponse.from_json(_request(path), f"papermc: {path}")


def fetch_build(project_id: str, version: str, build: int) -> PaperBuild:
    path = f"/projects/{project_id}/versions/{version}/builds/{build}"
    return PaperBuild.from_json(_request(path), f"papermc: {path}")


def fetch_version_group(project_id: str, version_group: str) -> PaperVersionGroup:
    path = f"/projects/{project_id}/version_group/{version_group}"
    return PaperVersionGroup.from_json(_request(path), f"papermc: {path}")


def fetch_version_group_builds(project_id: str, version_group: str) -> PaperVersionGroupBuildsResponse:
    path = f"/projects/{project_id}/version_group/{version_group}/builds"
    return PaperVersionGroupBuildsResponse.from_json(_request(path), f"papermc: {path}")


def download_url(project_id: str, version: str, build: int, download_name: str) -> str:
    return f"{PAPERMC_URL}/projects/{project_id}/versions/{version}/builds/{build}/downloads/{download_name}"


def download_build(project_id: str, version: str, build: int, download_name: str) -> HttpResponse:
    """Download a file of a build, the download name is the file name, like
    `paper-1.20.4-496.jar`.

    :raises HttpError: If the file cannot be downloaded.
    """
    return http_request("GET", download_url(project_id, version, build, download_name),
        accept="application/java-archive")
