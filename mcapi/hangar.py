"""Client for the Hangar API (v1), the plugin repository of PaperMC.

Enumerated fields (category, visibility, review state...) are kept as the strings
returned by the API, known values are given as module constants.
"""

from .util import ApiError, check_type, get_field
from .http import HttpResponse, HttpError, http_request

from typing import Dict, List, Optional, Any


API_V1 = "https://hangar.papermc.io/api/v1"

PLATFORMS = ("PAPER", "WATERFALL", "VELOCITY")

CATEGORIES = ("admin_tools", "chat", "dev_tools", "economy", "gameplay", "games",
    "protection", "role_playing", "world_management", "misc", "undefined")

VISIBILITIES = ("public", "new", "needsChanges", "needsApproval", "softDelete")

REVIEW_STATES = ("unreviewed", "reviewed", "under_review", "partially_reviewed")

PINNED_STATUSES = ("VERSION", "CHANNEL", "NONE")


class HangarError(ApiError):
    """Raised when the Hangar API answers with an error message.
    """


def _request(path: str, query: Optional[dict] = None, accept: str = "application/json") -> HttpResponse:
    try:
        return http_request("GET", f"{API_V1}{path}", query=query, accept=accept)
    except HttpError as error:
        # Hangar gives a JSON body with a message for client errors.
        if 400 <= error.res.status < 500:
            try:
                data = error.res.json()
            except ValueError:
                raise error
            if isinstance(data, dict) and isinstance(data.get("message"), str):
                raise HangarError(data["message"]) from error
        raise


class Namespace:
    __slots__ = "owner", "slug"
    def __init__(self, owner: str, slug: str) -> None:
        self.owner = owner
        self.slug = slug

    def __str__(self) -> str:
        return f"{self.owner}/{self.slug}"


class ProjectStats:
    __slots__ = "views", "downloads", "recent_views", "recent_downloads", "stars", "watchers"
    def __init__(self, views: int, downloads: int, recent_views: int, recent_downloads: int, stars: int, watchers: int) -> None:
        self.views = views
        self.downloads = downloads
        self.recent_views = recent_views
        self.recent_downloads = recent_downloads
        self.stars = stars
        self.watchers = watchers

    @classmethod
    def from_json(cls, value: Any, path: str) -> "ProjectStats":
        check_type(value, dict, path)
        return cls(*(get_field(value, key, int, path, 0) for key in
            ("views", "downloads", "recentViews", "recentDownloads", "stars", "watchers")))


class Project:
    """A plugin project.
    """

    __slots__ = "name", "namespace", "description", "category", "visibility", "avatar_url", \
        "stats", "created_at", "last_updated"

    def __init__(self, name: str, namespace: Namespace, description: str, category: str,
        visibility: str, avatar_url: str, stats: ProjectStats, created_at: str, last_updated: str
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.description = description
        self.category = category
        self.visibility = visibility
        self.avatar_url = avatar_url
        self.stats = stats
        self.created_at = created_at
        self.last_updated = last_updated

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Project":
        check_type(value, dict, path)
        namespace = get_field(value, "namespace", dict, path)
        return cls(
            get_field(value, "name", str, path),
            Namespace(get_field(namespace, "owner", str, f"{path}/namespace"), get_field(namespace, "slug", str, f"{path}/namespace")),
            get_field(value, "description", str, path, ""),
            get_field(value, "category", str, path, "undefined"),
            get_field(value, "visibility", str, path, "public"),
            get_field(value, "avatarUrl", str, path, ""),
            ProjectStats.from_json(value.get("stats", {}), f"{path}/stats"),
            get_field(value, "createdAt", str, path),
            get_field(value, "lastUpdated", str, path))

    def __repr__(self) -> str:
        return f"<Project {self.namespace}>"


class FileInfo:
    __slots__ = "name", "size_bytes", "sha256_hash"
    def __init__(self, name: str, size_bytes: int, sha256_hash: str) -> None:
        self.name = name
        self.size_bytes = size_bytes
        self.sha256_hash = sha256_hash


class PlatformDownload:
    """The download of a version for a platform, it's either hosted on Hangar
    (`download_url` is set) or external (`external_url` is set), file info is only
    known for hosted files.
    """

    __slots__ = "file_info", "download_url", "external_url"

    def __init__(self, file_info: Optional[FileInfo], download_url: Optional[str], external_url: Optional[str]) -> None:
        self.file_info = file_info
        self.download_url = download_url
        self.external_url = external_url

    def is_external(self) -> bool:
        return self.download_url is None

    def get_url(self) -> str:
        return self.download_url if self.download_url is not None else self.external_url or ""

    @classmethod
    def from_json(cls, value: Any, path: str) -> "PlatformDownload":

        check_type(value, dict, path)

        file_info = None
        file_info_raw = get_field(value, "fileInfo", dict, path, None)
        if file_info_raw is not None:
            file_info = FileInfo(
                get_field(file_info_raw, "name", str, f"{path}/fileInfo"),
                get_field(file_info_raw, "sizeBytes", int, f"{path}/fileInfo"),
                get_field(file_info_raw, "sha256Hash", str, f"{path}/fileInfo"))

        download_url = get_field(value, "downloadUrl", str, path, None)
        external_url = get_field(value, "externalUrl", str, path, None)
        if download_url is None and external_url is None:
            raise ValueError(f"{path} must have a 'downloadUrl' or an 'externalUrl'")

        return cls(file_info, download_url, external_url)


class PluginDependency:
    __slots__ = "name", "required", "external_url", "platform"
    def __init__(self, name: str, required: bool, external_url: Optional[str], platform: str) -> None:
        self.name = name
        self.required = required
        self.external_url = external_url
        self.platform = platform


class ProjectChannel:
    __slots__ = "name", "description", "color", "flags", "created_at"
    def __init__(self, name: str, description: str, color: str, flags: List[str], created_at: str) -> None:
        self.name = name
        self.description = description
        self.color = color
        self.flags = flags
        self.created_at = created_at


class ProjectVersion:
    """A version of a project, with its downloads and dependencies by platform.
    """

    __slots__ = "name", "description", "author", "created_at", "visibility", "review_state", \
        "pinned_status", "channel", "total_downloads", "platform_downloads", "downloads", \
        "plugin_dependencies", "platform_dependencies"

    def __init__(self, name: str) -> None:
        self.name = name
        self.description = ""
        self.author = ""
        self.created_at = ""
        self.visibility = "public"
        self.review_state = "unreviewed"
        self.pinned_status = "NONE"
        self.channel: Optional[ProjectChannel] = None
        self.total_downloads = 0
        self.platform_downloads: Dict[str, int] = {}
        self.downloads: Dict[str, PlatformDownload] = {}
        self.plugin_dependencies: Dict[str, List[PluginDependency]] = {}
        self.platform_dependencies: Dict[str, List[str]] = {}

    @classmethod
    def from_json(cls, value: Any, path: str) -> "ProjectVersion":

        check_type(value, dict, path)

        version = cls(get_field(value, "name", str, path))
        version.description = get_field(value, "description", str, path, "")
        version.author = get_field(value, "author", str, path, "")
        version.created_at = get_field(value, "createdAt", str, path, "")
        version.visibility = get_field(value, "visibility", str, path, "public")
        version.review_state = get_field(value, "reviewState", str, path, "unreviewed")
        version.pinned_status = get_field(value, "pinnedStatus", str, path, "NONE")

        channel = get_field(value, "channel", dict, path, None)
        if channel is not None:
            flags = get_field(channel, "flags", list, f"{path}/channel", [])
            version.channel = ProjectChannel(
                get_field(channel, "name", str, f"{path}/channel"),
                get_field(channel, "description", str, f"{path}/channel", ""),
                get_field(channel, "color", str, f"{path}/channel", ""),
                [check_type(flag, str, f"{path}/channel/flags/{i}") for i, flag in enumerate(flags)],
                get_field(channel, "createdAt", str, f"{path}/channel", ""))

        stats = get_field(value, "stats", dict, path, {})
        version.total_downloads = get_field(stats, "totalDownloads", int, f"{path}/stats", 0)
        for platform, count in get_field(stats, "platformDownloads", dict, f"{path}/stats", {}).items():
            version.platform_downloads[platform] = check_type(count, int, f"{path}/stats/platformDownloads/{platform}")

        for platform, download in get_field(value, "downloads", dict, path, {}).items():
            version.downloads[platform] = PlatformDownload.from_json(download, f"{path}/downloads/{platform}")

        for platform, deps in get_field(value, "pluginDependencies", dict, path, {}).items():
            deps_path = f"{path}/pluginDependencies/{platform}"
            version.plugin_dependencies[platform] = []
            for i, dep in enumerate(check_type(deps, list, deps_path)):
                check_type(dep, dict, f"{deps_path}/{i}")
                version.plugin_dependencies[platform].append(PluginDependency(
                    get_field(dep, "name", str, f"{deps_path}/{i}"),
                    get_field(dep, "required", bool, f"{deps_path}/{i}", False),
                    get_field(dep, "externalUrl", str, f"{deps_path}/{i}", None),
                    get_field(dep, "platform", str, f"{deps_path}/{i}", platform)))

        for platform, game_versions in get_field(value, "platformDependencies", dict, path, {}).items():
            deps_path = f"{path}/platformDependencies/{platform}"
            version.platform_dependencies[platform] = \
                [check_type(v, str, f"{deps_path}/{i}") for i, v in enumerate(check_type(game_versions, list, deps_path))]

        return version

    def __repr__(self) -> str:
        return f"<ProjectVersion {self.name}>"


class Pagination:
    __slots__ = "limit", "offset", "count"
    def __init__(self, limit: int, offset: int, count: int) -> None:
        self.limit = limit
        self.offset = offset
        self.count = count


class ProjectVersionsResponse:
    __slots__ = "pagination", "result"
    def __init__(self, pagination: Pagination, result: List[ProjectVersion]) -> None:
        self.pagination = pagination
        self.result = result


class VersionsFilter:
    """Filter and pagination of the versions of a project.
    """

    __slots__ = "limit", "offset", "channel", "platform", "platform_version"

    def __init__(self, limit: int = 25, offset: int = 0, *,
        channel: Optional[str] = None,
        platform: Optional[str] = None,
        platform_version: Optional[str] = None
    ) -> None:
        self.limit = limit
        self.offset = offset
        self.channel = channel
        self.platform = platform
        self.platform_version = platform_version

    def to_query(self) -> Dict[str, Any]:
        return {
            "limit": self.limit,
            "offset": self.offset,
            "channel": self.channel,
            "platform": self.platform,
            "platformVersion": self.platform_version,
        }


def fetch_project(id: str) -> Project:
    """Fetch a project by its slug or identifier.

    :raises HangarError: If the project doesn't exist.
    """
    return Project.from_json(_request(f"/projects/{id}").json(), f"hangar: /projects/{id}")


def fetch_project_versions(id: str, filter: Optional[VersionsFilter] = None) -> ProjectVersionsResponse:
    """Fetch versions of a project, a default filter returns the 25 latest versions.
    """

    if filter is None:
        filter = VersionsFilter()

    path = f"hangar: /projects/{id}/versions"
    data = check_type(_request(f"/projects/{id}/versions", filter.to_query()).json(), dict, path)

    pagination = get_field(data, "pagination", dict, path)
    result = get_field(data, "result", list, path)

    return ProjectVersionsResponse(
        Pagination(
            get_field(pagination, "limit", int, f"{path}/pagination"),
            get_field(pagination, "offset", int, f"{path}/pagination"),
            get_field(pagination, "count", int, f"{path}/pagination")),
        [ProjectVersion.from_json(v, f"{path}/result/{i}") for i, v in enumerate(result)])


def fetch_project_version(id: str, name: str) -> ProjectVersion:
    path = f"/projects/{id}/versions/{name}"
    return ProjectVersion.from_json(_request(path).json(), f"hangar: {path}")


def fetch_latest_project_version(id: str, channel: str) -> str:
    """Return the name of the latest version of a project in the given channel.
    """
    return _request(f"/projects/{id}/latest", {"channel": channel}, "text/plain").text()


def fetch_latest_project_release(id: str) -> str:
    """Return the name of the latest release version of a project.
    """
    return _request(f"/projects/{id}/latestrelease", accept="text/plain").text()


def download_project_version(id: str, name: str, platform: str) -> HttpResponse:
    """Download the file of a version for the given platform.

    :raises ValueError: If the platform is unknown.
    :raises HttpError: If the file cannot be downloaded.
    """
    platform = platform.upper()
    if platform not in PLATFORMS:
        raise ValueError(f"unknown platform: {platform}")
    return http_request("GET", f"{API_V1}/projects/{id}/versions/{name}/{platform}/download")
