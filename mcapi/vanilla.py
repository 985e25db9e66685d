"""Client for Mojang's launcher API (piston-meta), providing the version manifest, the
version metadata of every vanilla version, their asset indexes and the download of
libraries and assets.

The version metadata contains libraries, natives and arguments conditioned by rules,
see `mcapi.rules.RuleMatcher` to interpret them against a host.
"""

from io import BytesIO

from .rules import RuleMatcher, Rule, Argument, PatternError, parse_rules, parse_arguments
from .util import NotFoundError, LibrarySpecifier, calc_input_sha1, check_type, get_field
from .http import HttpResponse, http_request
from .watcher import Watcher

from typing import Optional, Dict, List, Tuple, Any


VERSION_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
RESOURCES_URL = "https://resources.download.minecraft.net/"
LIBRARIES_URL = "https://libraries.minecraft.net/"

VERSION_TYPES = ("release", "snapshot", "old_beta", "old_alpha")


class ArtifactError(Exception):
    """Raised when a downloaded artifact doesn't match its expected size or SHA-1.
    """

    INVALID_SIZE = "invalid_size"
    INVALID_SHA1 = "invalid_sha1"

    def __init__(self, code: str, url: str) -> None:
        self.code = code
        self.url = url

    def __str__(self) -> str:
        return f"{self.code}: {self.url}"


class Artifact:
    """A downloadable file described by the metadata, size and SHA-1 may be unknown for
    libraries that are only given by their maven repository. The path is only present
    for library files, and the id and total size only for some index files.
    """

    __slots__ = "url", "sha1", "size", "path", "id", "total_size"

    def __init__(self, url: str, sha1: Optional[str] = None, size: Optional[int] = None, *,
        path: Optional[str] = None,
        id: Optional[str] = None,
        total_size: Optional[int] = None
    ) -> None:
        self.url = url
        self.sha1 = sha1
        self.size = size
        self.path = path
        self.id = id
        self.total_size = total_size

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Artifact":
        check_type(value, dict, path)
        return cls(
            get_field(value, "url", str, path),
            get_field(value, "sha1", str, path, None),
            get_field(value, "size", int, path, None),
            path=get_field(value, "path", str, path, None),
            id=get_field(value, "id", str, path, None),
            total_size=get_field(value, "totalSize", int, path, None))

    def download(self, *, verify: bool = True) -> HttpResponse:
        """Download this artifact.

        :param verify: Check the size and SHA-1 of the received data, if known.
        :raises HttpError: If the artifact cannot be downloaded.
        :raises ArtifactError: If the received data is not the expected one.
        """
        res = http_request("GET", self.url)
        if verify:
            check_data(res.data, self.url, self.size, self.sha1)
        return res

    def __repr__(self) -> str:
        return f"<Artifact {self.url}>"


class Library:
    """A library of a version metadata. The artifact is the main file of the library,
    natives are a mapping from OS name to classifier (possibly containing an `${arch}`
    placeholder) and classifiers map to the native artifacts.
    """

    __slots__ = "name", "artifact", "natives", "classifiers", "rules", "url"

    def __init__(self, name: str, artifact: Optional[Artifact] = None, *,
        natives: Optional[Dict[str, str]] = None,
        classifiers: Optional[Dict[str, Artifact]] = None,
        rules: Optional[List[Rule]] = None,
        url: Optional[str] = None
    ) -> None:
        self.name = name
        self.artifact = artifact
        self.natives = {} if natives is None else natives
        self.classifiers = {} if classifiers is None else classifiers
        self.rules = [] if rules is None else rules
        self.url = url

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Library":

        check_type(value, dict, path)

        name = get_field(value, "name", str, path)
        artifact = None
        classifiers = {}

        downloads = get_field(value, "downloads", dict, path, None)
        if downloads is not None:

            artifact_raw = downloads.get("artifact")
            if artifact_raw is not None:
                artifact = Artifact.from_json(artifact_raw, f"{path}/downloads/artifact")

            classifiers_raw = get_field(downloads, "classifiers", dict, f"{path}/downloads", {})
            for classifier, classifier_raw in classifiers_raw.items():
                classifiers[classifier] = Artifact.from_json(classifier_raw, f"{path}/downloads/classifiers/{classifier}")

        natives = get_field(value, "natives", dict, path, {})
        for os_name, classifier in natives.items():
            check_type(classifier, str, f"{path}/natives/{os_name}")

        rules_raw = value.get("rules")
        rules = [] if rules_raw is None else parse_rules(rules_raw, f"{path}/rules")

        return cls(name, artifact,
            natives=dict(natives),
            classifiers=classifiers,
            rules=rules,
            url=get_field(value, "url", str, path, None))

    def get_artifact(self) -> Optional[Artifact]:
        """Return the main artifact of this library. If the metadata gives no explicit
        artifact but a maven repository URL, the artifact is deduced from the library
        name, without size and SHA-1.
        """
        if self.artifact is not None:
            return self.artifact
        if self.url is not None:
            spec = LibrarySpecifier.from_str(self.name)
            return Artifact(spec.repository_url(self.url), path=spec.file_path())
        return None

    def get_native(self, classifier: str) -> Optional[Artifact]:
        return self.classifiers.get(classifier)

    def get_artifact_path(self) -> Optional[str]:
        artifact = self.get_artifact()
        return None if artifact is None else artifact.path

    def get_native_path(self, classifier: str) -> Optional[str]:
        native = self.get_native(classifier)
        return None if native is None else native.path

    def download_artifact(self, *, verify: bool = True) -> Optional[HttpResponse]:
        """Download the main artifact of this library, if there is one.
        """
        artifact = self.get_artifact()
        return None if artifact is None else artifact.download(verify=verify)

    def download_native(self, classifier: str, *, verify: bool = True) -> Optional[HttpResponse]:
        """Download the native artifact of the given classifier, if there is one.
        """
        native = self.get_native(classifier)
        return None if native is None else native.download(verify=verify)

    def __repr__(self) -> str:
        return f"<Library {self.name}>"


class VersionArguments:
    """Modern arguments of a version, since 1.13.
    """

    __slots__ = "game", "jvm"

    def __init__(self, game: Optional[List[Argument]], jvm: Optional[List[Argument]]) -> None:
        self.game = game
        self.jvm = jvm


class VersionDownloads:
    """Main downloads of a version, only the client is present on all versions.
    """

    __slots__ = "client", "client_mappings", "server", "server_mappings", "windows_server"

    def __init__(self,
        client: Optional[Artifact] = None,
        client_mappings: Optional[Artifact] = None,
        server: Optional[Artifact] = None,
        server_mappings: Optional[Artifact] = None,
        windows_server: Optional[Artifact] = None
    ) -> None:
        self.client = client
        self.client_mappings = client_mappings
        self.server = server
        self.server_mappings = server_mappings
        self.windows_server = windows_server

    @classmethod
    def from_json(cls, value: Any, path: str) -> "VersionDownloads":
        check_type(value, dict, path)
        downloads = cls()
        for name in cls.__slots__:
            raw = value.get(name)
            if raw is not None:
                setattr(downloads, name, Artifact.from_json(raw, f"{path}/{name}"))
        return downloads


class JavaVersion:
    """The Java runtime required by a version.
    """

    __slots__ = "component", "major_version"

    def __init__(self, component: str, major_version: int) -> None:
        self.component = component
        self.major_version = major_version


class VersionLogging:
    """The client logging configuration of a version, the argument contains a `${path}`
    placeholder for the configuration file.
    """

    __slots__ = "argument", "file", "type"

    def __init__(self, argument: str, file: Artifact, type: str) -> None:
        self.argument = argument
        self.file = file
        self.type = type


class LibrariesResolvingEvent:
    """Event triggered when libraries of a version start being resolved.
    """
    __slots__ = "version",
    def __init__(self, version: str) -> None:
        self.version = version

class LibrarySkippedEvent:
    """Event triggered when a library is skipped because its rules cannot be evaluated.
    """
    __slots__ = "library", "error"
    def __init__(self, library: Library, error: PatternError) -> None:
        self.library = library
        self.error = error

class LibrariesResolvedEvent:
    """Event triggered when all libraries of a version have been resolved.
    """
    __slots__ = "version", "count", "natives_count"
    def __init__(self, version: str, count: int, natives_count: int) -> None:
        self.version = version
        self.count = count
        self.natives_count = natives_count


class ResolvedLibrary:
    """A library to download for a host, with its main artifact and its native artifact
    (both optional).
    """

    __slots__ = "library", "artifact", "native"

    def __init__(self, library: Library, artifact: Optional[Artifact], native: Optional[Artifact]) -> None:
        self.library = library
        self.artifact = artifact
        self.native = native

    def __repr__(self) -> str:
        return f"<ResolvedLibrary {self.library.name}, native: {self.native is not None}>"


class VersionInfo:
    """The full metadata of a vanilla version.
    """

    def __init__(self, id: str, type: str, main_class: str) -> None:
        self.id = id
        self.type = type
        self.main_class = main_class
        self.assets: Optional[str] = None
        self.asset_index: Optional[Artifact] = None
        self.java_version: Optional[JavaVersion] = None
        self.libraries: List[Library] = []
        self.downloads = VersionDownloads()
        self.arguments: Optional[VersionArguments] = None
        self.minecraft_arguments: Optional[str] = None
        self.logging: Optional[VersionLogging] = None
        self.compliance_level: Optional[int] = None
        self.minimum_launcher_version: Optional[int] = None
        self.time: Optional[str] = None
        self.release_time: Optional[str] = None

    @classmethod
    def from_json(cls, value: Any, path: str = "metadata: ") -> "VersionInfo":
        """Parse the version metadata, the path is only used as prefix of errors.
        """

        check_type(value, dict, path)

        info = cls(
            get_field(value, "id", str, path),
            get_field(value, "type", str, path, "release"),
            get_field(value, "mainClass", str, path))

        info.assets = get_field(value, "assets", str, path, None)

        asset_index = value.get("assetIndex")
        if asset_index is not None:
            info.asset_index = Artifact.from_json(asset_index, f"{path}/assetIndex")

        java_version = get_field(value, "javaVersion", dict, path, None)
        if java_version is not None:
            info.java_version = JavaVersion(
                get_field(java_version, "component", str, f"{path}/javaVersion", "jre-legacy"),
                get_field(java_version, "majorVersion", int, f"{path}/javaVersion"))

        libraries = get_field(value, "libraries", list, path, [])
        info.libraries = [Library.from_json(lib, f"{path}/libraries/{i}") for i, lib in enumerate(libraries)]

        downloads = value.get("downloads")
        if downloads is not None:
            info.downloads = VersionDownloads.from_json(downloads, f"{path}/downloads")

        arguments = get_field(value, "arguments", dict, path, None)
        if arguments is not None:
            game = arguments.get("game")
            jvm = arguments.get("jvm")
            info.arguments = VersionArguments(
                None if game is None else parse_arguments(game, f"{path}/arguments/game"),
                None if jvm is None else parse_arguments(jvm, f"{path}/arguments/jvm"))

        info.minecraft_arguments = get_field(value, "minecraftArguments", str, path, None)

        logging = get_field(value, "logging", dict, path, None)
        if logging is not None:
            client_logging = get_field(logging, "client", dict, f"{path}/logging", None)
            if client_logging is not None:
                logging_path = f"{path}/logging/client"
                info.logging = VersionLogging(
                    get_field(client_logging, "argument", str, logging_path),
                    Artifact.from_json(client_logging.get("file"), f"{logging_path}/file"),
                    get_field(client_logging, "type", str, logging_path, ""))

        info.compliance_level = get_field(value, "complianceLevel", int, path, None)
        info.minimum_launcher_version = get_field(value, "minimumLauncherVersion", int, path, None)
        info.time = get_field(value, "time", str, path, None)
        info.release_time = get_field(value, "releaseTime", str, path, None)

        return info

    def fetch_asset_index(self) -> "AssetIndex":
        """Fetch the asset index of this version.

        :raises ValueError: If this version has no asset index.
        :raises HttpError: If the index cannot be fetched.
        """
        if self.asset_index is None:
            raise ValueError(f"version {self.id} has no asset index")
        res = http_request("GET", self.asset_index.url, accept="application/json")
        return AssetIndex.from_json(res.json(), f"asset index {self.asset_index.id or self.assets}: ")

    def jvm_args(self, matcher: RuleMatcher, replacements: Dict[str, str]) -> List[str]:
        """Build the JVM arguments of this version for the given matcher. Versions
        older than 1.13 have no JVM arguments, the defaults used by the official
        launcher are used in such case.

        :raises PatternError: If an OS version pattern that is evaluated is invalid.
        """
        if self.arguments is not None and self.arguments.jvm is not None:
            return matcher.build_args(self.arguments.jvm, replacements)
        return matcher.build_args(LEGACY_JVM_ARGS, replacements)

    def game_args(self, matcher: RuleMatcher, replacements: Dict[str, str]) -> List[str]:
        """Build the game arguments of this version for the given matcher. Versions
        older than 1.13 only have a legacy arguments string, split on spaces.

        :raises PatternError: If an OS version pattern that is evaluated is invalid.
        """
        if self.arguments is not None and self.arguments.game is not None:
            return matcher.build_args(self.arguments.game, replacements)
        if self.minecraft_arguments is not None:
            return matcher.build_args(self.minecraft_arguments.split(), replacements)
        return []

    def resolve_libraries(self, matcher: RuleMatcher, watcher: Optional[Watcher] = None, *,
        skip_invalid: bool = False
    ) -> List[ResolvedLibrary]:
        """Resolve which libraries and natives should be downloaded for the matcher's
        host, in the metadata order. Libraries excluded by their rules, or with neither
        an artifact nor a native artifact for the host, are not returned.

        :param skip_invalid: Skip libraries whose rules contain an invalid OS version
        pattern instead of raising, a `LibrarySkippedEvent` is sent to the watcher.
        :raises PatternError: If an OS version pattern is invalid and not skipped.
        """

        if watcher is None:
            watcher = Watcher()

        watcher.handle(LibrariesResolvingEvent(self.id))

        resolved = []
        natives_count = 0
        for library in self.libraries:

            try:
                if not matcher.should_download_library(library):
                    continue
            except PatternError as error:
                if not skip_invalid:
                    raise
                watcher.handle(LibrarySkippedEvent(library, error))
                continue

            native = matcher.get_native_library(library)
            artifact = library.get_artifact()
            if artifact is None and native is None:
                continue

            if native is not None:
                natives_count += 1

            resolved.append(ResolvedLibrary(library, artifact, native))

        watcher.handle(LibrariesResolvedEvent(self.id, len(resolved), natives_count))
        return resolved

    def __repr__(self) -> str:
        return f"<VersionInfo {self.id}>"


class VersionIndex:
    """A version entry of the version manifest, pointing to its full metadata.
    """

    __slots__ = "id", "type", "url", "time", "release_time", "sha1", "compliance_level"

    def __init__(self, id: str, type: str, url: str, time: str, release_time: str, *,
        sha1: Optional[str] = None,
        compliance_level: Optional[int] = None
    ) -> None:
        self.id = id
        self.type = type
        self.url = url
        self.time = time
        self.release_time = release_time
        self.sha1 = sha1
        self.compliance_level = compliance_level

    @classmethod
    def from_json(cls, value: Any, path: str) -> "VersionIndex":
        check_type(value, dict, path)
        return cls(
            get_field(value, "id", str, path),
            get_field(value, "type", str, path),
            get_field(value, "url", str, path),
            get_field(value, "time", str, path),
            get_field(value, "releaseTime", str, path),
            sha1=get_field(value, "sha1", str, path, None),
            compliance_level=get_field(value, "complianceLevel", int, path, None))

    def fetch(self) -> VersionInfo:
        """Fetch the full metadata of this version.

        :raises HttpError: If the metadata cannot be fetched.
        """
        res = http_request("GET", self.url, accept="application/json")
        return VersionInfo.from_json(res.json(), f"metadata {self.id}: ")

    def __repr__(self) -> str:
        return f"<VersionIndex {self.id} ({self.type})>"


class VersionManifest:
    """The Mojang's official version manifest, listing all available versions and the
    latest release and snapshot.
    """

    def __init__(self, latest_release: str, latest_snapshot: str, versions: List[VersionIndex]) -> None:
        self.latest_release = latest_release
        self.latest_snapshot = latest_snapshot
        self.versions = versions

    @classmethod
    def from_json(cls, value: Any, path: str = "manifest: ") -> "VersionManifest":
        check_type(value, dict, path)
        latest = get_field(value, "latest", dict, path)
        versions = get_field(value, "versions", list, path)
        return cls(
            get_field(latest, "release", str, f"{path}/latest"),
            get_field(latest, "snapshot", str, f"{path}/latest"),
            [VersionIndex.from_json(v, f"{path}/versions/{i}") for i, v in enumerate(versions)])

    def filter_latest(self, version: str) -> Tuple[str, bool]:
        """Filter a version identifier if 'release' or 'snapshot' alias is used, then it's
        replaced by the full version identifier, like `1.19.3`.

        :param version: The version id or alias.
        :return: A tuple containing the full version id and a boolean indicating if the
        given version identifier is an alias.
        """
        if version == "release":
            return self.latest_release, True
        elif version == "snapshot":
            return self.latest_snapshot, True
        return version, False

    def find(self, version: str) -> Optional[VersionIndex]:
        """Find a version in the manifest, aliases are supported.
        """
        version, _alias = self.filter_latest(version)
        for index in self.versions:
            if index.id == version:
                return index
        return None

    def fetch(self, version: str) -> VersionInfo:
        """Fetch the full metadata of the given version, aliases are supported.

        :raises NotFoundError: If the version is not in the manifest.
        :raises HttpError: If the metadata cannot be fetched.
        """
        index = self.find(version)
        if index is None:
            raise NotFoundError(version)
        return index.fetch()

    def fetch_latest_release(self) -> VersionInfo:
        return self.fetch(self.latest_release)

    def fetch_latest_snapshot(self) -> VersionInfo:
        return self.fetch(self.latest_snapshot)


class Asset:
    """An asset object of an asset index, identified by its SHA-1 hash.
    """

    __slots__ = "hash", "size"

    def __init__(self, hash: str, size: int) -> None:
        self.hash = hash
        self.size = size

    def get_path(self) -> str:
        """Return the path of this asset, relative to the resources URL or to the
        objects directory, without leading or trailing slash.
        """
        return f"{self.hash[:2]}/{self.hash}"

    def get_url(self) -> str:
        return f"{RESOURCES_URL}{self.get_path()}"

    def download(self, *, verify: bool = True) -> HttpResponse:
        """Download this asset.

        :raises HttpError: If the asset cannot be downloaded.
        :raises ArtifactError: If the received data is not the expected one.
        """
        res = http_request("GET", self.get_url())
        if verify:
            check_data(res.data, self.get_url(), self.size, self.hash)
        return res

    def __repr__(self) -> str:
        return f"<Asset {self.hash}>"


class AssetIndex:
    """An asset index, mapping asset names to their objects. Old indexes are virtual or
    map to resources, meaning that assets are expected by their name by the game.
    """

    __slots__ = "objects", "map_to_resources", "virtual"

    def __init__(self, objects: Dict[str, Asset], map_to_resources: bool = False, virtual: bool = False) -> None:
        self.objects = objects
        self.map_to_resources = map_to_resources
        self.virtual = virtual

    @classmethod
    def from_json(cls, value: Any, path: str = "asset index: ") -> "AssetIndex":
        check_type(value, dict, path)
        objects = {}
        for name, obj in get_field(value, "objects", dict, path).items():
            obj_path = f"{path}/objects/{name}"
            check_type(obj, dict, obj_path)
            objects[name] = Asset(get_field(obj, "hash", str, obj_path), get_field(obj, "size", int, obj_path))
        return cls(objects,
            get_field(value, "map_to_resources", bool, path, False),
            get_field(value, "virtual", bool, path, False))


def fetch_version_manifest() -> VersionManifest:
    """Fetch the version manifest.

    :raises HttpError: If the manifest cannot be fetched.
    """
    res = http_request("GET", VERSION_MANIFEST_URL, accept="application/json")
    return VersionManifest.from_json(res.json())


def check_data(data: bytes, url: str, size: Optional[int], sha1: Optional[str]) -> None:
    """Check downloaded data against its expected size and SHA-1, if given.

    :raises ArtifactError: If the size or SHA-1 is not the expected one.
    """
    if size is not None and len(data) != size:
        raise ArtifactError(ArtifactError.INVALID_SIZE, url)
    if sha1 is not None and calc_input_sha1(BytesIO(data)) != sha1:
        raise ArtifactError(ArtifactError.INVALID_SHA1, url)


# JVM arguments used if no arguments are specified.
LEGACY_JVM_ARGS = parse_arguments([
    {
        "rules": [{"action": "allow", "os": {"name": "osx"}}],
        "value": ["-XstartOnFirstThread"]
    },
    {
        "rules": [{"action": "allow", "os": {"name": "windows"}}],
        "value": "-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump"
    },
    {
        "rules": [{"action": "allow", "os": {"name": "windows", "version": "^10\\."}}],
        "value": ["-Dos.name=Windows 10", "-Dos.version=10.0"]
    },
    "-Djava.library.path=${natives_directory}",
    "-Dminecraft.launcher.brand=${launcher_name}",
    "-Dminecraft.launcher.version=${launcher_version}",
    "-cp",
    "${classpath}"
], "legacy jvm arguments: ")
