"""Client for the Fabric and Quilt metadata services. Both services share the same
endpoints, so the same `FabricApi` class is used with two different base URLs.
"""

from .util import check_type, get_field
from .http import HttpResponse, http_request

from typing import Optional, Any, List


class FabricGameVersion:
    """A game version supported by the mod loader.
    """
    __slots__ = "version", "stable"
    def __init__(self, version: str, stable: bool) -> None:
        self.version = version
        self.stable = stable

    def __repr__(self) -> str:
        return f"<FabricGameVersion {self.version}>"


class FabricLoader:
    """A version of the mod loader. Quilt doesn't give the stability of its loaders,
    they are considered unstable.
    """
    __slots__ = "separator", "build", "maven", "version", "stable"
    def __init__(self, separator: str, build: int, maven: str, version: str, stable: bool) -> None:
        self.separator = separator
        self.build = build
        self.maven = maven
        self.version = version
        self.stable = stable

    def __repr__(self) -> str:
        return f"<FabricLoader {self.version}>"


class FabricInstaller:
    """A version of the mod loader's installer.
    """
    __slots__ = "url", "maven", "version", "stable"
    def __init__(self, url: str, maven: str, version: str, stable: bool) -> None:
        self.url = url
        self.maven = maven
        self.version = version
        self.stable = stable

    def __repr__(self) -> str:
        return f"<FabricInstaller {self.version}>"


class FabricApi:
    """This class is internally used to defined two constant for both official Fabric
    backend API and Quilt API which have the same endpoints. So we use the same logic
    for both mod loaders.
    """

    def __init__(self, name: str, api_url: str) -> None:
        self.name = name
        self.api_url = api_url

    def request_fabric_meta(self, method: str) -> Any:
        """Generic HTTP request to the fabric's REST API.
        """
        return http_request("GET", f"{self.api_url}{method}", accept="application/json").json()

    def fetch_game_versions(self) -> List[FabricGameVersion]:
        """Fetch all game versions supported by the mod loader.
        """
        path = f"{self.name}: /versions/game"
        versions = check_type(self.request_fabric_meta("versions/game"), list, path)
        return [self._parse_game_version(obj, f"{path}/{i}") for i, obj in enumerate(versions)]

    def fetch_loaders(self) -> List[FabricLoader]:
        """Fetch all loader versions, the latest is the first one.
        """
        path = f"{self.name}: /versions/loader"
        loaders = check_type(self.request_fabric_meta("versions/loader"), list, path)
        return [self._parse_loader(obj, f"{path}/{i}") for i, obj in enumerate(loaders)]

    def fetch_installers(self) -> List[FabricInstaller]:
        """Fetch all installer versions, the latest is the first one.
        """
        path = f"{self.name}: /versions/installer"
        installers = check_type(self.request_fabric_meta("versions/installer"), list, path)
        return [self._parse_installer(obj, f"{path}/{i}") for i, obj in enumerate(installers)]

    def fetch_latest_loader(self, stable: bool = False) -> Optional[FabricLoader]:
        """Return the latest loader, or the latest stable one if requested.
        """
        for loader in self.fetch_loaders():
            if loader.stable or not stable:
                return loader
        return None

    def fetch_loader_profile(self, game_version: str, loader_version: str) -> dict:
        """Return the version metadata (profile) for the given game version and loader,
        it uses the format of Mojang's version metadata and inherits from the vanilla
        version.
        """
        return self.request_fabric_meta(f"versions/loader/{game_version}/{loader_version}/profile/json")

    def _parse_game_version(self, value: Any, path: str) -> FabricGameVersion:
        check_type(value, dict, path)
        return FabricGameVersion(
            get_field(value, "version", str, path),
            get_field(value, "stable", bool, path, False))

    def _parse_loader(self, value: Any, path: str) -> FabricLoader:
        check_type(value, dict, path)
        return FabricLoader(
            get_field(value, "separator", str, path),
            get_field(value, "build", int, path),
            get_field(value, "maven", str, path),
            get_field(value, "version", str, path),
            get_field(value, "stable", bool, path, False))

    def _parse_installer(self, value: Any, path: str) -> FabricInstaller:
        check_type(value, dict, path)
        return FabricInstaller(
            get_field(value, "url", str, path),
            get_field(value, "maven", str, path),
            get_field(value, "version", str, path),
            get_field(value, "stable", bool, path, False))

    def __repr__(self) -> str:
        return f"<FabricApi {self.name}>"


FABRIC_API = FabricApi("fabric", "https://meta.fabricmc.net/v2/")
QUILT_API = FabricApi("quilt", "https://meta.quiltmc.org/v3/")


def server_jar_url(game_version: str, loader_version: str, installer_version: str) -> str:
    """Return the URL of the Fabric server launcher JAR, Quilt doesn't provide one.
    """
    return f"{FABRIC_API.api_url}versions/loader/{game_version}/{loader_version}/{installer_version}/server/jar"


def download_server_jar(game_version: str, loader_version: str, installer_version: str) -> HttpResponse:
    """Download the Fabric server launcher JAR for the given versions.

    :raises HttpError: If the JAR cannot be downloaded.
    """
    return http_request("GET", server_jar_url(game_version, loader_version, installer_version),
        accept="application/java-archive")
