"""Client for the Forge maven repository, listing the loader versions available for each
game version and the recommended/latest promotions.
"""

from .util import LibrarySpecifier, check_type
from .http import HttpResponse, http_request

from typing import Dict, List, Optional


FORGE_REPO_URL = "https://maven.minecraftforge.net/"
FORGE_MANIFEST_URL = "https://files.minecraftforge.net/net/minecraftforge/forge/maven-metadata.json"
FORGE_PROMOTIONS_URL = "https://files.minecraftforge.net/net/minecraftforge/forge/promotions_slim.json"

_FORGE_GROUP = "net.minecraftforge"
_FORGE_ARTIFACT = "forge"


def fetch_versions() -> Dict[str, List[str]]:
    """Fetch all Forge versions, mapped by game version. Forge versions are of the
    form `<game>-<forge>`, like `1.20.1-47.2.0`.

    :raises HttpError: If the versions cannot be fetched.
    """

    path = "forge: "
    data = check_type(http_request("GET", FORGE_MANIFEST_URL, accept="application/json").json(), dict, path)

    for game_version, forge_versions in data.items():
        check_type(forge_versions, list, f"{path}/{game_version}")
        for i, forge_version in enumerate(forge_versions):
            check_type(forge_version, str, f"{path}/{game_version}/{i}")

    return data


def fetch_promo_versions() -> Dict[str, str]:
    """Fetch recommended and latest versions for each supported game release, keys are
    like `1.20.1-recommended` or `1.20.1-latest` and values are loader versions.

    :raises HttpError: If the promotions cannot be fetched.
    """
    data = check_type(http_request("GET", FORGE_PROMOTIONS_URL, accept="application/json").json(), dict, "forge promotions: ")
    return check_type(data.get("promos"), dict, "forge promotions: /promos")


def resolve_promo_version(game_version: str, promos: Dict[str, str]) -> Optional[str]:
    """Resolve the full forge version (`<game>-<forge>`) of the recommended version of
    the game version, or the latest one if there is no recommended version.
    """
    for alias in ("recommended", "latest"):
        loader_version = promos.get(f"{game_version}-{alias}")
        if loader_version is not None:
            return f"{game_version}-{loader_version}"
    return None


def installer_url(forge_version: str) -> str:
    """Return the URL of the installer JAR of a full forge version (`<game>-<forge>`).
    """
    spec = LibrarySpecifier(_FORGE_GROUP, _FORGE_ARTIFACT, forge_version, classifier="installer")
    return spec.repository_url(FORGE_REPO_URL)


def download_installer(forge_version: str) -> HttpResponse:
    """Download the installer JAR of a full forge version.

    :raises HttpError: If the installer cannot be downloaded.
    """
    return http_request("GET", installer_url(forge_version), accept="application/java-archive")
