"""Client for the Quilt installer, distributed through the Quilt maven repository.

Unlike Fabric, Quilt provides no server launcher JAR, a server must be installed with
the installer. The metadata service is available as `QUILT_API`.
"""

import xml.etree.ElementTree as ET

from .fabric import QUILT_API
from .http import HttpResponse, http_request

from typing import Optional, List


__all__ = ["QUILT_API", "QUILT_MAVEN_URL", "InstallerVariant", "fetch_installer_versions",
    "download_installer"]


QUILT_MAVEN_URL = "https://maven.quiltmc.org/repository/release/"
_INSTALLER_UNIVERSAL_PATH = "org/quiltmc/quilt-installer/"
_INSTALLER_NATIVE_PATH = "org/quiltmc/quilt-installer-native-bootstrap/"


class InstallerVariant:
    """A variant of the Quilt installer, the universal one is a JAR file, native ones
    are executables for a given target, like 'windows-x86_64' or 'linux-x86_64'.
    """

    __slots__ = "target",

    def __init__(self, target: Optional[str]) -> None:
        self.target = target

    @classmethod
    def universal(cls) -> "InstallerVariant":
        return cls(None)

    @classmethod
    def native(cls, target: str) -> "InstallerVariant":
        return cls(target)

    def is_universal(self) -> bool:
        return self.target is None

    def base_url(self) -> str:
        if self.target is None:
            return f"{QUILT_MAVEN_URL}{_INSTALLER_UNIVERSAL_PATH}"
        return f"{QUILT_MAVEN_URL}{_INSTALLER_NATIVE_PATH}{self.target}/"

    def metadata_url(self) -> str:
        """Return the URL of the maven metadata listing versions of this variant.
        """
        return f"{self.base_url()}maven-metadata.xml"

    def artifact_url(self, version: str) -> str:
        """Return the URL of this variant's installer for the given version.
        """
        if self.target is None:
            return f"{self.base_url()}{version}/quilt-installer-{version}.jar"
        ext = ".exe" if self.target.startswith("windows") else ""
        return f"{self.base_url()}{version}/{self.target}-{version}{ext}"

    def fetch_versions(self) -> List[str]:
        return fetch_installer_versions(self)

    def __repr__(self) -> str:
        return f"<InstallerVariant {self.target or 'universal'}>"


def fetch_installer_versions(variant: InstallerVariant) -> List[str]:
    """Fetch all versions of the given installer variant, in the repository order.

    :raises HttpError: If the metadata cannot be fetched.
    :raises xml.etree.ElementTree.ParseError: If the metadata is not valid XML.
    """
    text = http_request("GET", variant.metadata_url(), accept="application/xml").text()
    root = ET.fromstring(text)
    return [elt.text for elt in root.iterfind("versioning/versions/version") if elt.text is not None]


def download_installer(variant: InstallerVariant, version: str) -> HttpResponse:
    """Download the installer of the given variant and version.

    :raises HttpError: If the installer cannot be downloaded.
    """
    return http_request("GET", variant.artifact_url(version))
