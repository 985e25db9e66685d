import pytest


METADATA = {
    "id": "1.20.4",
    "type": "release",
    "mainClass": "net.minecraft.client.main.Main",
    "assets": "12",
    "assetIndex": {
        "id": "12",
        "sha1": "4b1a2ea1fdd9ec3e5e0f6b4a1e0fc0b3e0a1c2d3",
        "size": 413604,
        "totalSize": 629107291,
        "url": "https://piston-meta.mojang.com/v1/packages/4b1a/12.json"
    },
    "javaVersion": {"component": "java-runtime-gamma", "majorVersion": 17},
    "complianceLevel": 1,
    "minimumLauncherVersion": 21,
    "releaseTime": "2023-12-07T12:56:20+00:00",
    "time": "2023-12-07T12:56:20+00:00",
    "downloads": {
        "client": {"sha1": "fd19469fed4a4b4c15b2d5133985f0e3e7816a8a", "size": 24445539, "url": "https://piston-data.mojang.com/v1/objects/fd19/client.jar"},
        "server": {"sha1": "8dd1a28015f51b1803213892b50b7b4fc76e594d", "size": 49150256, "url": "https://piston-data.mojang.com/v1/objects/8dd1/server.jar"}
    },
    "arguments": {
        "game": [
            "--username", "${auth_player_name}",
            {"rules": [{"action": "allow", "features": {"is_demo_user": True}}], "value": "--demo"},
            {"rules": [{"action": "allow", "features": {"has_custom_resolution": True}}], "value": ["--width", "${resolution_width}"]}
        ],
        "jvm": [
            {"rules": [{"action": "allow", "os": {"name": "osx"}}], "value": ["-XstartOnFirstThread"]},
            {"rules": [{"action": "allow", "os": {"arch": "x86"}}], "value": "-Xss1M"},
            "-Djava.library.path=${natives_directory}",
            "-cp", "${classpath}"
        ]
    },
    "logging": {
        "client": {
            "argument": "-Dlog4j.configurationFile=${path}",
            "file": {"id": "client-1.12.xml", "sha1": "bd65e7d2e3c237be76cfbef4c2405033d7f91521", "size": 888, "url": "https://piston-data.mojang.com/v1/objects/bd65/client-1.12.xml"},
            "type": "log4j2-xml"
        }
    },
    "libraries": [
        {
            "name": "com.mojang:logging:1.1.1",
            "downloads": {"artifact": {"path": "com/mojang/logging/1.1.1/logging-1.1.1.jar", "sha1": "832b8e6674a9b325a5175a3a6267dfaf34c85139", "size": 15343, "url": "https://libraries.minecraft.net/com/mojang/logging/1.1.1/logging-1.1.1.jar"}}
        },
        {
            "name": "org.lwjgl:lwjgl:3.3.2:natives-macos",
            "downloads": {"artifact": {"path": "org/lwjgl/lwjgl/3.3.2/lwjgl-3.3.2-natives-macos.jar", "sha1": "e37ba7ba5a2c4c9fb2c1d2e0e0e2ffb1a6e9b0c3", "size": 44631, "url": "https://libraries.minecraft.net/org/lwjgl/lwjgl/3.3.2/lwjgl-3.3.2-natives-macos.jar"}},
            "rules": [{"action": "allow", "os": {"name": "osx"}}]
        },
        {
            "name": "org.lwjgl.lwjgl:lwjgl-platform:2.9.4-nightly-20150209",
            "downloads": {
                "classifiers": {
                    "natives-linux": {"path": "org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-linux.jar", "sha1": "931074f46c795d2f7b30ed6395df5715cfd7675b", "size": 578680, "url": "https://libraries.minecraft.net/lwjgl-platform-natives-linux.jar"},
                    "natives-windows": {"path": "org/lwjgl/lwjgl/lwjgl-platform/2.9.4-nightly-20150209/lwjgl-platform-2.9.4-nightly-20150209-natives-windows.jar", "sha1": "b84d5102b9dbfabfeb5e43c7e2828d98a7fc80e0", "size": 613748, "url": "https://libraries.minecraft.net/lwjgl-platform-natives-windows.jar"}
                }
            },
            "natives": {"linux": "natives-linux", "windows": "natives-windows"}
        },
        {
            "name": "net.fabricmc:intermediary:1.20.4",
            "url": "https://maven.fabricmc.net/"
        },
        {
            "name": "org.example:nothing:1.0"
        }
    ]
}


def test_version_info():

    from mcapi.vanilla import VersionInfo

    info = VersionInfo.from_json(METADATA)
    assert info.id == "1.20.4"
    assert info.type == "release"
    assert info.main_class == "net.minecraft.client.main.Main"
    assert info.assets == "12"
    assert info.asset_index.id == "12"
    assert info.asset_index.total_size == 629107291
    assert info.java_version.component == "java-runtime-gamma"
    assert info.java_version.major_version == 17
    assert info.compliance_level == 1
    assert info.minimum_launcher_version == 21
    assert info.release_time == "2023-12-07T12:56:20+00:00"
    assert info.downloads.client.size == 24445539
    assert info.downloads.server.sha1 == "8dd1a28015f51b1803213892b50b7b4fc76e594d"
    assert info.downloads.windows_server is None
    assert info.logging.type == "log4j2-xml"
    assert info.logging.file.id == "client-1.12.xml"
    assert info.minecraft_arguments is None
    assert len(info.libraries) == 5


def test_version_info_errors():

    from mcapi.vanilla import VersionInfo

    with pytest.raises(ValueError, match="metadata: /mainClass must be a string"):
        VersionInfo.from_json({"id": "foo"})

    with pytest.raises(ValueError, match="metadata: /libraries/0/rules/0/action must be 'allow' or 'disallow'"):
        VersionInfo.from_json({"id": "foo", "mainClass": "Main", "libraries": [{"name": "a:b:c", "rules": [{"action": "deny"}]}]})

    with pytest.raises(ValueError, match="metadata: /libraries/0 must be an object"):
        VersionInfo.from_json({"id": "foo", "mainClass": "Main", "libraries": ["a:b:c"]})


def test_library():

    from mcapi.vanilla import Library

    library = Library.from_json(METADATA["libraries"][2], "lib: ")
    assert library.artifact is None
    assert library.get_artifact() is None
    assert library.natives == {"linux": "natives-linux", "windows": "natives-windows"}
    assert library.get_native("natives-linux").size == 578680
    assert library.get_native_path("natives-windows").endswith("-natives-windows.jar")
    assert library.get_native("natives-osx") is None

    # Maven repository fallback.
    library = Library.from_json(METADATA["libraries"][3], "lib: ")
    artifact = library.get_artifact()
    assert artifact.url == "https://maven.fabricmc.net/net/fabricmc/intermediary/1.20.4/intermediary-1.20.4.jar"
    assert artifact.path == "net/fabricmc/intermediary/1.20.4/intermediary-1.20.4.jar"
    assert artifact.sha1 is None and artifact.size is None
    assert library.get_artifact_path() == artifact.path


def test_args():

    from mcapi.vanilla import VersionInfo
    from mcapi.rules import RuleMatcher

    info = VersionInfo.from_json(METADATA)

    matcher = RuleMatcher.from_host("osx", "x86_64", "14.2")
    assert info.jvm_args(matcher, {"natives_directory": "/tmp/bin", "classpath": "a.jar"}) == \
        ["-XstartOnFirstThread", "-Djava.library.path=/tmp/bin", "-cp", "a.jar"]

    matcher.set_feature("has_custom_resolution")
    assert info.game_args(matcher, {"auth_player_name": "Steve", "resolution_width": "854"}) == \
        ["--username", "Steve", "--width", "854"]


def test_legacy_args():

    from mcapi.vanilla import VersionInfo
    from mcapi.rules import RuleMatcher

    info = VersionInfo.from_json({
        "id": "1.12.2",
        "mainClass": "net.minecraft.client.main.Main",
        "minecraftArguments": "--username ${auth_player_name} --version ${version_name}"
    })

    matcher = RuleMatcher.from_host("windows", "x86_64", "10.0.19045")
    assert info.game_args(matcher, {"auth_player_name": "Steve", "version_name": "1.12.2"}) == \
        ["--username", "Steve", "--version", "1.12.2"]

    assert info.jvm_args(matcher, {"natives_directory": "bin", "launcher_name": "mcapi", "launcher_version": "1", "classpath": "cp"}) == [
        "-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump",
        "-Dos.name=Windows 10",
        "-Dos.version=10.0",
        "-Djava.library.path=bin",
        "-Dminecraft.launcher.brand=mcapi",
        "-Dminecraft.launcher.version=1",
        "-cp",
        "cp",
    ]

    info = VersionInfo.from_json({"id": "a1.0.4", "mainClass": "net.minecraft.client.Minecraft"})
    assert info.game_args(matcher, {}) == []


def test_resolve_libraries():

    from mcapi.vanilla import VersionInfo, LibrariesResolvingEvent, LibrariesResolvedEvent
    from mcapi.watcher import SimpleWatcher
    from mcapi.rules import RuleMatcher

    info = VersionInfo.from_json(METADATA)
    events = []
    watcher = SimpleWatcher({
        LibrariesResolvingEvent: events.append,
        LibrariesResolvedEvent: events.append,
    })

    resolved = info.resolve_libraries(RuleMatcher.from_host("linux", "x86_64", "6.1"), watcher)
    assert [r.library.name for r in resolved] == [
        "com.mojang:logging:1.1.1",
        "org.lwjgl.lwjgl:lwjgl-platform:2.9.4-nightly-20150209",
        "net.fabricmc:intermediary:1.20.4",
    ]
    assert resolved[1].artifact is None
    assert resolved[1].native.url == "https://libraries.minecraft.net/lwjgl-platform-natives-linux.jar"

    assert isinstance(events[0], LibrariesResolvingEvent)
    assert events[0].version == "1.20.4"
    assert isinstance(events[1], LibrariesResolvedEvent)
    assert (events[1].count, events[1].natives_count) == (3, 1)

    resolved = info.resolve_libraries(RuleMatcher.from_host("osx", "arm64", "14.2"))
    assert [r.library.name for r in resolved] == [
        "com.mojang:logging:1.1.1",
        "org.lwjgl:lwjgl:3.3.2:natives-macos",
        "net.fabricmc:intermediary:1.20.4",
    ]


def test_resolve_libraries_invalid_pattern():

    from mcapi.vanilla import VersionInfo, LibrarySkippedEvent
    from mcapi.watcher import WatcherGroup, SimpleWatcher
    from mcapi.rules import RuleMatcher, PatternError

    info = VersionInfo.from_json({
        "id": "broken",
        "mainClass": "Main",
        "libraries": [
            {"name": "a:a:1", "url": "https://repo.example/"},
            {"name": "b:b:1", "url": "https://repo.example/", "rules": [{"action": "allow", "os": {"version": "[0-"}}]},
        ]
    })

    matcher = RuleMatcher.from_host("linux", "x86_64", "6.1")
    with pytest.raises(PatternError):
        info.resolve_libraries(matcher)

    skipped = []
    group = WatcherGroup()
    group.add(SimpleWatcher({LibrarySkippedEvent: skipped.append}))
    resolved = info.resolve_libraries(matcher, group, skip_invalid=True)
    assert [r.library.name for r in resolved] == ["a:a:1"]
    assert len(skipped) == 1
    assert skipped[0].library.name == "b:b:1"
    assert skipped[0].error.pattern == "[0-"


def test_manifest(fake_server):

    from mcapi.vanilla import VERSION_MANIFEST_URL, fetch_version_manifest
    from mcapi.util import NotFoundError

    fake_server.add(VERSION_MANIFEST_URL, {
        "latest": {"release": "1.20.4", "snapshot": "24w03a"},
        "versions": [
            {"id": "24w03a", "type": "snapshot", "url": "https://piston-meta.mojang.com/v1/packages/aa/24w03a.json", "time": "2024-01-17T13:05:19+00:00", "releaseTime": "2024-01-17T12:55:12+00:00", "sha1": "aa", "complianceLevel": 1},
            {"id": "1.20.4", "type": "release", "url": "https://piston-meta.mojang.com/v1/packages/bb/1.20.4.json", "time": "2024-01-17T13:05:19+00:00", "releaseTime": "2023-12-07T12:56:20+00:00", "sha1": "bb", "complianceLevel": 1},
        ]
    })
    fake_server.add("https://piston-meta.mojang.com/v1/packages/bb/1.20.4.json", METADATA)

    manifest = fetch_version_manifest()
    assert manifest.latest_release == "1.20.4"
    assert manifest.latest_snapshot == "24w03a"
    assert manifest.filter_latest("release") == ("1.20.4", True)
    assert manifest.filter_latest("1.19") == ("1.19", False)
    assert manifest.find("snapshot").type == "snapshot"
    assert manifest.find("1.7.10") is None

    info = manifest.fetch_latest_release()
    assert info.id == "1.20.4"
    assert manifest.fetch("release").main_class == "net.minecraft.client.main.Main"

    with pytest.raises(NotFoundError):
        manifest.fetch("1.7.10")


def test_asset_index(fake_server):

    from mcapi.vanilla import VersionInfo, RESOURCES_URL

    fake_server.add(METADATA["assetIndex"]["url"], {
        "objects": {
            "icons/icon_16x16.png": {"hash": "bdf48ef6b5d0d23bbb02e17d04865216179f510a", "size": 3665},
            "minecraft/sounds/ambient/cave/cave1.ogg": {"hash": "b8b4e0a5d7d1e8b3d6c1c1b1e8c2e4b1b3c8d9e0", "size": 14262}
        }
    })

    index = VersionInfo.from_json(METADATA).fetch_asset_index()
    assert not index.virtual and not index.map_to_resources
    asset = index.objects["icons/icon_16x16.png"]
    assert asset.size == 3665
    assert asset.get_path() == "bd/bdf48ef6b5d0d23bbb02e17d04865216179f510a"
    assert asset.get_url() == f"{RESOURCES_URL}bd/bdf48ef6b5d0d23bbb02e17d04865216179f510a"


def test_artifact_download(fake_server):

    from mcapi.vanilla import Artifact, ArtifactError

    # sha1 of "hello world!"
    sha1 = "430ce34d020724ed75a196dfc2ad67c77772d169"
    fake_server.add("https://example.com/file", b"hello world!")

    res = Artifact("https://example.com/file", sha1, 12).download()
    assert res.data == b"hello world!"
    assert Artifact("https://example.com/file").download().data == b"hello world!"

    with pytest.raises(ArtifactError) as exc_info:
        Artifact("https://example.com/file", sha1, 11).download()
    assert exc_info.value.code == ArtifactError.INVALID_SIZE

    with pytest.raises(ArtifactError) as exc_info:
        Artifact("https://example.com/file", "0" * 40, 12).download()
    assert exc_info.value.code == ArtifactError.INVALID_SHA1

    Artifact("https://example.com/file", "0" * 40, 11).download(verify=False)


def test_http_error(fake_server):

    from mcapi.vanilla import fetch_version_manifest
    from mcapi.http import HttpError

    with pytest.raises(HttpError) as exc_info:
        fetch_version_manifest()
    assert exc_info.value.res.status == 404


@pytest.mark.slow
def test_live_manifest():

    from mcapi.vanilla import fetch_version_manifest
    from mcapi.rules import RuleMatcher

    manifest = fetch_version_manifest()
    info = manifest.fetch("1.20.4")
    assert info.id == "1.20.4"
    assert len(info.resolve_libraries(RuleMatcher.from_os()))
