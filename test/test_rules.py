import pytest


def _windows_matcher():
    from mcapi.rules import RuleMatcher
    return RuleMatcher.from_host("windows", "x86_64", "10.0")


def test_allow_matching_os():

    from mcapi.rules import Rule, RuleConstraint

    matcher = _windows_matcher()
    assert matcher.match_rules([Rule.allow(RuleConstraint(os_name="windows"))])
    assert not matcher.match_rules([Rule.allow(RuleConstraint(os_name="osx"))])


def test_deny_matching_os():

    from mcapi.rules import Rule, RuleConstraint

    matcher = _windows_matcher()
    assert not matcher.match_rules([
        Rule.allow(RuleConstraint(os_name="windows")),
        Rule.deny(RuleConstraint(os_name="windows", os_arch="x86_64")),
    ])

    # Deny passes when its constraint doesn't match.
    assert matcher.match_rules([
        Rule.allow(RuleConstraint(os_name="windows")),
        Rule.deny(RuleConstraint(os_name="windows", os_arch="x86")),
    ])


def test_empty_rules():

    from mcapi.rules import RuleMatcher, Rule

    assert _windows_matcher().match_rules([])
    assert RuleMatcher.empty().match_rules([])
    assert RuleMatcher.empty().match_rules([Rule.allow()])
    assert not RuleMatcher.empty().match_rules([Rule.deny()])


def test_constraint_wildcards():

    from mcapi.rules import RuleConstraint

    matcher = _windows_matcher()
    assert matcher.match_constraint(RuleConstraint())
    assert matcher.match_constraint(RuleConstraint(os_name="", os_arch="", os_version=""))
    assert matcher.match_constraint(RuleConstraint(os_arch="x86_64"))
    assert not matcher.match_constraint(RuleConstraint(os_arch="arm64"))


def test_os_version_pattern():

    from mcapi.rules import RuleConstraint

    matcher = _windows_matcher()
    assert matcher.match_constraint(RuleConstraint(os_version="^10\\."))
    # The pattern may match anywhere in the version.
    assert matcher.match_constraint(RuleConstraint(os_version="0\\.0"))
    assert not matcher.match_constraint(RuleConstraint(os_version="^6\\."))


def test_invalid_pattern():

    from mcapi.rules import Rule, RuleConstraint, PatternError

    matcher = _windows_matcher()
    rules = [Rule.allow(RuleConstraint(os_version="["))]

    with pytest.raises(PatternError) as exc_info:
        matcher.match_rules(rules)
    assert exc_info.value.pattern == "["
    assert isinstance(exc_info.value, ValueError)

    # The pattern is never evaluated if a previous rule fails.
    assert not matcher.match_rules([Rule.allow(RuleConstraint(os_name="osx")), *rules])
    # Nor if the name doesn't match first.
    assert not matcher.match_rules([Rule.allow(RuleConstraint(os_name="linux", os_version="["))])


def test_features():

    from mcapi.rules import RuleMatcher, Rule, RuleConstraint

    matcher = _windows_matcher()
    rules = [Rule.allow(RuleConstraint(features={"is_demo_user": True}))]
    assert not matcher.match_rules(rules)

    matcher.set_feature("is_demo_user")
    assert matcher.match_rules(rules)

    matcher.set_feature("is_demo_user", False)
    assert not matcher.match_rules(rules)

    # Only presence of enabled features is checked, the expected value is ignored.
    matcher = RuleMatcher.from_host("linux", "x86_64", "6.1")
    matcher.set_feature("has_custom_resolution")
    assert matcher.match_rules([Rule.allow(RuleConstraint(features={"has_custom_resolution": False}))])


def test_rule_parsing():

    from mcapi.rules import Rule, parse_rules

    rules = parse_rules([
        {"action": "allow"},
        {"action": "disallow", "os": {"name": "osx", "version": "^10\\.5\\.\\d$"}},
        {"action": "allow", "features": {"is_demo_user": True}},
    ], "rules: ")

    assert [rule.action for rule in rules] == [Rule.ALLOW, Rule.DISALLOW, Rule.ALLOW]
    assert rules[0].constraint.os_name is None
    assert rules[1].constraint.os_name == "osx"
    assert rules[1].constraint.os_arch is None
    assert rules[1].constraint.os_version == "^10\\.5\\.\\d$"
    assert rules[2].constraint.features == {"is_demo_user": True}

    # Invalid patterns are accepted at parse time.
    parse_rules([{"action": "allow", "os": {"version": "["}}], "rules: ")


def test_rule_parsing_errors():

    from mcapi.rules import parse_rules

    with pytest.raises(ValueError, match="rules: /0/action must be 'allow' or 'disallow'"):
        parse_rules([{"action": "maybe"}], "rules: ")

    with pytest.raises(ValueError, match="rules: /0/os/name must be a string"):
        parse_rules([{"action": "allow", "os": {"name": 3}}], "rules: ")

    with pytest.raises(ValueError, match="rules: /0/features/foo must be a boolean"):
        parse_rules([{"action": "allow", "features": {"foo": "yes"}}], "rules: ")

    with pytest.raises(ValueError, match="rules:  must be a list"):
        parse_rules({}, "rules: ")


def test_replace_vars():

    from mcapi.rules import replace_vars

    values = {"foo": "89658", "bar": "test", "self": "${self}"}
    assert replace_vars("this is foo value: ${foo}", values.get) == "this is foo value: 89658"
    assert replace_vars("both values: ${foo}/${bar}...", values.get) == "both values: 89658/test..."
    assert replace_vars("unknown key: ${unknown}", values.get) == "unknown key: ${unknown}"
    assert replace_vars("empty key: ${}", values.get) == "empty key: ${}"
    assert replace_vars("not a key: ${a-b} $foo {foo}", values.get) == "not a key: ${a-b} $foo {foo}"
    # Replaced values are not scanned again.
    assert replace_vars("${self}", values.get) == "${self}"
    assert replace_vars("${bar}", lambda key: "${foo}") == "${foo}"


def test_process_string_arch():

    matcher = _windows_matcher()
    assert matcher.process_string("natives-${arch}", {}) == "natives-x86_64"
    # The architecture can't be overridden.
    assert matcher.process_string("natives-${arch}", {"arch": "32"}) == "natives-x86_64"
    assert matcher.process_string("${a}${b}", {"a": "1", "b": "2"}) == "12"


def test_build_args():

    from mcapi.rules import RuledArgument, Rule, RuleConstraint

    matcher = _windows_matcher()
    args = [
        "-Dfoo=${bar}",
        RuledArgument([Rule.allow(RuleConstraint(features={"demo": True}))], "-Ddemo=true"),
    ]
    assert matcher.build_args(args, {"bar": "baz"}) == ["-Dfoo=baz"]

    matcher.set_feature("demo")
    assert matcher.build_args(args, {"bar": "baz"}) == ["-Dfoo=baz", "-Ddemo=true"]

    args = [
        "first",
        RuledArgument([Rule.allow(RuleConstraint(os_name="windows"))], ["--width", "${width}"]),
        "last",
        RuledArgument([], ["always", "${arch}"]),
    ]
    assert matcher.build_args(args, {"width": "854"}) == ["first", "--width", "854", "last", "always", "x86_64"]
    assert matcher.build_args([], {}) == []


def test_build_args_invalid_pattern():

    from mcapi.rules import RuledArgument, Rule, RuleConstraint, PatternError

    matcher = _windows_matcher()
    with pytest.raises(PatternError):
        matcher.build_args(["a", RuledArgument([Rule.allow(RuleConstraint(os_version="("))], "b")], {})


def test_parse_arguments():

    from mcapi.rules import RuledArgument, parse_arguments

    args = parse_arguments([
        "--username",
        "${auth_player_name}",
        {"rules": [{"action": "allow", "features": {"has_custom_resolution": True}}], "value": ["--width", "${resolution_width}"]},
        {"rules": [{"action": "allow", "os": {"name": "osx"}}], "value": "-XstartOnFirstThread"},
    ], "args: ")

    assert args[:2] == ["--username", "${auth_player_name}"]
    assert isinstance(args[2], RuledArgument)
    assert args[2].value == ["--width", "${resolution_width}"]
    assert args[3].value == "-XstartOnFirstThread"
    assert args[3].rules[0].constraint.os_name == "osx"

    with pytest.raises(ValueError, match="args: /0 must be an object or a string"):
        parse_arguments([12], "args: ")

    with pytest.raises(ValueError, match="args: /0/value must be a list or a string"):
        parse_arguments([{"rules": [], "value": 12}], "args: ")

    with pytest.raises(ValueError, match="args: /0/value/1 must be a string"):
        parse_arguments([{"value": ["a", 1]}], "args: ")


def test_native_library():

    from mcapi.vanilla import Library, Artifact
    from mcapi.rules import Rule, RuleConstraint

    artifact = Artifact("https://example.com/natives-windows-x86_64.jar")
    library = Library("org.lwjgl:lwjgl:3.3.1",
        natives={"windows": "natives-windows-${arch}"},
        classifiers={"natives-windows-x86_64": artifact})

    matcher = _windows_matcher()
    assert matcher.get_native_library(library) is artifact

    from mcapi.rules import RuleMatcher
    assert RuleMatcher.from_host("windows", "x86", "10.0").get_native_library(library) is None
    assert RuleMatcher.from_host("linux", "x86_64", "6.1").get_native_library(library) is None

    # Rules of the library are not checked here.
    library.rules = [Rule.allow(RuleConstraint(os_name="osx"))]
    assert matcher.get_native_library(library) is artifact
    assert not matcher.should_download_library(library)


def test_native_library_missing_classifier():

    from mcapi.vanilla import Library

    library = Library("org.lwjgl:lwjgl:3.3.1", natives={"windows": "natives-windows"})
    assert _windows_matcher().get_native_library(library) is None


def test_os_info():

    from mcapi.rules import RuleMatcher, OsInfo, get_os_info

    info = get_os_info()
    assert info.name in ("windows", "osx", "linux")
    assert isinstance(info.arch, str) and info.arch
    assert RuleMatcher.from_os().os == info
    assert RuleMatcher.from_host("linux", "arm64", "6.1").os == OsInfo("linux", "arm64", "6.1")


def test_os_info_mapping(monkeypatch):

    import platform
    from mcapi.rules import get_os_info

    monkeypatch.setattr(platform, "system", lambda: "Darwin")
    monkeypatch.setattr(platform, "machine", lambda: "arm64")
    monkeypatch.setattr(platform, "mac_ver", lambda: ("14.2.1", ("", "", ""), "arm64"))
    info = get_os_info()
    assert (info.name, info.arch, info.version) == ("osx", "arm64", "14.2.1")

    monkeypatch.setattr(platform, "system", lambda: "FreeBSD")
    monkeypatch.setattr(platform, "machine", lambda: "amd64")
    monkeypatch.setattr(platform, "release", lambda: "14.0-RELEASE")
    info = get_os_info()
    assert (info.name, info.arch, info.version) == ("linux", "x86_64", "14.0-RELEASE")
