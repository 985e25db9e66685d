"""Interpretation of the rules found in Mojang's version metadata.

Libraries and arguments of a version metadata can be conditioned by rules on the
operating system (name, architecture and version) and on features enabled by the
launcher (demo user, custom resolution, quick play...). This module parses these rules
and provides the `RuleMatcher` that evaluates them against a given host. It also
expands arguments and native classifiers, which may contain `${name}` placeholders.

Nothing in this module does any I/O, a matcher can be shared between threads once its
features are set.
"""

from functools import lru_cache
import platform
import re

from .util import check_type, get_field

from typing import TYPE_CHECKING, Optional, Dict, List, Union, Callable, Any

if TYPE_CHECKING:
    from .vanilla import Library, Artifact


__all__ = ["PatternError", "OsInfo", "RuleConstraint", "Rule", "RuledArgument",
    "RuleMatcher", "parse_rules", "parse_arguments", "replace_vars", "get_os_info"]


ARCH_KEY = "arch"

_VAR_REGEX = re.compile(r"\$\{(\w+)?\}")


class PatternError(ValueError):
    """Raised when an OS version constraint is not a valid regular expression. This is
    only raised when the constraint is actually evaluated.
    """

    def __init__(self, pattern: str, error: re.error) -> None:
        self.pattern = pattern
        self.error = error

    def __str__(self) -> str:
        return f"invalid os version pattern {self.pattern!r}: {self.error}"


class OsInfo:
    """Description of the host against which rules are evaluated. The name is one of
    the OS names used by Mojang ('windows', 'osx', 'linux'), the architecture is like
    'x86', 'x86_64', 'arm64' or 'arm32'.
    """

    __slots__ = "name", "arch", "version"

    def __init__(self, name: str, arch: str, version: str) -> None:
        self.name = name
        self.arch = arch
        self.version = version

    def __eq__(self, other) -> bool:
        return isinstance(other, OsInfo) and \
            (self.name, self.arch, self.version) == (other.name, other.arch, other.version)

    def __hash__(self) -> int:
        return hash((self.name, self.arch, self.version))

    def __repr__(self) -> str:
        return f"<OsInfo {self.name}/{self.arch} {self.version!r}>"


class RuleConstraint:
    """The condition of a rule. Every field that is absent (or empty) is a wildcard,
    so a default constraint matches any host.
    """

    __slots__ = "os_name", "os_arch", "os_version", "features"

    def __init__(self,
        os_name: Optional[str] = None,
        os_arch: Optional[str] = None,
        os_version: Optional[str] = None,
        features: Optional[Dict[str, bool]] = None
    ) -> None:
        self.os_name = os_name
        self.os_arch = os_arch
        self.os_version = os_version
        self.features = {} if features is None else features

    def __repr__(self) -> str:
        return f"<RuleConstraint os: {self.os_name}/{self.os_arch}/{self.os_version}, features: {self.features}>"


class Rule:
    """A rule, its action tells if it allows or disallows when its constraint matches.
    """

    ALLOW = "allow"
    DISALLOW = "disallow"

    __slots__ = "action", "constraint"

    def __init__(self, action: str, constraint: Optional[RuleConstraint] = None) -> None:
        if action not in (self.ALLOW, self.DISALLOW):
            raise ValueError(f"invalid rule action: {action!r}")
        self.action = action
        self.constraint = RuleConstraint() if constraint is None else constraint

    @classmethod
    def allow(cls, constraint: Optional[RuleConstraint] = None) -> "Rule":
        return cls(cls.ALLOW, constraint)

    @classmethod
    def deny(cls, constraint: Optional[RuleConstraint] = None) -> "Rule":
        return cls(cls.DISALLOW, constraint)

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Rule":
        """Parse a rule object from a version metadata.
        """

        check_type(value, dict, path)

        action = value.get("action")
        if action not in (cls.ALLOW, cls.DISALLOW):
            raise ValueError(f"{path}/action must be 'allow' or 'disallow'")

        constraint = RuleConstraint()

        rule_os = get_field(value, "os", dict, path, None)
        if rule_os is not None:
            constraint.os_name = get_field(rule_os, "name", str, f"{path}/os", None)
            constraint.os_arch = get_field(rule_os, "arch", str, f"{path}/os", None)
            constraint.os_version = get_field(rule_os, "version", str, f"{path}/os", None)

        rule_features = get_field(value, "features", dict, path, None)
        if rule_features is not None:
            for feat_name, feat_value in rule_features.items():
                check_type(feat_value, bool, f"{path}/features/{feat_name}")
            constraint.features = dict(rule_features)

        return cls(action, constraint)

    def __repr__(self) -> str:
        return f"<Rule {self.action} {self.constraint!r}>"


class RuledArgument:
    """An argument that is only used if all its rules are matching. The value is either
    a single argument or a list of arguments.
    """

    __slots__ = "rules", "value"

    def __init__(self, rules: List[Rule], value: Union[str, List[str]]) -> None:
        self.rules = rules
        self.value = value

    def __repr__(self) -> str:
        return f"<RuledArgument {self.value!r}, rules: {self.rules}>"


# An argument is either a literal string or an argument conditioned by rules.
Argument = Union[str, RuledArgument]


def parse_rules(value: Any, path: str) -> List[Rule]:
    """Parse a list of rules from a version metadata.
    """
    check_type(value, list, path)
    return [Rule.from_json(rule, f"{path}/{i}") for i, rule in enumerate(value)]


def parse_arguments(value: Any, path: str) -> List[Argument]:
    """Parse a list of arguments from a version metadata, each argument is either a
    string or an object with rules and a value (string or list of strings).
    """

    check_type(value, list, path)

    args: List[Argument] = []
    for i, arg in enumerate(value):

        if isinstance(arg, str):
            args.append(arg)
        elif isinstance(arg, dict):

            rules_raw = arg.get("rules")
            rules = [] if rules_raw is None else parse_rules(rules_raw, f"{path}/{i}/rules")

            arg_value = arg.get("value")
            if isinstance(arg_value, list):
                for j, item in enumerate(arg_value):
                    check_type(item, str, f"{path}/{i}/value/{j}")
            elif not isinstance(arg_value, str):
                raise ValueError(f"{path}/{i}/value must be a list or a string")

            args.append(RuledArgument(rules, arg_value))

        else:
            raise ValueError(f"{path}/{i} must be an object or a string")

    return args


def replace_vars(text: str, replacer: Callable[[str], Optional[str]]) -> str:
    """Replace all variables of the form `${foo}` in a string, the replacer is called
    with the variable name (possibly empty) and returns its value, or None to keep the
    variable unchanged. Replaced values are not scanned again.
    """

    def replace(match: "re.Match[str]") -> str:
        value = replacer(match.group(1) or "")
        return match.group(0) if value is None else value

    return _VAR_REGEX.sub(replace, text)


class RuleMatcher:
    """This class is used to match rules, arguments and native libraries of a version
    metadata against a host. The host can be given explicitly or detected from the
    running system with `from_os()`.

    Features are all disabled by default, they should be enabled with `set_feature()`
    before using the matcher, after that the matcher should be considered read-only.
    """

    def __init__(self, os: OsInfo, features: Optional[Dict[str, bool]] = None) -> None:
        self.os = os
        self.features: Dict[str, bool] = {} if features is None else dict(features)

    @classmethod
    def from_host(cls, name: str, arch: str, version: str) -> "RuleMatcher":
        """Create a matcher for the given host, no detection is made.
        """
        return cls(OsInfo(name, arch, version))

    @classmethod
    def from_os(cls) -> "RuleMatcher":
        """Create a matcher with the host information of the running system. Use
        `RuleMatcher.from_host` if OS detection is not desired.
        """
        return cls(get_os_info())

    @classmethod
    def empty(cls) -> "RuleMatcher":
        """Create a matcher with empty host information, only rules without OS
        constraint may match.
        """
        return cls(OsInfo("", "", ""))

    def set_feature(self, name: str, enabled: bool = True) -> None:
        self.features[name] = enabled

    def match_rules(self, rules: List[Rule]) -> bool:
        """Return true if all the given rules pass for this host, an empty list of rules
        always pass. The evaluation stops on the first rule that doesn't pass.

        :raises PatternError: If an OS version pattern that is evaluated is invalid.
        """
        for rule in rules:
            if not self.match_rule(rule):
                return False
        return True

    def match_rule(self, rule: Rule) -> bool:
        """Return true if the rule passes, an allowing rule passes if its constraint is
        matching and a disallowing one passes if its constraint is not matching.
        """
        matching = self.match_constraint(rule.constraint)
        return matching if rule.action == Rule.ALLOW else not matching

    def match_constraint(self, constraint: RuleConstraint) -> bool:
        """Return true if the host matches the given constraint.

        :raises PatternError: If the OS version pattern is not a valid regex.
        """

        if constraint.os_name and constraint.os_name != self.os.name:
            return False

        if constraint.os_arch and constraint.os_arch != self.os.arch:
            return False

        if constraint.os_version:
            if _compile_version_pattern(constraint.os_version).search(self.os.version) is None:
                return False

        # Only the presence of enabled features is checked, the expected value is
        # not relevant.
        for feat_name in constraint.features:
            if not self.features.get(feat_name, False):
                return False

        return True

    def should_download_library(self, library: "Library") -> bool:
        """Return true if the library's rules pass for this host.
        """
        return self.match_rules(library.rules)

    def get_native_library(self, library: "Library") -> "Optional[Artifact]":
        """Find the native artifact of a library for this host. The library's rules are
        not checked, see `should_download_library`.

        :return: The native artifact, or None if the library has no native classifier
        for this OS or if the classifier has no artifact.
        """

        classifier_key = library.natives.get(self.os.name)
        if classifier_key is None:
            return None

        return library.classifiers.get(self.process_string(classifier_key, {}))

    def build_args(self, args: List[Argument], replacements: Dict[str, str]) -> List[str]:
        """Build the final list of arguments, ruled arguments are only added if their
        rules are matching and all placeholders are then replaced.

        :raises PatternError: If an OS version pattern that is evaluated is invalid, in
        such case no argument is returned.
        """

        dst: List[str] = []
        for arg in args:
            if isinstance(arg, str):
                dst.append(arg)
            elif self.match_rules(arg.rules):
                if isinstance(arg.value, str):
                    dst.append(arg.value)
                else:
                    dst.extend(arg.value)

        return [self.process_string(arg, replacements) for arg in dst]

    def process_string(self, text: str, replacements: Dict[str, str]) -> str:
        """Replace all `${name}` placeholders, the `arch` placeholder is always the
        host's architecture, others are taken from the replacements or kept as-is.
        """

        def replacer(key: str) -> Optional[str]:
            if key == ARCH_KEY:
                return self.os.arch
            return replacements.get(key)

        return replace_vars(text, replacer)

    def __repr__(self) -> str:
        return f"<RuleMatcher {self.os!r}, features: {self.features}>"


@lru_cache(maxsize=256)
def _compile_version_pattern(pattern: str) -> "re.Pattern[str]":
    try:
        return re.compile(pattern)
    except re.error as error:
        raise PatternError(pattern, error) from error


def get_os_info() -> OsInfo:
    """Return the host information of the running system, the OS name is 'windows',
    'osx' or 'linux' for any other system.
    """

    system = platform.system()

    name = {
        "Windows": "windows",
        "Darwin": "osx",
    }.get(system, "linux")

    machine = platform.machine().lower()
    arch = {
        "i386": "x86",
        "i686": "x86",
        "x86": "x86",
        "x86_64": "x86_64",
        "amd64": "x86_64",
        "arm64": "arm64",
        "aarch64": "arm64",
        "armv7l": "arm32",
        "armv6l": "arm32",
    }.get(machine, machine)

    if system == "Windows":
        version = platform.version()
    elif system == "Darwin":
        version = platform.mac_ver()[0]
    else:
        version = platform.release()

    return OsInfo(name, arch, version)
