"""Parsing and comparison of Minecraft versions.

Release versions are of the form `1.<major>[.<minor>]`, the leading `1.` is constant so
it's not stored. Anything else (snapshots like `23w13a`, pre-releases like `1.20-pre1`)
is kept as a non-release version with its raw text.
"""

from typing import List, Optional


class InvalidVersionError(ValueError):
    """Raised when a version or a version requirement cannot be parsed, the invalid
    text is given.
    """

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return repr(self.text)


class MCVersion:

    __slots__ = "major", "minor", "is_release", "extra"

    def __init__(self, major: int, minor: int, *, is_release: bool = True, extra: str = "") -> None:
        self.major = major
        self.minor = minor
        self.is_release = is_release
        self.extra = extra

    @classmethod
    def parse(cls, text: str) -> "MCVersion":
        """Parse a version, see the module documentation for the accepted forms.

        :raises InvalidVersionError: If the version looks like a release but isn't
        of the form `1.<major>[.<minor>]`.
        """

        if "." not in text or "-" in text or " " in text:
            return cls(0, 0, is_release=False, extra=text)

        parts = text.split(".")
        if len(parts) > 3 or parts[0] != "1":
            raise InvalidVersionError(text)

        try:
            major = int(parts[1])
            minor = int(parts[2]) if len(parts) == 3 else 0
        except ValueError:
            raise InvalidVersionError(text)

        if major < 0 or minor < 0:
            raise InvalidVersionError(text)

        return cls(major, minor)

    def __eq__(self, other) -> bool:
        return isinstance(other, MCVersion) and \
            (self.major, self.minor, self.is_release, self.extra) == \
            (other.major, other.minor, other.is_release, other.extra)

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.is_release, self.extra))

    def __str__(self) -> str:
        if not self.is_release:
            return self.extra
        return f"1.{self.major}" if self.minor == 0 else f"1.{self.major}.{self.minor}"

    def __repr__(self) -> str:
        return f"<MCVersion {self}>"


class Comparator:
    """A single comparison against a release version. Non-release versions only match
    the wildcard comparator, they can't be ordered.
    """

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    WILDCARD = "*"

    __slots__ = "op", "major", "minor"

    def __init__(self, op: str, major: int = 0, minor: int = 0) -> None:
        self.op = op
        self.major = major
        self.minor = minor

    @classmethod
    def parse(cls, text: str) -> "Comparator":
        """Parse a comparator like `>=1.16` or `*`, a version without operator is an
        exact comparison.

        :raises InvalidVersionError: If the operator or the version is invalid.
        """

        text = text.strip()
        if text == cls.WILDCARD:
            return cls(cls.WILDCARD)

        op = cls.EXACT
        for candidate in (cls.GREATER_EQ, cls.LESS_EQ, cls.GREATER, cls.LESS, cls.EXACT):
            if text.startswith(candidate):
                op = candidate
                text = text[len(candidate):].strip()
                break

        version = MCVersion.parse(text)
        if not version.is_release:
            raise InvalidVersionError(text)

        return cls(op, version.major, version.minor)

    def matches(self, version: MCVersion) -> bool:

        if self.op == self.WILDCARD:
            return True
        elif not version.is_release:
            return False

        this = (self.major, self.minor)
        other = (version.major, version.minor)

        if self.op == self.EXACT:
            return other == this
        elif self.op == self.GREATER:
            return other > this
        elif self.op == self.GREATER_EQ:
            return other >= this
        elif self.op == self.LESS:
            return other < this
        elif self.op == self.LESS_EQ:
            return other <= this
        else:
            raise ValueError(f"unknown comparator operator: {self.op}")

    def __str__(self) -> str:
        if self.op == self.WILDCARD:
            return self.WILDCARD
        return f"{self.op}{MCVersion(self.major, self.minor)}"

    def __repr__(self) -> str:
        return f"<Comparator {self}>"


class MCVersionReq:
    """A version requirement, matching versions that satisfy all of its comparators.
    A requirement without comparator matches any version.
    """

    ANY: "MCVersionReq"

    __slots__ = "comparators",

    def __init__(self, comparators: Optional[List[Comparator]] = None) -> None:
        self.comparators = [] if comparators is None else comparators

    @classmethod
    def parse(cls, text: str) -> "MCVersionReq":
        """Parse comparators separated by commas or whitespaces, like `>=1.16, <1.20`.
        An operator may be separated from its version by spaces (`>= 1.16`).

        :raises InvalidVersionError: If a comparator is invalid.
        """

        tokens = text.replace(",", " ").split()
        comparators = []
        pending_op = None

        for token in tokens:
            if token in (Comparator.GREATER_EQ, Comparator.LESS_EQ, Comparator.GREATER, Comparator.LESS, Comparator.EXACT):
                if pending_op is not None:
                    raise InvalidVersionError(text)
                pending_op = token
                continue
            if pending_op is not None:
                token = pending_op + token
                pending_op = None
            comparators.append(Comparator.parse(token))

        if pending_op is not None:
            raise InvalidVersionError(text)

        return cls(comparators)

    def matches(self, version: MCVersion) -> bool:
        return all(comparator.matches(version) for comparator in self.comparators)

    def __str__(self) -> str:
        return ", ".join(map(str, self.comparators)) or Comparator.WILDCARD

    def __repr__(self) -> str:
        return f"<MCVersionReq {self}>"


MCVersionReq.ANY = MCVersionReq()
