"""Global utilities used internally. The functions can be used externally but upward
compatibility is not guaranteed unless explicitly specified.
"""

from typing import Optional, Any, Tuple, Union


class NotFoundError(Exception):
    """Raised when a requested identifier cannot be found in a list returned by a
    service, the missing identifier is given.
    """
    def __init__(self, what: str) -> None:
        self.what = what
    
    def __str__(self) -> str:
        return repr(self.what)


class ApiError(Exception):
    """Raised when a service answered successfully at the HTTP level but reported an
    error in its response body.
    """
    def __init__(self, message: str) -> None:
        self.message = message

    def __str__(self) -> str:
        return self.message


def calc_input_sha1(input_stream, *, buffer_len: int = 8192) -> str:
    """Internal function to calculate the sha1 of an input stream.

    :param input_stream: The input stream that supports `readinto`.
    :param buffer_len: Internal buffer length, defaults to 8192
    :return: The sha1 string.
    """
    import hashlib
    h = hashlib.sha1()
    b = bytearray(buffer_len)
    mv = memoryview(b)
    for n in iter(lambda: input_stream.readinto(mv), 0):
        h.update(mv[:n])
    return h.hexdigest()


_MISSING = object()

_TYPE_NAMES = {
    str: "a string",
    int: "an integer",
    float: "a number",
    bool: "a boolean",
    list: "a list",
    dict: "an object",
}


def check_type(value: Any, types: Union[type, Tuple[type, ...]], path: str) -> Any:
    """Check that a JSON value is of the given type(s) and return it unchanged.

    Booleans are never accepted where an integer or number is expected, even if they
    are integers for Python.

    :raises ValueError: If the type is wrong, the error message contains the path.
    """
    if not isinstance(types, tuple):
        types = (types,)
    if isinstance(value, bool) and bool not in types:
        valid = False
    elif float in types and isinstance(value, int):
        valid = True
    else:
        valid = isinstance(value, types)
    if not valid:
        expected = " or ".join(_TYPE_NAMES.get(t, t.__name__) for t in types)
        raise ValueError(f"{path} must be {expected}")
    return value


def get_field(obj: dict, key: str, types: Union[type, Tuple[type, ...]], path: str, default: Any = _MISSING) -> Any:
    """Get a field of a JSON object and check its type. If a default value is given,
    the field is optional and the default is returned if it's absent or null.
    """
    value = obj.get(key)
    if value is None:
        if default is _MISSING:
            expected = " or ".join(_TYPE_NAMES.get(t, t.__name__) for t in (types if isinstance(types, tuple) else (types,)))
            raise ValueError(f"{path}/{key} must be {expected}")
        return default
    return check_type(value, types, f"{path}/{key}")


class LibrarySpecifier:
    """A maven-style library specifier.
    """

    __slots__ = "group", "artifact", "version", "classifier", "extension"

    def __init__(self, group: str, artifact: str, version: str, classifier: Optional[str] = None, extension: str = "jar"):
        self.group = group
        self.artifact = artifact
        self.version = version
        self.classifier = classifier
        self.extension = extension
    
    @classmethod
    def from_str(cls, s: str) -> "LibrarySpecifier":
        """Parse a library specifier string 'group:artifact:version[:classifier][@ext]'.
        """

        ext_split = s.rsplit("@", maxsplit=1)
        ext = "jar" if len(ext_split) == 1 else ext_split[1]

        if not len(ext):
            raise ValueError("invalid library specifier: empty extension")
        
        parts = ext_split[0].split(":", 3)

        if len(parts) < 3:
            raise ValueError("invalid library specifier: too few parts")
        else:
            return LibrarySpecifier(parts[0], parts[1], parts[2], parts[3] if len(parts) == 4 else None, ext)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}" + \
            ("" if self.classifier is None else f":{self.classifier}") + \
            ("" if self.extension == "jar" else f"@{self.extension}")

    def __eq__(self, other) -> bool:
        return isinstance(other, LibrarySpecifier) and \
            (self.group, self.artifact, self.version, self.classifier, self.extension) == \
            (other.group, other.artifact, other.version, other.classifier, other.extension)

    def __repr__(self) -> str:
        return f"<LibrarySpecifier {self}>"
    
    def __hash__(self) -> int:
        return hash((self.group, self.artifact, self.version, self.classifier, self.extension))

    def file_path(self) -> str:
        """Return the standard maven path of the file of this specifier, relative to the
        repository root.
        
        The path separator will always be forward slashes '/', because this path is
        mostly used to build URLs.

        Specifier `com.foo.bar:artifact:version@zip` gives 
        `com/foo/bar/artifact/version/artifact-version.zip`.
        """
        
        file_name = f"{self.artifact}-{self.version}" + \
            ("" if self.classifier is None else f"-{self.classifier}") + \
            f".{self.extension}"
        
        return "/".join([*self.group.split("."), self.artifact, self.version, file_name])

    def repository_url(self, repo_url: str) -> str:
        """Return the full URL of this specifier's file in the given maven repository.
        """
        if not repo_url.endswith("/"):
            repo_url += "/"
        return f"{repo_url}{self.file_path()}"
