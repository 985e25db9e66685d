"""Client for the mclo.gs API (v1), used to share game logs and get their automatic
analysis (detected problems and their solutions).
"""

from .util import ApiError, check_type, get_field
from .http import http_request

from typing import List, Optional, Any


API_V1 = "https://api.mclo.gs/1"


class MCLogsError(ApiError):
    """Raised when the mclo.gs API reports an error.
    """


class LogFileMetadata:
    """A shared log, as returned when posting it.
    """

    __slots__ = "id", "url", "raw"

    def __init__(self, id: str, url: str, raw: str) -> None:
        self.id = id
        self.url = url
        self.raw = raw

    @classmethod
    def from_json(cls, value: Any, path: str) -> "LogFileMetadata":
        check_type(value, dict, path)
        return cls(
            get_field(value, "id", str, path),
            get_field(value, "url", str, path),
            get_field(value, "raw", str, path))

    def fetch_raw(self) -> str:
        return fetch_raw_log(self.id)

    def fetch_insights(self) -> "LogInsights":
        return fetch_insights(self.id)

    def __repr__(self) -> str:
        return f"<LogFileMetadata {self.id}>"


class AnalysisLine:
    __slots__ = "number", "content"
    def __init__(self, number: int, content: str) -> None:
        self.number = number
        self.content = content


class AnalysisEntry:
    """The log entry where a problem or an information was found.
    """

    __slots__ = "level", "time", "prefix", "lines"

    def __init__(self, level: int, time: Optional[str], prefix: str, lines: List[AnalysisLine]) -> None:
        self.level = level
        self.time = time
        self.prefix = prefix
        self.lines = lines

    @classmethod
    def from_json(cls, value: Any, path: str) -> "AnalysisEntry":
        check_type(value, dict, path)
        lines = []
        for i, line in enumerate(get_field(value, "lines", list, path)):
            line_path = f"{path}/lines/{i}"
            check_type(line, dict, line_path)
            lines.append(AnalysisLine(get_field(line, "number", int, line_path), get_field(line, "content", str, line_path)))
        return cls(
            get_field(value, "level", int, path),
            get_field(value, "time", str, path, None),
            get_field(value, "prefix", str, path),
            lines)


class Problem:
    """A problem detected in the log, with the possible solutions.
    """

    __slots__ = "message", "counter", "entry", "solutions"

    def __init__(self, message: str, counter: int, entry: AnalysisEntry, solutions: List[str]) -> None:
        self.message = message
        self.counter = counter
        self.entry = entry
        self.solutions = solutions

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Problem":
        check_type(value, dict, path)
        solutions = []
        for i, solution in enumerate(get_field(value, "solutions", list, path)):
            check_type(solution, dict, f"{path}/solutions/{i}")
            solutions.append(get_field(solution, "message", str, f"{path}/solutions/{i}"))
        return cls(
            get_field(value, "message", str, path),
            get_field(value, "counter", int, path),
            AnalysisEntry.from_json(value.get("entry"), f"{path}/entry"),
            solutions)


class Information:
    """An information extracted from the log, like the game or Java version.
    """

    __slots__ = "message", "counter", "label", "value", "entry"

    def __init__(self, message: str, counter: int, label: str, value: str, entry: AnalysisEntry) -> None:
        self.message = message
        self.counter = counter
        self.label = label
        self.value = value
        self.entry = entry

    @classmethod
    def from_json(cls, value: Any, path: str) -> "Information":
        check_type(value, dict, path)
        return cls(
            get_field(value, "message", str, path),
            get_field(value, "counter", int, path),
            get_field(value, "label", str, path),
            get_field(value, "value", str, path),
            AnalysisEntry.from_json(value.get("entry"), f"{path}/entry"))


class LogInsights:
    """The automatic analysis of a log.
    """

    __slots__ = "id", "name", "type", "version", "title", "problems", "information"

    def __init__(self, id: str, name: str, type: str, version: str, title: str,
        problems: List[Problem],
        information: List[Information]
    ) -> None:
        self.id = id
        self.name = name
        self.type = type
        self.version = version
        self.title = title
        self.problems = problems
        self.information = information

    @classmethod
    def from_json(cls, value: Any, path: str) -> "LogInsights":
        check_type(value, dict, path)
        analysis = get_field(value, "analysis", dict, path)
        problems = get_field(analysis, "problems", list, f"{path}/analysis")
        information = get_field(analysis, "information", list, f"{path}/analysis")
        return cls(
            get_field(value, "id", str, path),
            get_field(value, "name", str, path),
            get_field(value, "type", str, path),
            get_field(value, "version", str, path),
            get_field(value, "title", str, path),
            [Problem.from_json(p, f"{path}/analysis/problems/{i}") for i, p in enumerate(problems)],
            [Information.from_json(p, f"{path}/analysis/information/{i}") for i, p in enumerate(information)])

    def __repr__(self) -> str:
        return f"<LogInsights {self.id}: {self.title}>"


def _error_message(data: Any) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, str):
            return error
    return "unknown error"


def post_log(content: str) -> LogFileMetadata:
    """Share a log, its content is given as text.

    :raises MCLogsError: If the API refuses the log.
    :raises HttpError: If the request fails.
    """

    data = http_request("POST", f"{API_V1}/log",
        form={"content": content},
        accept="application/json").json()

    if not isinstance(data, dict) or "success" not in data:
        raise MCLogsError("'success' field not in response")

    success = data["success"]
    if success is True:
        return LogFileMetadata.from_json(data, "mclogs: /log")
    elif success is False:
        raise MCLogsError(_error_message(data))
    else:
        raise MCLogsError("'success' field in response was not a bool")


def fetch_raw_log(id: str) -> str:
    """Fetch the raw content of a shared log.

    :raises MCLogsError: If the log doesn't exist, the API then answers with JSON.
    :raises HttpError: If the request fails.
    """
    res = http_request("GET", f"{API_V1}/raw/{id}")
    if res.content_type() == "application/json":
        raise MCLogsError(_error_message(res.json()))
    return res.text()


def fetch_insights(id: str) -> LogInsights:
    """Fetch the automatic analysis of a shared log.

    :raises MCLogsError: If the log doesn't exist.
    :raises HttpError: If the request fails.
    """
    data = http_request("GET", f"{API_V1}/insights/{id}", accept="application/json").json()
    if isinstance(data, dict) and data.get("success") is False:
        raise MCLogsError(_error_message(data))
    return LogInsights.from_json(data, f"mclogs: /insights/{id}")
