"""
Streaming JSON writer with optional pretty printing.

Emits JSON incrementally to a text sink. A finite-state protocol validates
every call against what was written last, decides where commas, newlines and
indentation belong, and rejects call sequences that would produce malformed
output before anything reaches the sink.
"""

import logging
import math
import os
import sys
import time
from dataclasses import dataclass
from enum import Enum
from io import StringIO
from typing import IO
from typing import Any
from typing import Final
from typing import TypeAlias

from jsonwriter._escape import escape

__version__ = "0.1.0"

# Type aliases for domain concepts - recursive definition
JsonValue = (
    str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
)
Scalar: TypeAlias = str | int | float | bool | None
# More permissive type for internal/test use
JsonValueLoose = Any

logger = logging.getLogger(__name__)

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "JSONWRITER_PROFILE" in os.environ

LINE_TERMINATOR: Final = "\n"
DEFAULT_INDENT: Final = 4


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during writing."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        """Records a function call with timing and character output info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, chars_to_process: int = 0):
            self.func_name = func_name
            self.chars = chars_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.chars)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:
    # Zero-cost in production - ignore arguments to nullcontext
    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str, chars: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class WriterState(Enum):
    """
    Protocol states of the writer, naming what was written last.

    The writer starts in INITIAL. There is no terminal state; a document is
    complete once the container stack is empty again.
    """

    INITIAL = "initial"
    OBJECT_START = "object_start"
    OBJECT_END = "object_end"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    MEMBER = "member"
    MEMBER_NAME = "member_name"
    VALUE = "value"


class ContainerType(Enum):
    """Kind of an open container on the writer's stack."""

    OBJECT = "object"
    ARRAY = "array"


class FormatAction(Enum):
    """Formatting step performed before a transition's own output."""

    COMMA = "comma"
    NEWLINE = "newline"


Transition: TypeAlias = tuple[WriterState, WriterState]
Actions: TypeAlias = tuple[FormatAction, ...]

_COMMA_NEWLINE: Final[Actions] = (FormatAction.COMMA, FormatAction.NEWLINE)
_NEWLINE: Final[Actions] = (FormatAction.NEWLINE,)

# (sources, targets, actions) rows of the transition table
_TRANSITION_ROWS: Final = (
    (
        (WriterState.INITIAL, WriterState.MEMBER_NAME),
        (WriterState.OBJECT_START, WriterState.ARRAY_START, WriterState.VALUE),
        (),
    ),
    (
        (WriterState.OBJECT_START,),
        (WriterState.OBJECT_END, WriterState.MEMBER, WriterState.MEMBER_NAME),
        _NEWLINE,
    ),
    (
        (WriterState.ARRAY_START,),
        (
            WriterState.OBJECT_START,
            WriterState.ARRAY_START,
            WriterState.ARRAY_END,
            WriterState.VALUE,
        ),
        _NEWLINE,
    ),
    (
        (WriterState.OBJECT_END, WriterState.ARRAY_END, WriterState.VALUE),
        (
            WriterState.OBJECT_START,
            WriterState.ARRAY_START,
            WriterState.MEMBER,
            WriterState.MEMBER_NAME,
            WriterState.VALUE,
        ),
        _COMMA_NEWLINE,
    ),
    (
        (WriterState.OBJECT_END, WriterState.ARRAY_END, WriterState.VALUE),
        (WriterState.OBJECT_END, WriterState.ARRAY_END),
        _NEWLINE,
    ),
    (
        (WriterState.MEMBER,),
        (WriterState.OBJECT_END,),
        _NEWLINE,
    ),
    (
        (WriterState.MEMBER,),
        (WriterState.MEMBER, WriterState.MEMBER_NAME),
        _COMMA_NEWLINE,
    ),
)


def _build_transitions() -> dict[Transition, Actions]:
    """Expands the table rows into a lookup keyed by (current, target)."""
    table: dict[Transition, Actions] = {}
    for sources, targets, actions in _TRANSITION_ROWS:
        for source in sources:
            for target in targets:
                table[(source, target)] = actions
    return table


TRANSITIONS: Final[dict[Transition, Actions]] = _build_transitions()

# Targets that place a value (scalar or container) at the current position
_VALUE_TARGETS: Final = frozenset(
    {WriterState.OBJECT_START, WriterState.ARRAY_START, WriterState.VALUE}
)
_MEMBER_TARGETS: Final = frozenset(
    {WriterState.MEMBER, WriterState.MEMBER_NAME}
)

_DESCRIPTIONS: Final = {
    WriterState.INITIAL: "the start of the document",
    WriterState.OBJECT_START: "the start of an object",
    WriterState.OBJECT_END: "the end of an object",
    WriterState.ARRAY_START: "the start of an array",
    WriterState.ARRAY_END: "the end of an array",
    WriterState.MEMBER: "an object member",
    WriterState.MEMBER_NAME: "a member name",
    WriterState.VALUE: "a value",
}


def is_transition_allowed(current: WriterState, target: WriterState) -> bool:
    """Reports whether the transition table permits current -> target."""
    return (current, target) in TRANSITIONS


class StructureError(ValueError):
    """
    Signals a call sequence that would produce structurally invalid JSON.

    Raised before anything is written for the rejected call; the writer's
    state is left exactly as it was, so callers may catch it and abort.
    """

    def __init__(
        self,
        msg: str,
        state: WriterState,
        target: WriterState | None = None,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")

        self.msg = msg
        self.state = state
        self.target = target

        super().__init__(f"{msg} (writer state: {state.value})")


def _check_bool(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise TypeError(f"{name} must be a boolean")


def _check_indent(indent: Any) -> None:
    if isinstance(indent, bool) or not isinstance(indent, int):
        raise TypeError("indent must be an integer")
    if indent < 0:
        raise ValueError("indent must be a non-negative integer")


@dataclass(frozen=True)
class WriterConfig:
    """
    Configures writer formatting with immutable settings.

    Centralized configuration for pretty printing, indentation, null member
    handling and non-ASCII escaping.
    """

    pretty_print: bool = False
    indent: int = DEFAULT_INDENT
    write_null_members: bool = False
    escape_non_ascii: bool = False

    def __post_init__(self) -> None:
        _check_bool("pretty_print", self.pretty_print)
        _check_indent(self.indent)
        _check_bool("write_null_members", self.write_null_members)
        _check_bool("escape_non_ascii", self.escape_non_ascii)


def _format_float(value: float) -> str:
    """Shortest round-trip form, always carrying a fractional part."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    mantissa, sep, exponent = float.__repr__(value).partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return mantissa + sep + exponent


# Marks a member call that carries only a name
_NO_VALUE: Final = object()


class JsonWriter:
    """
    Writes JSON incrementally, with or without pretty printing.

    Callers drive the writer through a fixed vocabulary of operations:
    start/end containers, write members and write values. Each call is
    checked against the transition table keyed by the last thing written
    and the thing about to be written; the table entry says whether a comma
    and/or a line break precede the output. Output goes to the sink
    immediately; the writer never flushes or closes it.

    Not safe for concurrent use. Every method except the configuration
    properties returns the writer for chaining:

        writer = JsonWriter(sink, WriterConfig(pretty_print=True))
        writer.start_object().member("foo", "bar").member("joe", 12).end_object()
    """

    def __init__(
        self, out: IO[str] | None = None, config: WriterConfig | None = None
    ) -> None:
        if config is None:
            config = WriterConfig()

        self._out = out if out is not None else sys.stdout
        self._pretty_print = config.pretty_print
        self._indent = config.indent
        self._indent_str = " " * config.indent
        self._write_null_members = config.write_null_members
        self._escape_non_ascii = config.escape_non_ascii

        self._containers: list[ContainerType] = []
        self._state = WriterState.INITIAL

    @property
    def pretty_print(self) -> bool:
        """Whether output is formatted with newlines and indentation."""
        return self._pretty_print

    @pretty_print.setter
    def pretty_print(self, enable: bool) -> None:
        _check_bool("pretty_print", enable)
        logger.debug("pretty_print set to %s", enable)
        self._pretty_print = enable

    @property
    def indent(self) -> int:
        """Number of spaces per nesting level when pretty printing."""
        return self._indent

    @indent.setter
    def indent(self, indent: int) -> None:
        _check_indent(indent)
        logger.debug("indent set to %d", indent)
        self._indent = indent
        self._indent_str = " " * indent

    @property
    def write_null_members(self) -> bool:
        """Whether members whose value is None are written as null."""
        return self._write_null_members

    @write_null_members.setter
    def write_null_members(self, enable: bool) -> None:
        _check_bool("write_null_members", enable)
        logger.debug("write_null_members set to %s", enable)
        self._write_null_members = enable

    @property
    def escape_non_ascii(self) -> bool:
        """Whether characters above the ASCII range are written as escapes."""
        return self._escape_non_ascii

    @escape_non_ascii.setter
    def escape_non_ascii(self, enable: bool) -> None:
        _check_bool("escape_non_ascii", enable)
        logger.debug("escape_non_ascii set to %s", enable)
        self._escape_non_ascii = enable

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def depth(self) -> int:
        return len(self._containers)

    def start_object(self) -> "JsonWriter":
        """Writes the start of an object."""
        with ProfileContext("start_object", 1):
            self._start_container(ContainerType.OBJECT)
        return self

    def end_object(self) -> "JsonWriter":
        """Writes the end of an object."""
        with ProfileContext("end_object", 1):
            self._end_container(ContainerType.OBJECT)
        return self

    def start_array(self) -> "JsonWriter":
        """Writes the start of an array."""
        with ProfileContext("start_array", 1):
            self._start_container(ContainerType.ARRAY)
        return self

    def end_array(self) -> "JsonWriter":
        """Writes the end of an array."""
        with ProfileContext("end_array", 1):
            self._end_container(ContainerType.ARRAY)
        return self

    def member(self, name: str, value: Any = _NO_VALUE) -> "JsonWriter":
        """
        Writes an object member.

        With only a name, writes the name and separator; the member's value
        must follow through value(), start_object() or start_array(). With a
        value, writes the complete member. A None value is skipped entirely
        unless write_null_members is enabled, in which case it is written as
        null.

        Args:
            name: Member name
            value: Scalar member value (str, int, float, bool or None)

        Returns:
            This writer
        """
        if value is _NO_VALUE:
            member_start = self._member_start(name)
            with ProfileContext("member_name", len(member_start)):
                self._transition(WriterState.MEMBER_NAME)
                self._out.write(member_start)
            return self

        if value is None and not self._write_null_members:
            return self

        member_start = self._member_start(name)
        rendered = self._render(value)
        with ProfileContext("member", len(member_start) + len(rendered)):
            self._transition(WriterState.MEMBER)
            self._out.write(member_start)
            self._out.write(rendered)
        return self

    def member_start_object(self, name: str) -> "JsonWriter":
        """Writes a member whose value is the start of an object."""
        return self.member(name).start_object()

    def member_start_array(self, name: str) -> "JsonWriter":
        """Writes a member whose value is the start of an array."""
        return self.member(name).start_array()

    def value(self, value: Scalar) -> "JsonWriter":
        """
        Writes an array element, a named member's value or a top-level value.

        None is always written as null, regardless of write_null_members.
        """
        rendered = self._render(value)
        with ProfileContext("value", len(rendered)):
            self._transition(WriterState.VALUE)
            self._out.write(rendered)
            self._write_last_newline()
        return self

    def write(self, obj: JsonValueLoose) -> "JsonWriter":
        """
        Streams a tree of dicts, lists, tuples and scalars.

        Dict items become members and follow the null member policy; lists
        and tuples become arrays.
        """
        if isinstance(obj, dict):
            self.start_object()
            for name, item in obj.items():
                if isinstance(item, dict | list | tuple):
                    self.member(name)
                    self.write(item)
                else:
                    self.member(name, item)
            self.end_object()
        elif isinstance(obj, list | tuple):
            self.start_array()
            for item in obj:
                self.write(item)
            self.end_array()
        else:
            self.value(obj)
        return self

    def write_escaped_string(self, text: str) -> None:
        """Writes text escaped and quoted, bypassing the state machine."""
        self._out.write(self._quote(text))

    def _start_container(self, kind: ContainerType) -> None:
        if kind is ContainerType.OBJECT:
            target, delimiter = WriterState.OBJECT_START, "{"
        else:
            target, delimiter = WriterState.ARRAY_START, "["

        self._transition(target)
        self._out.write(delimiter)
        self._containers.append(kind)

    def _end_container(self, kind: ContainerType) -> None:
        if kind is ContainerType.OBJECT:
            target, delimiter = WriterState.OBJECT_END, "}"
        else:
            target, delimiter = WriterState.ARRAY_END, "]"

        if not self._containers:
            raise self._violation(
                f"Cannot end an {kind.value}: no container is open", target
            )
        open_kind = self._containers[-1]
        if open_kind is not kind:
            raise self._violation(
                f"Expected to end an {kind.value} but the open container "
                f"is an {open_kind.value}",
                target,
            )

        actions = self._check(target)
        # Indentation before the closing delimiter uses the outer depth
        self._containers.pop()
        self._apply(target, actions)
        self._out.write(delimiter)
        self._write_last_newline()

    def _check(self, target: WriterState) -> Actions:
        """Validates a transition without side effects, returning its actions."""
        actions = TRANSITIONS.get((self._state, target))
        if actions is None:
            raise self._violation(
                f"Cannot write {_DESCRIPTIONS[target]} after "
                f"{_DESCRIPTIONS[self._state]}",
                target,
            )

        open_kind = self._containers[-1] if self._containers else None
        if target in _MEMBER_TARGETS and open_kind is not ContainerType.OBJECT:
            raise self._violation(
                f"Cannot write {_DESCRIPTIONS[target]} outside of an object",
                target,
            )
        if (
            target in _VALUE_TARGETS
            and open_kind is ContainerType.OBJECT
            and self._state is not WriterState.MEMBER_NAME
        ):
            raise self._violation(
                f"Cannot write {_DESCRIPTIONS[target]} in an object "
                "without a member name",
                target,
            )
        return actions

    def _apply(self, target: WriterState, actions: Actions) -> None:
        self._state = target
        for action in actions:
            if action is FormatAction.COMMA:
                self._out.write(",")
            else:
                self._write_newline()

    def _transition(self, target: WriterState) -> None:
        self._apply(target, self._check(target))

    def _violation(self, msg: str, target: WriterState) -> StructureError:
        logger.debug(
            "rejecting %s in state %s: %s", target.value, self._state.value, msg
        )
        return StructureError(msg, self._state, target)

    def _write_newline(self) -> None:
        if self._pretty_print:
            self._out.write(
                LINE_TERMINATOR + self._indent_str * len(self._containers)
            )

    def _write_last_newline(self) -> None:
        """Terminates the document once the outermost construct is done."""
        if not self._containers:
            self._write_newline()

    def _member_start(self, name: str) -> str:
        if not isinstance(name, str):
            msg = f"member names must be strings, not {type(name).__name__}"
            raise TypeError(msg)
        separator = ": " if self._pretty_print else ":"
        return self._quote(name) + separator

    def _quote(self, text: str) -> str:
        return '"' + escape(text, self._escape_non_ascii) + '"'

    def _render(self, value: Any) -> str:  # noqa: PLR0911
        """Renders a scalar value as JSON text."""
        if value is None:
            return "null"
        elif value is True:
            return "true"
        elif value is False:
            return "false"
        elif isinstance(value, str):
            return self._quote(value)
        elif isinstance(value, int):
            return int.__repr__(value)
        elif isinstance(value, float):
            return _format_float(value)
        else:
            msg = f"Object of type {type(value).__name__} is not JSON serializable"
            raise TypeError(msg)


def dumps(obj: JsonValueLoose, **kwargs: Any) -> str:
    """
    Serializes Python objects to a JSON string through a JsonWriter.

    Keyword arguments build the WriterConfig for the run.
    """
    config = WriterConfig(**kwargs)
    out = StringIO()
    JsonWriter(out, config).write(obj)
    return out.getvalue()


def dump(obj: JsonValueLoose, fp: IO[str], **kwargs: Any) -> None:
    """
    Serializes Python objects to a text file through a JsonWriter.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    config = WriterConfig(**kwargs)
    JsonWriter(fp, config).write(obj)


__all__ = [
    "TRANSITIONS",
    "ContainerType",
    "FormatAction",
    "HotPathStats",
    "JsonWriter",
    "StructureError",
    "WriterConfig",
    "WriterState",
    "clear_hot_path_stats",
    "dump",
    "dumps",
    "escape",
    "get_hot_path_stats",
    "is_transition_allowed",
]
