"""FlowParser - Sequence-style interaction flows to Processes.

Parses one flow file in a single forward scan. Each physical line is
classified by the first matching rule:

    priority  rule
    0         note body (inside a multi-line note)
    10        blank line
    20        title <text>
    30        == section ==
    40        comment (#, ', //)
    41        note ...
    42        participant declaration
    43        control keyword (alt, else, end, opt, ...)
    50        FROM -> TO : description
    60        TO <-- FROM : description
    70        FROM -->(N) TO : [topic] description

A line no rule claims aborts the parse with FlowSyntaxError; a step that
names an unknown element aborts it with UndefinedElementError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from archflow.errors import FlowSyntaxError, UndefinedElementError
from archflow.graph.elements import Element, SourceLocation
from archflow.graph.hierarchy import ElementHierarchy
from archflow.graph.parsers import ParseContext, ParseResult, ParseWarning, RuleRegistry
from archflow.graph.process import AsyncStep, Process, SyncStep

# Element keys: words joined by single hyphens ("order-api", "db_1")
KEY = r"\w+(?:-\w+)*"


@dataclass
class FlowState:
    """Mutable state of one forward scan.

    Attributes:
        hierarchy: Frozen element hierarchy used to resolve step keys.
        title: Running title used to name processes.
        current: The process under construction.
        processes: Completed processes, in file order.
        note_line: Line number of the open multi-line note, or None.
        note_text: Text of the line that opened the note.
        keep_return_steps: Keep ``TO <-- FROM`` lines as sync steps.
    """

    hierarchy: ElementHierarchy
    title: str
    current: Process
    processes: list[Process] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)
    note_line: int | None = None
    note_text: str = ""
    keep_return_steps: bool = False

    def close_current(self) -> None:
        """Append the process under construction to the output."""
        if self.current.section is None:
            self.current.title = self.title
        self.processes.append(self.current)

    def resolve(self, key: str, context: ParseContext, line_number: int) -> Element:
        try:
            return self.hierarchy.resolve(key)
        except UndefinedElementError as exc:
            raise UndefinedElementError(key, context.file_path, line_number) from exc

    def warn(self, message: str, context: ParseContext, line_number: int | None = None) -> None:
        self.warnings.append(ParseWarning(message, context.file_path, line_number))


class _PatternRule:
    """Base for rules that claim a line by regex match."""

    name = "rule"
    priority = 100
    pattern: re.Pattern[str]

    def match(self, line: str, state: FlowState) -> re.Match[str] | None:
        return self.pattern.match(line)

    def apply(
        self,
        match: re.Match[str],
        line_number: int,
        state: FlowState,
        context: ParseContext,
    ) -> None:
        pass


class NoteBodyRule(_PatternRule):
    """Lines inside ``note over x`` ... ``end note``."""

    name = "note-body"
    priority = 0
    pattern = re.compile(r"^(?P<end>\s*end\s*note\s*$)?", re.IGNORECASE)

    def match(self, line: str, state: FlowState) -> re.Match[str] | None:
        if state.note_line is None:
            return None
        return self.pattern.match(line)

    def apply(self, match, line_number, state, context):
        if match.group("end"):
            state.note_line = None


class BlankRule(_PatternRule):
    name = "blank"
    priority = 10
    pattern = re.compile(r"^\s*$")


class TitleRule(_PatternRule):
    """``title <text>`` sets the running title; it never closes a process."""

    name = "title"
    priority = 20
    pattern = re.compile(r"^\s*title(?!\s*(?:-|<-))\s+(?P<title>.+?)\s*$", re.IGNORECASE)

    def apply(self, match, line_number, state, context):
        state.title = match.group("title")


class SectionRule(_PatternRule):
    """``== name ==`` starts a new process named ``"<title> - <name>"``."""

    name = "section"
    priority = 30
    pattern = re.compile(r"^\s*={2,}\s*(?P<section>.*?[^=\s].*?)\s*={2,}\s*$")

    def apply(self, match, line_number, state, context):
        if state.current.steps:
            state.close_current()
        elif state.current.section is not None:
            state.warn(
                f"section '{state.current.section}' has no steps and was dropped",
                context,
                line_number,
            )
        state.current = Process(
            title=state.title,
            section=match.group("section"),
            source_path=context.file_path,
        )


class CommentRule(_PatternRule):
    name = "comment"
    priority = 40
    pattern = re.compile(r"^\s*(?:#|'|//)")


class NoteRule(_PatternRule):
    """``note ...``; a note without ``:`` opens a block closed by ``end note``."""

    name = "note"
    priority = 41
    pattern = re.compile(r"^\s*[rh]?note(?![-\w])(?!\s*(?:-|<-))(?P<rest>.*)$", re.IGNORECASE)

    def apply(self, match, line_number, state, context):
        if ":" not in match.group("rest"):
            state.note_line = line_number
            state.note_text = match.group(0).strip()


class ParticipantRule(_PatternRule):
    name = "participant"
    priority = 42
    pattern = re.compile(
        r"^\s*(?:participant|actor|boundary|control|entity|database|collections|queue)"
        r"\s+(?![\s<-])",
        re.IGNORECASE,
    )


class ControlKeywordRule(_PatternRule):
    name = "control-keyword"
    priority = 43
    pattern = re.compile(
        r"^\s*(?:alt|else|end|opt|loop|par|group|break|critical|ref|activate|deactivate"
        r"|autonumber|skinparam|hide|@startuml|@enduml)"
        r"(?!\s*[<-])(?=\s|$)",
        re.IGNORECASE,
    )


class SyncStepRule(_PatternRule):
    name = "sync-step"
    priority = 50
    pattern = re.compile(
        rf"^\s*(?P<source>{KEY})\s*->\s*(?P<destination>{KEY})\s*:\s*(?P<description>.*?)\s*$"
    )

    def apply(self, match, line_number, state, context):
        step = SyncStep(
            source=state.resolve(match.group("source"), context, line_number),
            destination=state.resolve(match.group("destination"), context, line_number),
            description=match.group("description"),
            location=SourceLocation(context.file_path, line_number),
        )
        if not step.description:
            state.warn(
                f"description of step '{step}' is empty - may show erroneously on diagram",
                context,
                line_number,
            )
        state.current.steps.append(step)


class ReturnStepRule(_PatternRule):
    """``TO <-- FROM : description``; discarded unless return steps are kept."""

    name = "return-step"
    priority = 60
    pattern = re.compile(
        rf"^\s*(?P<destination>{KEY})\s*<--\s*(?P<source>{KEY})\s*:\s*(?P<description>.*?)\s*$"
    )

    def apply(self, match, line_number, state, context):
        source = state.resolve(match.group("source"), context, line_number)
        destination = state.resolve(match.group("destination"), context, line_number)
        if state.keep_return_steps:
            state.current.steps.append(
                SyncStep(
                    source=source,
                    destination=destination,
                    description=match.group("description"),
                    location=SourceLocation(context.file_path, line_number),
                )
            )


class AsyncStepRule(_PatternRule):
    name = "async-step"
    priority = 70
    pattern = re.compile(
        rf"^\s*(?P<source>{KEY})\s*-?->\((?P<order>\d)\)\s*(?P<destination>{KEY})\s*:"
        r"\s*\[(?P<topic>[^\]]*)\]\s*(?P<description>.*?)\s*$"
    )

    def apply(self, match, line_number, state, context):
        state.current.steps.append(
            AsyncStep(
                source=state.resolve(match.group("source"), context, line_number),
                destination=state.resolve(match.group("destination"), context, line_number),
                description=match.group("description"),
                topic=match.group("topic").strip(),
                location=SourceLocation(context.file_path, line_number),
            )
        )


DEFAULT_RULES = (
    NoteBodyRule,
    BlankRule,
    TitleRule,
    SectionRule,
    CommentRule,
    NoteRule,
    ParticipantRule,
    ControlKeywordRule,
    SyncStepRule,
    ReturnStepRule,
    AsyncStepRule,
)


def create_registry() -> RuleRegistry[FlowState]:
    """Create a registry holding the default flow grammar."""
    registry: RuleRegistry[FlowState] = RuleRegistry()
    for rule_class in DEFAULT_RULES:
        registry.register(rule_class())
    return registry


class FlowParser:
    """Parses flow files into Processes.

    The hierarchy is passed in once and only read; parsing two files with
    the same parser shares no mutable state.
    """

    def __init__(
        self,
        hierarchy: ElementHierarchy,
        keep_return_steps: bool = False,
        registry: RuleRegistry[FlowState] | None = None,
    ) -> None:
        """
        Args:
            hierarchy: Element hierarchy used to resolve step keys.
            keep_return_steps: Keep ``TO <-- FROM`` lines as sync steps
                instead of discarding them.
            registry: Rule registry (defaults to the standard grammar).
        """
        self.hierarchy = hierarchy
        self.keep_return_steps = keep_return_steps
        self.registry = registry if registry is not None else create_registry()

    def parse_text(self, text: str, file_path: str = "<string>") -> ParseResult[Process]:
        """Parse flow text.

        Args:
            text: Full content of one flow file.
            file_path: Path shown in process sources and error messages.

        Returns:
            ParseResult with the processes in file order and any warnings.

        Raises:
            FlowSyntaxError: A line matched no rule, or a note block was
                never closed.
            UndefinedElementError: A step named an unknown element key.
        """
        context = ParseContext(file_path=file_path)
        state = FlowState(
            hierarchy=self.hierarchy,
            title=Path(file_path).stem,
            current=Process(title="", source_path=file_path),
            keep_return_steps=self.keep_return_steps,
        )

        for line_number, line in enumerate(text.splitlines(), start=1):
            if self.registry.dispatch(line, line_number, state, context) is None:
                raise FlowSyntaxError(Path(file_path).name, line_number, line)

        if state.note_line is not None:
            raise FlowSyntaxError(
                Path(file_path).name,
                state.note_line,
                state.note_text,
                reason="note is never closed with 'end note'",
            )

        state.close_current()
        if not state.current.steps:
            state.warn(f"process '{state.current.name}' has no steps", context)

        return ParseResult(items=state.processes, warnings=state.warnings)

    def parse_file(self, file_path: Path, display_path: str | None = None) -> ParseResult[Process]:
        """Parse one flow file.

        Args:
            file_path: Path to the flow file.
            display_path: Path used in messages (defaults to file_path).

        Returns:
            ParseResult with processes and warnings.
        """
        text = file_path.read_text(encoding="utf-8")
        return self.parse_text(text, display_path or str(file_path))

