"""Tests for FlowParser - whole-file parsing into processes."""

import pytest

from archflow.errors import FlowSyntaxError, UndefinedElementError
from archflow.graph.parsers.flow import FlowParser
from archflow.graph.process import AsyncStep
from tests.helpers import CHECKOUT_FLOW, make_hierarchy, parse_flow, process_names, steps_string


class TestProcessSplitting:
    """Tests for how a file is split into processes."""

    def test_file_without_sections_is_one_process(self, hierarchy):
        result = parse_flow(
            hierarchy,
            "title Checkout\ncustomer -> web : open\nweb -> order-api : list\n",
        )

        assert process_names(result) == ["Checkout"]
        assert steps_string(result.items[0]) == [
            "customer -> web: open",
            "web -> order-api: list",
        ]

    def test_title_defaults_to_file_stem(self, hierarchy):
        result = parse_flow(hierarchy, "customer -> web : open\n", file_path="flows/refunds.txt")

        assert process_names(result) == ["refunds"]

    def test_sections_split_processes(self, hierarchy):
        result = parse_flow(hierarchy, CHECKOUT_FLOW)

        assert process_names(result) == ["Checkout - Browse", "Checkout - Pay"]
        assert len(result.items[0]) == 2
        assert len(result.items[1]) == 5

    def test_steps_belong_to_their_section(self, hierarchy):
        result = parse_flow(
            hierarchy,
            "title T\n== A ==\nweb -> cart : a\n== B ==\nweb -> orders : b\ncart -> orders : c\n",
        )

        assert [steps_string(p) for p in result] == [
            ["web -> cart: a"],
            ["web -> orders: b", "cart -> orders: c"],
        ]

    def test_one_process_per_section_marker(self, hierarchy):
        text = "title T\n" + "".join(f"== S{i} ==\nweb -> cart : x\n" for i in range(4))

        result = parse_flow(hierarchy, text)

        assert len(result) == 4

    def test_trailing_empty_section_is_kept(self, hierarchy):
        result = parse_flow(
            hierarchy,
            "title T\n== Section 1 ==\nweb -> cart : add\n== Section 2 ==\n",
        )

        assert process_names(result) == ["T - Section 1", "T - Section 2"]
        assert [len(p) for p in result] == [1, 0]
        assert any("has no steps" in w.message for w in result.warnings)

    def test_title_change_applies_to_next_section(self, hierarchy):
        result = parse_flow(
            hierarchy,
            "title First\n== A ==\nweb -> cart : a\ntitle Second\n== B ==\nweb -> cart : b\n",
        )

        assert process_names(result) == ["First - A", "Second - B"]

    def test_title_after_steps_renames_unsectioned_process(self, hierarchy):
        result = parse_flow(hierarchy, "web -> cart : a\ntitle Late\n")

        assert process_names(result) == ["Late"]

    def test_empty_file(self, hierarchy):
        result = parse_flow(hierarchy, "", file_path="empty.txt")

        assert process_names(result) == ["empty"]
        assert len(result.items[0]) == 0

    def test_source_path_recorded(self, hierarchy):
        result = parse_flow(hierarchy, CHECKOUT_FLOW, file_path="flows/checkout.txt")

        assert {p.source_path for p in result} == {"flows/checkout.txt"}


class TestGrammar:
    """Tests for mixed content in realistic flow files."""

    def test_plantuml_noise_is_ignored(self, hierarchy):
        text = """\
@startuml
title Checkout
skinparam monochrome true
actor customer
participant web
autonumber
' comment
# another comment
note over web
  web -> nowhere : ignored inside note
end note
alt happy path
    customer -> web : pay
else card declined
    web <-- bank : declined
end
@enduml
"""
        result = parse_flow(hierarchy, text)

        assert process_names(result) == ["Checkout"]
        assert steps_string(result.items[0]) == ["customer -> web: pay"]

    def test_async_steps_carry_topic(self, hierarchy):
        result = parse_flow(hierarchy, CHECKOUT_FLOW)

        last = result.items[1].steps[-1]
        assert isinstance(last, AsyncStep)
        assert last.topic == "order-placed"

    def test_keyword_prefixed_keys_are_steps(self):
        h = make_hierarchy(
            [
                ("system", "note-service", None),
                ("system", "note", None),
                ("system", "title", None),
                ("system", "mailer", None),
            ]
        )
        text = (
            "title T\n"
            "note-service -> mailer : send\n"
            "note -> mailer : queue\n"
            "title -> mailer : rename\n"
        )

        result = parse_flow(h, text)

        assert steps_string(result.items[0]) == [
            "note-service -> mailer: send",
            "note -> mailer: queue",
            "title -> mailer: rename",
        ]

    def test_keep_return_steps(self, hierarchy):
        result = parse_flow(
            hierarchy,
            "web -> order-api : list\nweb <-- order-api : products\n",
            keep_return_steps=True,
        )

        assert steps_string(result.items[0]) == [
            "web -> order-api: list",
            "order-api -> web: products",
        ]


class TestErrors:
    """Tests for fail-fast error reporting."""

    def test_undefined_key_aborts(self, hierarchy):
        with pytest.raises(UndefinedElementError) as exc_info:
            parse_flow(
                hierarchy,
                "title T\nweb -> cart : ok\nweb -> zzz : fetch\n",
                file_path="flows/t.txt",
            )

        assert exc_info.value.key == "zzz"
        assert "zzz" in str(exc_info.value)
        assert exc_info.value.line == 3

    def test_undefined_key_is_chained(self, hierarchy):
        with pytest.raises(UndefinedElementError) as exc_info:
            parse_flow(hierarchy, "zzz -> web : fetch\n")

        assert isinstance(exc_info.value.__cause__, UndefinedElementError)

    def test_unmatched_line(self, hierarchy):
        with pytest.raises(FlowSyntaxError) as exc_info:
            parse_flow(
                hierarchy,
                "title T\n\nweb => cart : nope\n",
                file_path="flows/broken.txt",
            )

        error = exc_info.value
        assert error.file_name == "broken.txt"
        assert error.line == 3
        assert error.line_index == 2
        assert error.text == "web => cart : nope"
        assert str(error) == "broken.txt:3: line cannot be parsed: 'web => cart : nope'"

    def test_unclosed_note(self, hierarchy):
        with pytest.raises(FlowSyntaxError) as exc_info:
            parse_flow(
                hierarchy,
                "title T\nnote over web\nweb -> cart : x\n",
                file_path="flows/t.txt",
            )

        error = exc_info.value
        assert error.line == 2
        assert error.text == "note over web"
        assert str(error) == "t.txt:2: note is never closed with 'end note': 'note over web'"


class TestParseFile:
    """Tests for FlowParser.parse_file()."""

    def test_parse_file(self, hierarchy, tmp_path):
        path = tmp_path / "checkout.txt"
        path.write_text(CHECKOUT_FLOW, encoding="utf-8")

        result = FlowParser(hierarchy).parse_file(path, "flows/checkout.txt")

        assert process_names(result) == ["Checkout - Browse", "Checkout - Pay"]
        assert result.items[0].source_path == "flows/checkout.txt"

    def test_parser_is_reusable(self, hierarchy):
        parser = FlowParser(hierarchy)

        first = parser.parse_text("web -> cart : a\n", "one.txt")
        second = parser.parse_text("web -> cart : b\n", "two.txt")

        assert process_names(first) == ["one"]
        assert process_names(second) == ["two"]
