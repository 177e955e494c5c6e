"""
Tests for the output simulator
"""

import pytest

from javaquiz.simulator import (
    MISSING_ENTRY_POINT,
    SUCCESS_NO_OUTPUT,
    simulate,
)


class TestSimulate:
    """Fallback order of the text heuristics."""

    def test_println_literal(self):
        source = (
            "public class X { public static void main(String[] a)"
            '{ System.out.println("Hello, Java!"); } }'
        )
        assert simulate(source) == "Program output:\nHello, Java!"

    def test_main_without_print(self):
        assert simulate("public static void main(String[] a){ int x = 1; }") == (
            SUCCESS_NO_OUTPUT
        )

    def test_no_entry_point(self):
        assert simulate("int x = 1;") == MISSING_ENTRY_POINT

    def test_empty_source(self):
        assert simulate("") == MISSING_ENTRY_POINT

    def test_first_literal_wins(self):
        source = 'System.out.println("one"); System.out.println("two");'
        assert simulate(source) == "Program output:\none"

    def test_print_literal_without_main(self):
        assert simulate('System.out.println("hi");') == "Program output:\nhi"

    def test_empty_literal(self):
        assert simulate('System.out.println("");') == "Program output:\n"

    @pytest.mark.parametrize(
        "call",
        [
            "System.out.println(name);",
            'System.out.println("a" + b);',
            "System.out.println();",
        ],
    )
    def test_non_literal_argument_falls_through(self, call):
        source = "public static void main(String[] a){ " + call + " }"
        assert simulate(source) == SUCCESS_NO_OUTPUT
