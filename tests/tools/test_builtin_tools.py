"""Tests for the built-in tools."""

from __future__ import annotations

import math

import pytest

from skillstream.tools.builtin import (
    Calculate,
    ExecuteCode,
    FileOperations,
    WebSearch,
    default_tool_registry,
    evaluate_expression,
)


class TestEvaluateExpression:
    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("2 + 2", 4),
            ("10 / 4", 2.5),
            ("7 // 2", 3),
            ("7 % 3", 1),
            ("-3 ** 2", -9),
            ("2 ** 10", 1024),
            ("sqrt(16) * 2", 8.0),
            ("Math.sqrt(9)", 3.0),
            ("max(1, 5, 3)", 5),
            ("round(2.6)", 3),
        ],
    )
    def test_arithmetic(self, expression, expected):
        assert evaluate_expression(expression) == expected

    def test_constants(self):
        assert evaluate_expression("pi") == math.pi
        assert evaluate_expression("Math.PI") == math.pi
        assert evaluate_expression("2 * e") == 2 * math.e

    @pytest.mark.parametrize(
        "expression",
        [
            "__import__('os')",
            "open('x')",
            "x + 1",
            "2 +",
            "'a' * 3",
            "True + 1",
            "(1).__class__",
            "sqrt(x=4)",
        ],
    )
    def test_rejects_non_arithmetic(self, expression):
        with pytest.raises(ValueError):
            evaluate_expression(expression)

    def test_exponent_cap(self):
        with pytest.raises(ValueError, match="Exponent too large"):
            evaluate_expression("9 ** 9 ** 9")

    @pytest.mark.parametrize(
        "expression",
        [
            "((9 ** 999) ** 999) ** 99",
            "9 ** 999 * 9 ** 999 * 9 ** 999 * 9 ** 999",
        ],
    )
    def test_result_size_cap(self, expression):
        with pytest.raises(ValueError, match="Result too large"):
            evaluate_expression(expression)

    def test_large_results_within_cap(self):
        assert evaluate_expression("2 ** 1000") == 2**1000
        assert evaluate_expression("9 ** 999 * 9 ** 999") == 9**1998

    def test_division_by_zero(self):
        with pytest.raises(ValueError, match="Cannot evaluate"):
            evaluate_expression("1 / 0")


class TestCalculate:
    @pytest.mark.asyncio
    async def test_integral_result_formatting(self):
        tool = Calculate()
        assert await tool.run(Calculate.Arguments(expression="sqrt(16)")) == "Result: 4"
        assert await tool.run(Calculate.Arguments(expression="1 / 4")) == "Result: 0.25"

    def test_is_deterministic(self):
        assert Calculate.deterministic
        assert not WebSearch.deterministic


class TestSimulatedTools:
    @pytest.mark.asyncio
    async def test_web_search(self):
        out = await WebSearch().run(WebSearch.Arguments(query="python"))
        assert '"python"' in out
        assert "5 results" in out

    @pytest.mark.asyncio
    async def test_execute_code_previews(self):
        out = await ExecuteCode().run(ExecuteCode.Arguments(code="x" * 300))
        assert "Language: javascript" in out
        assert "x" * 101 not in out

    @pytest.mark.asyncio
    async def test_file_write_requires_content(self):
        args = FileOperations.Arguments(operation="write", path="/tmp/a")
        with pytest.raises(ValueError):
            await FileOperations().run(args)

    @pytest.mark.asyncio
    async def test_file_read(self):
        args = FileOperations.Arguments(operation="read", path="/tmp/a")
        assert "Path: /tmp/a" in await FileOperations().run(args)


def test_default_registry():
    registry = default_tool_registry()
    assert registry.list_tools() == ["calculate", "web_search", "execute_code", "file_operations"]
    spec = registry.get("web_search").spec()
    assert spec.parameters["required"] == ["query"]
