"""Built-in tools.

Only ``calculate`` does real work; the others are simulated and report
what they would have done.
"""

from __future__ import annotations

import ast
import math
import operator
from typing import Literal

from pydantic import BaseModel, Field

from .base import BaseTool, ToolRegistry

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS = {
    "abs": abs,
    "round": round,
    "min": min,
    "max": max,
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "exp": math.exp,
    "floor": math.floor,
    "ceil": math.ceil,
}

_CONSTANTS = {"pi": math.pi, "e": math.e, "tau": math.tau, "PI": math.pi, "E": math.e}

# Guards against expressions like 9**9**9 and ((9**999)**999)**99
_MAX_EXPONENT = 1000
_MAX_RESULT_BITS = 10_000

# JS-style namespaces the model tends to write (Math.sqrt(2))
_NAMESPACES = ("Math", "math")


def evaluate_expression(expression: str) -> int | float:
    """Safely evaluate an arithmetic expression.

    Raises:
        ValueError: If the expression is not plain arithmetic.
    """
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f'Invalid expression "{expression}"') from e
    try:
        return _eval_node(tree.body)
    except (ArithmeticError, TypeError) as e:
        raise ValueError(f'Cannot evaluate "{expression}": {e}') from e


def _eval_node(node: ast.AST) -> int | float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        if isinstance(node.value, bool):
            raise ValueError("Booleans are not numbers")
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left, right = _eval_node(node.left), _eval_node(node.right)
        _check_size(node.op, left, right)
        return _BINARY_OPS[type(node.op)](left, right)
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]
    if isinstance(node, ast.Attribute) and _is_namespace(node.value):
        if node.attr in _CONSTANTS:
            return _CONSTANTS[node.attr]
    if isinstance(node, ast.Call) and not node.keywords:
        func = _resolve_function(node.func)
        if func is not None:
            return func(*(_eval_node(arg) for arg in node.args))
    raise ValueError(f"Unsupported expression element: {ast.dump(node)[:60]}")


def _check_size(op: ast.operator, left: int | float, right: int | float) -> None:
    if isinstance(op, ast.Pow) and abs(right) > _MAX_EXPONENT:
        raise ValueError("Exponent too large")
    if not (isinstance(left, int) and isinstance(right, int)):
        return
    if isinstance(op, ast.Pow):
        bits = left.bit_length() * right if abs(left) > 1 else 0
    elif isinstance(op, ast.Mult):
        bits = left.bit_length() + right.bit_length()
    else:
        return
    if bits > _MAX_RESULT_BITS:
        raise ValueError("Result too large")


def _is_namespace(node: ast.AST) -> bool:
    return isinstance(node, ast.Name) and node.id in _NAMESPACES


def _resolve_function(node: ast.AST):
    if isinstance(node, ast.Name):
        return _FUNCTIONS.get(node.id)
    if isinstance(node, ast.Attribute) and _is_namespace(node.value):
        return _FUNCTIONS.get(node.attr)
    return None


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return str(value)


class Calculate(BaseTool):
    """Evaluate a math expression."""

    name = "calculate"
    description = "Evaluate a math expression such as \"2 + 2\" or \"sqrt(16) * pi\""
    deterministic = True

    class Arguments(BaseModel):
        expression: str = Field(min_length=1, description="Math expression to evaluate")

    async def run(self, args: Arguments) -> str:
        return f"Result: {_format_number(evaluate_expression(args.expression))}"


class WebSearch(BaseTool):
    """Search the web (simulated)."""

    name = "web_search"
    description = "Search the web for information"

    class Arguments(BaseModel):
        query: str = Field(min_length=1, description="Search keywords")
        num_results: int = Field(default=5, ge=1, le=20, description="Number of results")

    async def run(self, args: Arguments) -> str:
        return f'[Web search simulated]\nQuery: "{args.query}"\nFound {args.num_results} results'


class ExecuteCode(BaseTool):
    """Execute code (simulated; there is no sandbox)."""

    name = "execute_code"
    description = "Execute a JavaScript/TypeScript snippet and return the result"

    class Arguments(BaseModel):
        code: str = Field(min_length=1, description="Code to execute")
        language: Literal["javascript", "typescript"] = "javascript"

    async def run(self, args: Arguments) -> str:
        preview = args.code[:100]
        return f"[Code execution simulated]\nLanguage: {args.language}\nCode: {preview}"


class FileOperations(BaseTool):
    """Read or write a file (simulated)."""

    name = "file_operations"
    description = "Read or write file contents"

    class Arguments(BaseModel):
        operation: Literal["read", "write"]
        path: str = Field(min_length=1, description="File path")
        content: str | None = Field(default=None, description="Content to write (write only)")

    async def run(self, args: Arguments) -> str:
        if args.operation == "read":
            return f"[File read simulated]\nPath: {args.path}"
        if args.content is None:
            raise ValueError("content is required for write operations")
        return f"[File write simulated]\nPath: {args.path}\nContent: {args.content[:50]}"


def default_tool_registry() -> ToolRegistry:
    """Registry with all built-in tools."""
    return ToolRegistry([Calculate(), WebSearch(), ExecuteCode(), FileOperations()])
