"""Arithmetic calculator tool."""

import ast
import math
import operator
from typing import Any

from ai_orchestrator.tools.base import Tool


_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MAX_EXPONENT = 1000
MAX_RESULT_DIGITS = 4000  # Below the interpreter's int-to-str digit limit


def evaluate_expression(expression: str) -> int | float:
    """
    Evaluate an arithmetic expression without executing code.

    Supports numbers, parentheses, unary +/- and the operators
    + - * / // % **.

    Raises:
        ValueError: For anything that is not plain arithmetic
        ZeroDivisionError: On division by zero
    """
    tree = ast.parse(expression.strip(), mode="eval")
    return _evaluate(tree.body)


def _evaluate(node: ast.AST) -> int | float:
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate(node.left)
        right = _evaluate(node.right)
        _check_size(node.op, left, right)
        return _BINARY_OPERATORS[type(node.op)](left, right)

    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def _digits(value: int) -> float:
    return math.log10(abs(value)) if value else 0.0


def _check_size(op: ast.operator, left: int | float, right: int | float) -> None:
    """
    Reject integer operations whose result would be too large to build.

    Integer powers and products are computed exactly and synchronously, so
    the size is estimated before evaluating. Float overflow is left to
    raise OverflowError.
    """
    if isinstance(op, ast.Pow) and abs(right) > MAX_EXPONENT:
        raise ValueError("Exponent too large")

    if not (isinstance(left, int) and isinstance(right, int)):
        return

    if isinstance(op, ast.Pow) and right > 0 and abs(left) > 1:
        estimate = right * _digits(left)
    elif isinstance(op, ast.Mult):
        estimate = _digits(left) + _digits(right)
    else:
        return

    if estimate > MAX_RESULT_DIGITS:
        raise ValueError("Result too large")


def format_number(value: int | float) -> str:
    """Render whole floats without a trailing .0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CalculatorTool(Tool):
    """Evaluates arithmetic expressions such as '12 * 7' or '(3 + 4) ** 2'."""

    name = "calculator"
    description = "Perform mathematical calculations. Use this for any math operations."

    parameters = {
        "type": "object",
        "properties": {
            "expression": {
                "type": "string",
                "description": "The mathematical expression to evaluate (e.g., '2 + 2', '15 * 7')",
            },
        },
        "required": ["expression"],
    }

    async def execute(self, params: dict[str, Any]) -> str:
        expression = str(params.get("expression", ""))
        try:
            formatted = format_number(evaluate_expression(expression))
        except (SyntaxError, ValueError, TypeError, ZeroDivisionError, OverflowError):
            return f"Error evaluating expression: {expression}"
        return f"Result: {formatted}"
