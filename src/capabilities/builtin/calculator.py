# src/capabilities/builtin/calculator.py — v1
"""Arithmetic tool: add, subtract, multiply, divide, power on `a` and `b`."""

from __future__ import annotations

import math
import operator
from typing import Any, Callable

from agentweave.capabilities.base import BaseTool
from agentweave.core.models import ToolResult

_OPERATIONS: dict[str, Callable[[float, float], float]] = {
    "add": operator.add,
    "subtract": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
    "power": operator.pow,
}


class CalculatorTool(BaseTool):
    @property
    def name(self) -> str:
        return "calculator"

    @property
    def description(self) -> str:
        return "Basic arithmetic on two numbers (add, subtract, multiply, divide, power)"

    def call(self, parameters: dict[str, Any]) -> ToolResult:
        op_name = str(parameters.get("operation", "")).lower()
        op = _OPERATIONS.get(op_name)
        if op is None:
            return ToolResult(
                success=False,
                error=f"unknown operation {op_name!r}; expected one of {', '.join(_OPERATIONS)}",
            )

        try:
            a = float(parameters["a"])
            b = float(parameters["b"])
        except KeyError as exc:
            return ToolResult(success=False, error=f"missing operand {exc.args[0]!r}")
        except (TypeError, ValueError):
            return ToolResult(success=False, error="operands must be numbers")

        if op_name == "divide" and b == 0:
            return ToolResult(success=False, error="division by zero")

        try:
            value = op(a, b)
        except OverflowError:
            return ToolResult(success=False, error="result out of range")

        if isinstance(value, complex):
            return ToolResult(success=False, error="result is not a real number")
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            value = int(value)
        return ToolResult(success=True, output=value)
