"""Evaluates PullApprove condition expressions against a set of files.

PullApprove conditions are Python expressions. They are parsed once and interpreted
node by node against a namespace that provides the helpers PullApprove offers
(https://docs.pullapprove.com/config/conditions). Only a safe subset of the expression
syntax is accepted.
"""

import ast
import operator
from typing import Any, Callable, Sequence

from ng_dev.pullapprove.arrays import PullApproveGroupArray, PullApproveStringArray
from ng_dev.utils.glob import matches_glob

ConditionFunction = Callable[[Sequence[str], Sequence[Any]], bool]

_ALLOWED_NODES = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.UnaryOp,
    ast.Not,
    ast.Compare,
    ast.In,
    ast.NotIn,
    ast.Eq,
    ast.NotEq,
    ast.Gt,
    ast.GtE,
    ast.Lt,
    ast.LtE,
    ast.Is,
    ast.IsNot,
    ast.Call,
    ast.keyword,
    ast.Name,
    ast.Load,
    ast.Attribute,
    ast.Constant,
    ast.List,
    ast.Tuple,
)


class ConditionParseError(Exception):
    """Raised when a condition is not a supported expression."""

    pass


def contains_any_globs(files: Sequence[str], patterns: Sequence[str]) -> bool:
    return any(matches_glob(file, pattern) for file in files for pattern in patterns)


CONDITION_CONTEXT: dict[str, Any] = {
    "len": len,
    "contains_any_globs": contains_any_globs,
    "True": True,
    "False": False,
    "None": None,
}

_COMPARISONS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}


def _assert_supported_expression(tree: ast.AST, expression: str) -> None:
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise ConditionParseError(f"Unsupported syntax ({type(node).__name__}) in condition: {expression}")
        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            raise ConditionParseError(f"Access to private attribute '{node.attr}' in condition: {expression}")
        if isinstance(node, ast.Name) and node.id.startswith("_"):
            raise ConditionParseError(f"Access to private name '{node.id}' in condition: {expression}")
        if isinstance(node, ast.keyword) and node.arg is None:
            raise ConditionParseError(f"Unsupported keyword unpacking in condition: {expression}")


def evaluate_node(node: ast.AST, namespace: dict[str, Any]) -> Any:
    """Evaluates a node of a supported condition expression against the namespace.

    Raises:
        NameError: If the expression references a name missing from the namespace.
    """
    if isinstance(node, ast.Expression):
        return evaluate_node(node.body, namespace)
    if isinstance(node, ast.Constant):
        return node.value
    if isinstance(node, ast.Name):
        if node.id not in namespace:
            raise NameError(f"name '{node.id}' is not defined")
        return namespace[node.id]
    if isinstance(node, ast.Attribute):
        return getattr(evaluate_node(node.value, namespace), node.attr)
    if isinstance(node, ast.List):
        return [evaluate_node(element, namespace) for element in node.elts]
    if isinstance(node, ast.Tuple):
        return tuple(evaluate_node(element, namespace) for element in node.elts)
    if isinstance(node, ast.Call):
        function = evaluate_node(node.func, namespace)
        args = [evaluate_node(arg, namespace) for arg in node.args]
        kwargs = {keyword.arg: evaluate_node(keyword.value, namespace) for keyword in node.keywords}
        return function(*args, **kwargs)
    if isinstance(node, ast.UnaryOp):
        return not evaluate_node(node.operand, namespace)
    if isinstance(node, ast.BoolOp):
        # Short-circuits like Python, returning the deciding operand.
        result: Any = None
        for value in node.values:
            result = evaluate_node(value, namespace)
            if isinstance(node.op, ast.And) and not result:
                return result
            if isinstance(node.op, ast.Or) and result:
                return result
        return result
    if isinstance(node, ast.Compare):
        left = evaluate_node(node.left, namespace)
        for op, comparator in zip(node.ops, node.comparators):
            right = evaluate_node(comparator, namespace)
            if not _COMPARISONS[type(op)](left, right):
                return False
            left = right
        return True
    raise ConditionParseError(f"Unsupported syntax ({type(node).__name__})")


def convert_condition_to_function(expression: str) -> ConditionFunction:
    """Converts a condition into a function that checks whether a set of files matches it.

    The returned function receives the files and the groups preceding the group of the
    condition. A list result counts as matching when it is not empty.

    Raises:
        ConditionParseError: If the expression is not valid or uses unsupported syntax.
    """
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as exc:
        raise ConditionParseError(f"Invalid condition: {expression} ({exc.msg})") from exc
    _assert_supported_expression(tree, expression)

    def check(files: Sequence[str], groups: Sequence[Any]) -> bool:
        namespace = {
            **CONDITION_CONTEXT,
            "files": PullApproveStringArray(files),
            "groups": PullApproveGroupArray(groups),
        }
        result = evaluate_node(tree, namespace)
        if isinstance(result, list):
            return len(result) != 0
        return bool(result)

    return check
