"""Render a minimized failing history as a standalone pytest module.

The generated module builds a fresh subject, replays every operation but the
last, and asserts the last operation against the result the reference model
produces for the whole history.
"""

from __future__ import annotations

import ast
import inspect
import logging
import re
import textwrap
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from mapcheck.common import Comparator, comparator_name
from mapcheck.ops import Command, History, Operation
from mapcheck.runner import final_result
from mapcheck.subjects import SubjectFactory

__all__ = [
    "RenderedComparator",
    "default_repro_name",
    "emit_repro",
    "produce_repro",
    "render_comparator",
    "render_op",
]


_INDENT = "    "

_SYMBOLS = {
    "asc": "ASCENDING",
    "desc": "DESCENDING",
}

# Locals bound inside the generated test function
_LOCAL_NAMES = frozenset(["comp", "tree"])


def render_op(op: Operation, target: str = "tree") -> str:
    """Render an operation as a Python call expression on ``target``."""
    match op.command:
        case Command.GET:
            return f"{target}.get({op.key!r})"
        case Command.GET_INDEX:
            return f"{target}.get_index({op.arr_index!r}, {op.reversed!r}, {op.key!r})"
        case Command.SET:
            return f"{target}.set({op.key!r}, {op.value!r})"
        case Command.REMOVE:
            return f"{target}.remove({op.key!r})"
        case Command.SIZE:
            return f"len({target})"


def render_assertion(expr: str, expected: Any) -> str:
    if expected is None or isinstance(expected, bool):
        return f"assert {expr} is {expected!r}"
    return f"assert {expr} == {expected!r}"


@dataclass(frozen=True)
class RenderedComparator:
    """How a comparator appears in generated code.

    ``imports`` and ``definition`` go at module level; ``expr`` is the
    expression bound to ``comp`` inside the test.
    """

    imports: List[str]
    definition: Optional[str]
    expr: str


def render_comparator(comparator: Comparator) -> RenderedComparator:
    """Render a comparator, symbolically when it is a well-known one.

    Other comparators are embedded from their source text. This only works
    when the source is self-contained; a comparator whose source cannot be
    recovered is rendered as its repr, which will not run as is.
    """
    name = comparator_name(comparator)
    if name is not None:
        symbol = _SYMBOLS[name]
        return RenderedComparator([f"from mapcheck.common import {symbol}"], None, symbol)
    try:
        source = textwrap.dedent(inspect.getsource(comparator)).strip()
    except (OSError, TypeError):
        logging.warning("no source for comparator %r", comparator)
        return RenderedComparator([], None, repr(comparator))
    fn_name = getattr(comparator, "__name__", "<lambda>")
    if fn_name == "<lambda>":
        expr = _trim_lambda(source)
        if expr is None:
            logging.warning("cannot isolate lambda comparator in %r", source)
            return RenderedComparator([], None, repr(comparator))
        return RenderedComparator([], None, expr)
    if fn_name in _LOCAL_NAMES:
        # Names bound in the test body cannot refer to the comparator
        alias = f"_{fn_name}_comparator"
        return RenderedComparator([], f"{source}\n\n\n{alias} = {fn_name}", alias)
    return RenderedComparator([], source, fn_name)


def _trim_lambda(source: str) -> Optional[str]:
    """Cut a lambda expression out of the source line that defines it.

    Returns:
        The lambda text, or None if no single lambda can be isolated.
    """
    expr = source[source.find("lambda") :].rstrip()
    while expr and (expr.endswith(",") or expr.count(")") > expr.count("(")):
        expr = expr[:-1].rstrip()
    try:
        node = ast.parse(expr, mode="eval").body
    except SyntaxError:
        return None
    # A lambda followed by more call arguments parses as a tuple
    if isinstance(node, ast.Tuple) and node.elts:
        node = node.elts[0]
    if not isinstance(node, ast.Lambda):
        return None
    return ast.get_source_segment(expr, node)


def default_repro_name(now: Optional[datetime] = None) -> str:
    """File name derived from a timestamp with path-unsafe characters replaced."""
    stamp = (now if now is not None else datetime.now()).isoformat()
    return "test_repro_" + re.sub(r"[^0-9A-Za-z]", "_", stamp) + ".py"


def _test_name(file_name: str) -> str:
    stem = Path(file_name).stem
    ident = re.sub(r"\W", "_", stem)
    return ident if ident.startswith("test_") else "test_" + ident


def produce_repro(
    history: History,
    comparator: Comparator,
    subject_factory: SubjectFactory,
    name: str,
) -> str:
    """Render the pytest module text for a failing history.

    Args:
        history: The (ideally minimized) failing history; must not be empty.
        comparator: The comparator both maps were built with.
        subject_factory: The subject class; it is imported by module path.
        name: The file name, used to name the test function.

    Returns:
        The module source.
    """
    last = history.last()
    if last is None:
        raise ValueError("cannot produce a repro from an empty history")
    rendered = render_comparator(comparator)
    subject_module = getattr(subject_factory, "__module__", "mapcheck.tree")
    subject_name = getattr(subject_factory, "__qualname__", "TreeMap")

    lines: List[str] = [
        f'"""Regression test generated by mapcheck ({name})."""',
        "",
    ]
    imports = sorted(set(rendered.imports + [f"from {subject_module} import {subject_name}"]))
    lines.extend(imports)
    lines.append("")
    if rendered.definition is not None:
        lines.append("")
        lines.append(rendered.definition)
        lines.append("")
    lines.append("")
    lines.append(f"def {_test_name(name)}() -> None:")
    lines.append(f"{_INDENT}comp = {rendered.expr}")
    lines.append(f"{_INDENT}tree = {subject_name}(comp)")
    lines.append("")
    for op in History(history.ops[:-1]):
        lines.append(_INDENT + render_op(op))
    expected = final_result(history, comparator)
    lines.append(_INDENT + render_assertion(render_op(last), expected))
    return "\n".join(lines) + "\n"


def emit_repro(
    history: History,
    comparator: Comparator,
    subject_factory: SubjectFactory,
    out_dir: Optional[Path],
    name: Optional[str] = None,
) -> Optional[Path]:
    """Write a repro module to ``out_dir``, or print it when ``out_dir`` is None.

    File system errors are not handled and end the run.

    Returns:
        The path written, or None when printed to the console.
    """
    file_name = name if name else default_repro_name()
    text = produce_repro(history, comparator, subject_factory, file_name)
    if out_dir is None:
        print("\n\n" + text)
        return None
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / file_name
    logging.info("writing generated test case to %s", path)
    path.write_text(text)
    return path
