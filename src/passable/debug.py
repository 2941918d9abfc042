"""Convert a parsed CMakeFile to a lark Tree for `--dump-ast`.

`set(A b) # note` dumps as::

    file
      command
        name	set
        args
          unquoted	A
          unquoted	b
        tail	# note
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from lark import Token, Tree

from .tree import (
    ArgList,
    Argument,
    BlockComment,
    BracketedString,
    CMakeFile,
    CommandInvocation,
    ConditionalBlock,
    Directive,
    GroupedArg,
    PairedCall,
    QuotedString,
    Statement,
    UnformattedRegion,
    UnquotedString,
    VariableReference,
)


def _leaf(label: str, value: str) -> Tree:
    return Tree(label, [Token(label.upper(), value)])


def _with_tail(children: List[Tree], comment: Optional[str], label: str = "tail") -> List[Tree]:
    if comment:
        children.append(_leaf(label, comment))
    return children


def _args(label: str, args: Optional[ArgList]) -> Tree:
    children: List[Tree] = []
    if args is not None:
        _with_tail(children, args.prefix_tail_comment, "prefix_tail")
        children.extend(_argument(arg) for arg in args.args)
    return Tree(label, children)


def _comment(comment: BlockComment) -> Tree:
    node = _leaf("comment", comment.text)
    if comment.tail_comment:
        node.children.append(_leaf("tail", comment.tail_comment))
    return node


def _argument(arg: Argument) -> Tree:
    if isinstance(arg, BlockComment):
        return _comment(arg)
    if isinstance(arg, GroupedArg):
        return Tree("group", _with_tail([_args("args", arg.args)], arg.tail_comment))

    if isinstance(arg, QuotedString):
        node = _leaf("quoted", arg.value)
    elif isinstance(arg, UnquotedString):
        node = _leaf("unquoted", arg.value)
    elif isinstance(arg, VariableReference):
        node = _leaf("variable", arg.name)
    elif isinstance(arg, BracketedString):
        node = _leaf(f"bracketed_{arg.level}", arg.value)
    else:
        raise TypeError(f"Unknown argument node: {type(arg).__name__}")

    if arg.tail_comment:
        return Tree("arg", [node, _leaf("tail", arg.tail_comment)])
    return node


def _clause(label: str, keyword: str, args: Optional[ArgList], tail: Optional[str],
            body: Optional[Sequence[Statement]] = None) -> Tree:
    children = _with_tail([_leaf("keyword", keyword), _args("args", args)], tail)
    if body is not None:
        children.append(Tree("body", [_statement(stmt) for stmt in body]))
    return Tree(label, children)


def _statement(stmt: Statement) -> Tree:
    if isinstance(stmt, CommandInvocation):
        children = [_leaf("name", stmt.name), _args("args", stmt.args)]
        return Tree("command", _with_tail(children, stmt.tail_comment))

    if isinstance(stmt, ConditionalBlock):
        clauses = [_clause("if", stmt.keyword, stmt.condition, stmt.if_tail_comment, stmt.body)]
        for branch in stmt.elseif_blocks:
            clauses.append(_clause("elseif", branch.keyword, branch.condition, branch.tail_comment, branch.body))
        if stmt.else_block is not None:
            branch = stmt.else_block
            clauses.append(_clause("else", branch.keyword, branch.args, branch.tail_comment, branch.body))
        clauses.append(_clause("endif", stmt.endif_keyword, stmt.endif_args, stmt.endif_tail_comment))
        return Tree("conditional", clauses)

    if isinstance(stmt, PairedCall):
        return Tree("paired", [
            _clause("open", stmt.open_keyword, stmt.params, stmt.start_tail_comment, stmt.body),
            _clause("close", stmt.close_keyword, stmt.end_args, stmt.end_tail_comment),
        ])

    if isinstance(stmt, BlockComment):
        return Tree("blank", []) if stmt.is_blank else _comment(stmt)
    if isinstance(stmt, Directive):
        return _leaf("directive", stmt.text)
    if isinstance(stmt, UnformattedRegion):
        return Tree("unformatted", [Token("LINE", line) for line in stmt.lines])

    raise TypeError(f"Unknown statement node: {type(stmt).__name__}")


def to_lark_tree(ast: CMakeFile) -> Tree:
    """Build a lark Tree mirroring the AST."""
    return Tree("file", [_statement(stmt) for stmt in ast.statements])


def dump_ast(ast: CMakeFile) -> str:
    return to_lark_tree(ast).pretty()
