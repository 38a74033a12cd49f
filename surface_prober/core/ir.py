"""
Probe intermediate representation.

Probes are described as small trees of expression nodes wrapped in a program
node per probe kind. Nothing here knows about JavaScript syntax; the compiler
turns a program into source text for the execution bridge.
"""
from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Union


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


# ----------------------------------------------------------------------
# Expressions
# ----------------------------------------------------------------------

class GlobalRef(_Node):
    """The global binding named `name`, resolved by the host environment."""
    name: str


class Member(_Node):
    target: "Expr"
    name: str


class TypeOf(_Node):
    target: "Expr"


class IsDefined(_Node):
    target: "Expr"


class Invoke(_Node):
    callee: "Expr"


class Construct(_Node):
    callee: "Expr"


class HasKey(_Node):
    """`key in target`"""
    key: str
    target: "Expr"


class StyleOf(_Node):
    """Inline style object of the live body, or of a fresh throwaway element."""
    source: str = "body"


Expr = Union[GlobalRef, Member, TypeOf, IsDefined, Invoke, Construct, HasKey, StyleOf]

for _model in (Member, TypeOf, IsDefined, Invoke, Construct, HasKey):
    _model.model_rebuild()


def path_expr(segments: List[str]) -> Expr:
    """["a", "b", "c"] -> Member(Member(GlobalRef(a), b), c)"""
    expr: Expr = GlobalRef(name=segments[0])
    for segment in segments[1:]:
        expr = Member(target=expr, name=segment)
    return expr


# ----------------------------------------------------------------------
# Programs (one per probe kind)
# ----------------------------------------------------------------------

class SupportProgram(_Node):
    root: GlobalRef
    full_path: Expr
    prototype: Expr
    # None when the chain is only the root
    prototype_path: Optional[Expr] = None
    # lowercase twin of the root, checked before anything else
    casing_guard: Optional[GlobalRef] = None


class StaticProgram(_Node):
    full_path: Expr


class ShapeProgram(_Node):
    target: Expr


class ConstantProgram(_Node):
    """Probe whose answer is known without touching the page."""
    value: dict


class CssSupportProgram(_Node):
    checks: List[HasKey]


class CssEnumerationProgram(_Node):
    style: StyleOf


Program = Union[
    SupportProgram,
    StaticProgram,
    ShapeProgram,
    ConstantProgram,
    CssSupportProgram,
    CssEnumerationProgram,
]
