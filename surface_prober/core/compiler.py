"""
Compiles probe programs (see ir.py) into self-contained JavaScript.

Every compiled probe is an IIFE that never throws and returns an envelope:

    {id, status: "ok", value}
    {id, status: "error", name, message}
    {id, status: "inconsistent", message}

Names only ever reach the output as validated identifiers or as JSON string
literals.
"""
import json
import re
from typing import Optional

from surface_prober.core import ir


IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "yield", "let", "static",
    "implements", "interface", "package", "private", "protected", "public",
    "await",
})


class InvalidIdentifierError(ValueError):
    pass


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER.match(name or ""))


def is_bindable(name: str) -> bool:
    """True if `name` can be written as a bare global reference."""
    return is_identifier(name) and name not in RESERVED_WORDS


def js_string(value: str) -> str:
    return json.dumps(value)


_PRELUDE = """
      var probeId = %(probe_id)s;
      function ok(value) {
        return { id: probeId, status: "ok", value: value };
      }
      function fail(e, suffix) {
        var name = "Error", message = "";
        try {
          name = (e && e.name) ? String(e.name) : typeof e;
          message = (e && e.message !== undefined) ? String(e.message) : String(e);
        } catch (_) {}
        return { id: probeId + (suffix || ""), status: "error", name: name, message: message };
      }
      function inconsistent(message) {
        return { id: probeId, status: "inconsistent", message: message };
      }
"""


class JavaScriptCompiler:
    """
    IR -> JavaScript.

    `global_object` decides how GlobalRef is resolved: None emits a bare
    identifier (lexical globals included), anything else is used as the
    object expression the binding is read from, ex. "globalThis".
    """

    def __init__(self, global_object: Optional[str] = None):
        self.global_object = global_object

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def compile(self, program: ir.Program, probe_id: str) -> str:
        handlers = {
            ir.SupportProgram: self._support,
            ir.StaticProgram: self._static,
            ir.ShapeProgram: self._shape,
            ir.ConstantProgram: self._constant,
            ir.CssSupportProgram: self._css_support,
            ir.CssEnumerationProgram: self._css_enumeration,
        }
        handler = handlers.get(type(program))
        if handler is None:
            raise TypeError(f"Unknown probe program: {type(program).__name__}")

        body = handler(program)
        return (
            "(function () {"
            + _PRELUDE % {"probe_id": js_string(probe_id)}
            + body
            + "})()"
        )

    def expr(self, node: ir.Expr) -> str:
        if isinstance(node, ir.GlobalRef):
            if self.global_object is not None:
                return f"{self.global_object}[{js_string(node.name)}]"
            if not is_bindable(node.name):
                raise InvalidIdentifierError(f"Not a bindable global name: {node.name!r}")
            return node.name

        if isinstance(node, ir.Member):
            target = self.expr(node.target)
            if is_identifier(node.name):
                return f"{target}.{node.name}"
            return f"{target}[{js_string(node.name)}]"

        if isinstance(node, ir.TypeOf):
            return f"typeof {self.expr(node.target)}"

        if isinstance(node, ir.IsDefined):
            return f'typeof {self.expr(node.target)} !== "undefined"'

        if isinstance(node, ir.Invoke):
            return f"{self.expr(node.callee)}()"

        if isinstance(node, ir.Construct):
            return f"new {self.expr(node.callee)}()"

        if isinstance(node, ir.HasKey):
            return f"{js_string(node.key)} in {self.expr(node.target)}"

        if isinstance(node, ir.StyleOf):
            if node.source == "body":
                return "document.body.style"
            return f"document.createElement({js_string(node.source)}).style"

        raise TypeError(f"Unknown probe expression: {type(node).__name__}")

    # ------------------------------------------------------------------
    # Programs
    # ------------------------------------------------------------------
    def _support(self, program: ir.SupportProgram) -> str:
        root_defined = self.expr(ir.IsDefined(target=program.root))
        if program.casing_guard is None:
            root_check = f"if (!({root_defined})) {{ return ok(false); }}"
        else:
            lower = program.casing_guard.name
            message = f"{program.root.name} is not supported but {lower} is supported"
            root_check = f"""if (!({root_defined})) {{
          if ({self.expr(ir.IsDefined(target=program.casing_guard))}) {{
            return inconsistent({js_string(message)});
          }}
          return ok(false);
        }}"""

        if program.prototype_path is None:
            prototype_branch = "return ok(false);"
        else:
            prototype_branch = f"return ok({self.expr(ir.IsDefined(target=program.prototype_path))});"

        return f"""
      if (typeof window === "undefined") {{ return ok(false); }}
      try {{
        {root_check}
        if ({self.expr(ir.IsDefined(target=program.full_path))}) {{ return ok(true); }}
        if ({self.expr(ir.IsDefined(target=program.prototype))}) {{
          {prototype_branch}
        }}
        return ok(false);
      }} catch (e) {{
        return fail(e);
      }}
"""

    def _static(self, program: ir.StaticProgram) -> str:
        return f"""
      try {{
        return ok({self.expr(ir.IsDefined(target=program.full_path))});
      }} catch (e) {{
        return fail(e);
      }}
"""

    def _shape(self, program: ir.ShapeProgram) -> str:
        target = program.target
        return f"""
      var report = {{ memberOnly: false, isFunction: false, call: null, construct: null }};
      try {{
        report.isFunction = {self.expr(ir.TypeOf(target=target))} === "function";
      }} catch (e) {{
        return fail(e);
      }}
      if (!report.isFunction) {{ return ok(report); }}
      try {{
        {self.expr(ir.Invoke(callee=target))};
        report.call = {{ id: probeId + "#call", status: "ok" }};
      }} catch (e) {{
        report.call = fail(e, "#call");
      }}
      try {{
        {self.expr(ir.Construct(callee=target))};
        report.construct = {{ id: probeId + "#construct", status: "ok" }};
      }} catch (e) {{
        report.construct = fail(e, "#construct");
      }}
      return ok(report);
"""

    def _constant(self, program: ir.ConstantProgram) -> str:
        return f"""
      return ok({json.dumps(program.value, sort_keys=True)});
"""

    def _css_support(self, program: ir.CssSupportProgram) -> str:
        checks = "\n".join(
            f"        if ({self.expr(check)}) {{ return ok(true); }}"
            for check in program.checks
        )
        return f"""
      try {{
{checks}
        return ok(false);
      }} catch (e) {{
        return fail(e);
      }}
"""

    def _css_enumeration(self, program: ir.CssEnumerationProgram) -> str:
        return f"""
      try {{
        var style = {self.expr(program.style)};
        var keys = [];
        for (var key in style) {{ keys.push(key); }}
        return ok(keys);
      }} catch (e) {{
        return fail(e);
      }}
"""
