from typing import Dict, Optional

from surface_prober.config import CASE_SENSITIVE_EXCEPTIONS, CSS_API, JS_API
from surface_prober.core import ir
from surface_prober.core.compiler import JavaScriptCompiler, is_bindable
from surface_prober.core.models import ProtoChainRecord


SUPPORT = "support"
STATIC = "static"
SHAPE = "shape"
CSS_SUPPORT = "css-support"
CSS_PROPERTIES = "css-properties"
CSS_VALUES = "css-values"


def probe_id(kind: str, record: Optional[ProtoChainRecord] = None) -> str:
    if record is None:
        return kind
    return f"{kind}:{record.proto_chain_id}"


class ProbeSynthesizer:
    """
    Turns a ProtoChainRecord into probe source text.

    Every method is pure: same record in, same text out. The text only reads
    global state, except the shape probe which invokes single-segment
    functions to learn how they may be called.
    """

    def __init__(self, compiler: JavaScriptCompiler | None = None):
        self.compiler = compiler or JavaScriptCompiler()

    # ------------------------------------------------------------------
    # Program builders (IR)
    # ------------------------------------------------------------------
    def support_program(self, record: ProtoChainRecord) -> ir.SupportProgram:
        root = ir.GlobalRef(name=record.root)
        prototype_path = None
        if record.rest:
            prototype_path = ir.path_expr([record.root, "prototype", *record.rest])

        return ir.SupportProgram(
            root=root,
            full_path=ir.path_expr(record.proto_chain),
            prototype=ir.Member(target=root, name="prototype"),
            prototype_path=prototype_path,
            casing_guard=self._casing_guard(record.root),
        )

    def _casing_guard(self, root: str) -> Optional[ir.GlobalRef]:
        lower = root.lower()
        if lower == root or lower == "function" or root in CASE_SENSITIVE_EXCEPTIONS:
            return None
        # ex. lowercase twin is a keyword ("Function" -> "function")
        if not is_bindable(lower):
            return None
        return ir.GlobalRef(name=lower)

    def static_program(self, record: ProtoChainRecord) -> ir.StaticProgram:
        return ir.StaticProgram(full_path=ir.path_expr(record.proto_chain))

    def shape_program(self, record: ProtoChainRecord) -> ir.Program:
        # a dotted path is already a property read: no need to probe it
        if len(record.proto_chain) > 1:
            return ir.ConstantProgram(value={"memberOnly": True})
        return ir.ShapeProgram(target=ir.GlobalRef(name=record.root))

    def css_support_program(self, record: ProtoChainRecord) -> ir.CssSupportProgram:
        name = record.proto_chain[-1]
        return ir.CssSupportProgram(checks=[
            # properties
            ir.HasKey(key=name, target=ir.StyleOf(source="body")),
            # values
            ir.HasKey(key=name, target=ir.StyleOf(source="div")),
        ])

    # ------------------------------------------------------------------
    # Probe source text
    # ------------------------------------------------------------------
    def support_probe(self, record: ProtoChainRecord) -> str:
        return self.compiler.compile(self.support_program(record), probe_id(SUPPORT, record))

    def static_probe(self, record: ProtoChainRecord) -> str:
        """
        Only meaningful for supported records.

        ex. ['Array', 'push'] => false
        ex. ['document', 'querySelector'] => true
        """
        return self.compiler.compile(self.static_program(record), probe_id(STATIC, record))

    def shape_probe(self, record: ProtoChainRecord) -> str:
        return self.compiler.compile(self.shape_program(record), probe_id(SHAPE, record))

    def css_support_probe(self, record: ProtoChainRecord) -> str:
        return self.compiler.compile(self.css_support_program(record), probe_id(CSS_SUPPORT, record))

    def css_properties_probe(self) -> str:
        """Camel-cased keys of the live body's inline style."""
        program = ir.CssEnumerationProgram(style=ir.StyleOf(source="body"))
        return self.compiler.compile(program, probe_id(CSS_PROPERTIES))

    def css_values_probe(self) -> str:
        """Camel-cased keys of a throwaway element's style."""
        program = ir.CssEnumerationProgram(style=ir.StyleOf(source="div"))
        return self.compiler.compile(program, probe_id(CSS_VALUES))

    def supported_probe(self, record: ProtoChainRecord) -> str:
        """Support probe of the family the record belongs to."""
        if record.type == CSS_API:
            return self.css_support_probe(record)
        return self.support_probe(record)

    def probes_for(self, record: ProtoChainRecord) -> Dict[str, str]:
        if record.type == CSS_API:
            return {
                "apiIsSupported": self.css_support_probe(record),
                "allCSSValues": self.css_values_probe(),
                "allCSSProperties": self.css_properties_probe(),
            }
        if record.type == JS_API:
            return {
                "apiIsSupported": self.support_probe(record),
                "determineASTNodeTypes": self.shape_probe(record),
                "determineIsStatic": self.static_probe(record),
            }
        raise ValueError(f'Invalid API type: "{record.type}"')
