import pytest

from conftest import probe_id_of
from surface_prober.core import ir
from surface_prober.core.compiler import InvalidIdentifierError, JavaScriptCompiler, is_bindable


@pytest.fixture
def compiler():
    return JavaScriptCompiler()


def test_path_compiles_to_dotted_access(compiler):
    assert compiler.expr(ir.path_expr(["document", "body", "style"])) == "document.body.style"


def test_non_identifier_members_use_bracket_access(compiler):
    expr = ir.path_expr(["Array", "@@iterator"])
    assert compiler.expr(expr) == 'Array["@@iterator"]'


def test_typeof_and_defined_checks(compiler):
    target = ir.path_expr(["Array", "push"])
    assert compiler.expr(ir.TypeOf(target=target)) == "typeof Array.push"
    assert compiler.expr(ir.IsDefined(target=target)) == 'typeof Array.push !== "undefined"'


def test_invoke_and_construct(compiler):
    target = ir.GlobalRef(name="Date")
    assert compiler.expr(ir.Invoke(callee=target)) == "Date()"
    assert compiler.expr(ir.Construct(callee=target)) == "new Date()"


def test_has_key_quotes_the_key(compiler):
    expr = ir.HasKey(key='grid"); alert(1); ("', target=ir.StyleOf(source="body"))
    assert compiler.expr(expr) == '"grid\\"); alert(1); (\\"" in document.body.style'


def test_style_of_throwaway_element(compiler):
    assert compiler.expr(ir.StyleOf(source="div")) == 'document.createElement("div").style'


@pytest.mark.parametrize("name", ["function", "alert(1)", "a.b", ""])
def test_bare_globals_must_be_bindable(compiler, name):
    with pytest.raises(InvalidIdentifierError):
        compiler.expr(ir.GlobalRef(name=name))


def test_injected_global_object_resolves_bindings():
    compiler = JavaScriptCompiler(global_object="globalThis")
    expr = ir.path_expr(["Window", "alert"])
    assert compiler.expr(expr) == 'globalThis["Window"].alert'


def test_is_bindable():
    assert is_bindable("Window")
    assert is_bindable("$jq_1")
    assert not is_bindable("class")
    assert not is_bindable("1abc")


def test_compiled_probe_is_an_iife_carrying_its_id(compiler):
    program = ir.StaticProgram(full_path=ir.path_expr(["Array", "push"]))
    source = compiler.compile(program, "static:Array.push")

    assert source.startswith("(function () {")
    assert source.endswith("})()")
    assert probe_id_of(source) == "static:Array.push"
    assert "catch (e)" in source


def test_constant_program_embeds_json(compiler):
    source = compiler.compile(ir.ConstantProgram(value={"memberOnly": True}), "shape:Window.alert")
    assert 'return ok({"memberOnly": true});' in source


def test_unknown_program_is_rejected(compiler):
    with pytest.raises(TypeError):
        compiler.compile(ir.GlobalRef(name="Window"), "x")
