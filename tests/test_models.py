import pytest
from pydantic import ValidationError

from surface_prober.core.models import ProbeOutcome, ProtoChainRecord, ShapeReport


def test_proto_chain_id_is_the_dotted_join():
    record = ProtoChainRecord(apiType="js-api", type="js-api", protoChain=["HTMLInputElement", "indeterminate"])
    assert record.proto_chain_id == "HTMLInputElement.indeterminate"
    assert record.root == "HTMLInputElement"
    assert record.rest == ["indeterminate"]


def test_field_names_are_accepted_as_well_as_aliases():
    record = ProtoChainRecord(api_type="js-api", type="js-api", proto_chain=["Window"])
    assert record.proto_chain_id == "Window"


def test_type_defaults_to_api_type():
    record = ProtoChainRecord(apiType="css-api", protoChain=["css", "properties", "grid"])
    assert record.type == "css-api"


def test_mismatching_proto_chain_id_is_rejected():
    with pytest.raises(ValidationError):
        ProtoChainRecord(apiType="js-api", type="js-api", protoChain=["Window", "alert"], protoChainId="Window")


@pytest.mark.parametrize("chain", [[], ["Window", ""]])
def test_empty_chains_and_segments_are_rejected(chain):
    with pytest.raises(ValidationError):
        ProtoChainRecord(apiType="js-api", type="js-api", protoChain=chain)


def test_unknown_api_type_is_rejected():
    with pytest.raises(ValidationError, match="Invalid API type"):
        ProtoChainRecord(apiType="html-api", type="html-api", protoChain=["Window"])


def test_records_are_frozen():
    record = ProtoChainRecord(apiType="js-api", type="js-api", protoChain=["Window"])
    with pytest.raises(ValidationError):
        record.is_static = True


def test_to_output_uses_camel_case_keys():
    record = ProtoChainRecord(
        apiType="js-api",
        type="js-api",
        protoChain=["Window"],
        isSupported=True,
        astNodeTypes=["MemberExpression"],
        isStatic=True,
    )
    assert record.to_output() == {
        "apiType": "js-api",
        "type": "js-api",
        "protoChain": ["Window"],
        "protoChainId": "Window",
        "isSupported": True,
        "astNodeTypes": ["MemberExpression"],
        "astNodeType": ["MemberExpression"],
        "isStatic": True,
    }


def test_probe_outcome_status_helpers():
    ok = ProbeOutcome(id="support:Window", status="ok", value=True)
    failed = ProbeOutcome(id="support:Window", status="error", name="TypeError", message="x")
    assert ok.ok and not ok.failed
    assert failed.failed and not failed.ok


def test_shape_report_reads_browser_keys():
    report = ShapeReport.model_validate({
        "memberOnly": False,
        "isFunction": True,
        "call": {"id": "shape:Date#call", "status": "ok"},
        "construct": None,
    })
    assert report.is_function
    assert report.call.ok
    assert report.construct_outcome is None


def test_shape_report_construct_key_does_not_shadow_the_model_api():
    report = ShapeReport.model_validate({
        "isFunction": True,
        "construct": {"id": "shape:Symbol#construct", "status": "error", "name": "TypeError",
                      "message": "Symbol is not a constructor"},
    })

    assert "construct" not in ShapeReport.model_fields
    assert report.construct_outcome.name == "TypeError"
    assert report.model_dump(by_alias=True)["construct"]["message"] == "Symbol is not a constructor"
