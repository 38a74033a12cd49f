from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from surface_prober.config import JS_API
from surface_prober.core import outcomes
from surface_prober.core.bridge import BridgeError, ExecutionBridge
from surface_prober.core.colors import Colors as C
from surface_prober.core.models import CssSurface, ProbeOutcome, ProtoChainRecord
from surface_prober.core.synthesizer import (
    CSS_PROPERTIES,
    CSS_SUPPORT,
    CSS_VALUES,
    SHAPE,
    STATIC,
    SUPPORT,
    ProbeSynthesizer,
    probe_id,
)


class PipelineState(str, Enum):
    CATALOGED = "cataloged"
    SUPPORT_CHECKED = "support_checked"
    SHAPE_AND_STATIC_CHECKED = "shape_and_static_checked"
    FINALIZED = "finalized"


class PipelineStateError(Exception):
    pass


class ClassificationPipeline:
    """
    Cataloged -> SupportChecked -> ShapeAndStaticChecked -> Finalized

    1. support probe for every record, unsupported records are dropped
    2. shape and static probes (two batches) for the surviving js-api records
    3. merge, then hand the list to `persist`

    Results are matched back to records by the probe id each envelope
    carries, not by position.
    """

    def __init__(
        self,
        bridge: ExecutionBridge,
        synthesizer: ProbeSynthesizer | None = None,
        persist: Optional[Callable[[List[ProtoChainRecord]], Any]] = None,
        verbose: bool = True,
    ):
        self.bridge = bridge
        self.synthesizer = synthesizer or ProbeSynthesizer()
        self.persist = persist
        self.verbose = verbose
        self.state = PipelineState.CATALOGED

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def _warn_unexpected(self, record: ProtoChainRecord, outcome: ProbeOutcome, kind: str):
        if outcomes.classify_error(outcome, kind) == outcomes.UNEXPECTED:
            self._log(
                f"    {C.YELLOW}[!] {kind}:{record.proto_chain_id}: {outcome.name}: {outcome.message}{C.RESET}"
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(self, records: Sequence[ProtoChainRecord]) -> List[ProtoChainRecord]:
        self._expect(PipelineState.CATALOGED)

        supported = self.check_support(records)
        finalized = self.classify(supported)

        if self.persist is not None:
            self.persist(finalized)

        self.state = PipelineState.FINALIZED
        self._log(f"{C.GREEN}[+] Finalized {len(finalized)} records{C.RESET}")
        return finalized

    def check_support(self, records: Sequence[ProtoChainRecord]) -> List[ProtoChainRecord]:
        self._expect(PipelineState.CATALOGED)
        _check_unique(records)
        self._log(f"[+] Checking support of {len(records)} records")

        results = self._execute(_support_kind, records, self.synthesizer.supported_probe)

        supported: List[ProtoChainRecord] = []
        inconsistencies: List[str] = []
        for record in records:
            outcome = results[record.proto_chain_id]
            if outcome.status == "inconsistent":
                inconsistencies.append(outcome.message or record.proto_chain_id)
                continue
            if record.type == JS_API:
                verdict = outcomes.is_supported(outcome)
            else:
                verdict = outcomes.css_is_supported(outcome)
            self._warn_unexpected(record, outcome, _support_kind(record))
            if verdict:
                supported.append(record.model_copy(update={"is_supported": True}))

        if inconsistencies:
            raise outcomes.DatasetInconsistencyError(inconsistencies)

        self.state = PipelineState.SUPPORT_CHECKED
        self._log(f"{C.CYAN}[*] {len(supported)}/{len(records)} records supported{C.RESET}")
        return supported

    def classify(self, records: Sequence[ProtoChainRecord]) -> List[ProtoChainRecord]:
        self._expect(PipelineState.SUPPORT_CHECKED)

        unsupported = [r.proto_chain_id for r in records if not r.is_supported]
        if unsupported:
            raise PipelineStateError(f"Unsupported records cannot be classified: {unsupported[:5]}")

        js_records = [r for r in records if r.type == JS_API]
        self._log(f"[+] Classifying shape and static of {len(js_records)} records")

        shapes = self._execute(SHAPE, js_records, self.synthesizer.shape_probe)
        statics = self._execute(STATIC, js_records, self.synthesizer.static_probe)

        classified = []
        for record in records:
            if record.type != JS_API:
                classified.append(record)
                continue
            shape = shapes[record.proto_chain_id]
            static = statics[record.proto_chain_id]
            self._warn_unexpected(record, shape, SHAPE)
            self._warn_unexpected(record, static, STATIC)
            classified.append(record.model_copy(update={
                "ast_node_types": outcomes.ast_node_types(shape),
                "is_static": outcomes.is_static(static),
            }))

        self.state = PipelineState.SHAPE_AND_STATIC_CHECKED
        return classified

    def enumerate_css(self) -> CssSurface:
        """Every style key the browser knows about (properties and values)."""
        batch = [self.synthesizer.css_properties_probe(), self.synthesizer.css_values_probe()]
        raw = self.bridge.execute(batch)
        found = _correlate(raw, [probe_id(CSS_PROPERTIES), probe_id(CSS_VALUES)])

        properties = found[probe_id(CSS_PROPERTIES)]
        values = found[probe_id(CSS_VALUES)]
        return CssSurface(
            properties=list(properties.value or []) if properties.ok else [],
            values=list(values.value or []) if values.ok else [],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _expect(self, state: PipelineState):
        if self.state != state:
            raise PipelineStateError(
                f"Pipeline is {self.state.value}, expected {state.value}; start a new run"
            )

    def _execute(
        self,
        kind: str | Callable[[ProtoChainRecord], str],
        records: Sequence[ProtoChainRecord],
        synthesize: Callable[[ProtoChainRecord], str],
    ) -> Dict[str, ProbeOutcome]:
        """Run one batch and return outcomes keyed by protoChainId."""
        if not records:
            return {}

        batch = [synthesize(record) for record in records]
        raw = self.bridge.execute(batch)

        kind_of = kind if callable(kind) else (lambda record: kind)
        ids = [probe_id(kind_of(record), record) for record in records]
        found = _correlate(raw, ids)
        return {record.proto_chain_id: found[pid] for record, pid in zip(records, ids)}


def _support_kind(record: ProtoChainRecord) -> str:
    return SUPPORT if record.type == JS_API else CSS_SUPPORT


def _check_unique(records: Sequence[ProtoChainRecord]):
    seen, duplicates = set(), []
    for record in records:
        if record.proto_chain_id in seen:
            duplicates.append(record.proto_chain_id)
        seen.add(record.proto_chain_id)
    if duplicates:
        raise ValueError(f"Duplicate protoChainId in catalogue: {duplicates[:5]}")


def _correlate(raw: Any, expected_ids: Sequence[str]) -> Dict[str, ProbeOutcome]:
    if not isinstance(raw, list) or len(raw) != len(expected_ids):
        count = len(raw) if isinstance(raw, list) else type(raw).__name__
        raise BridgeError(f"Expected {len(expected_ids)} probe results, got {count}")

    found: Dict[str, ProbeOutcome] = {}
    for item in raw:
        try:
            outcome = outcomes.parse_outcome(item)
        except ValueError as e:
            raise BridgeError(f"Malformed probe result: {item!r}") from e
        if outcome.id in found:
            raise BridgeError(f"Duplicate probe result: {outcome.id}")
        found[outcome.id] = outcome

    missing = [pid for pid in expected_ids if pid not in found]
    if missing:
        raise BridgeError(f"Missing probe results: {missing[:5]}")
    return found
