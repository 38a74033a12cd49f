"""
Shared fixtures: records and a scripted execution bridge.

The scripted bridge never runs JavaScript. It reads the probe id embedded in
each compiled probe and answers with whatever envelope the test scripted for
that id.
"""
import json
import re

import pytest

from surface_prober.core.models import ProtoChainRecord


PROBE_ID = re.compile(r'var probeId = ("(?:[^"\\]|\\.)*");')


def probe_id_of(source: str) -> str:
    match = PROBE_ID.search(source)
    assert match, f"no probe id in:\n{source}"
    return json.loads(match.group(1))


def make_record(*chain, api_type="js-api"):
    return ProtoChainRecord(apiType=api_type, type=api_type, protoChain=list(chain))


class ScriptedBridge:
    """
    answers: {probe_id: value | {"status": ..., ...}}
    A plain value is wrapped as a successful envelope.
    """

    DEFAULTS = {
        "support": False,
        "css-support": False,
        "static": False,
        "shape": {"memberOnly": True},
    }

    def __init__(self, answers=None, reverse=False):
        self.answers = answers or {}
        self.reverse = reverse
        self.batches = []

    def envelope(self, pid):
        if pid in self.answers:
            answer = self.answers[pid]
        else:
            answer = self.DEFAULTS.get(pid.split(":", 1)[0], None)

        if isinstance(answer, dict) and "status" in answer:
            return {"id": pid, **answer}
        return {"id": pid, "status": "ok", "value": answer}

    def execute(self, batch):
        ids = [probe_id_of(source) for source in batch]
        self.batches.append(ids)
        results = [self.envelope(pid) for pid in ids]
        return list(reversed(results)) if self.reverse else results


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def scripted_bridge():
    return ScriptedBridge
