"""Tests for the built-in ClientSideApply and RawManifests components."""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from plansmith.components import (
    ClientSideApply,
    ClientSideApplyProps,
    ClientSideApplyResult,
    RawManifestsChart,
    client_side_apply,
    new_client_side_apply,
    raw_manifests,
)
from plansmith.core.composition import new_composite
from plansmith.core.constructs import App, Chart
from plansmith.core.context import ApplyContext
from plansmith.core.errors import ConstructError
from plansmith.core.identity import extract_resource
from plansmith.manifests.loader import parse_client_manifest
from plansmith.manifests.models import API_VERSION, CLIENT_SIDE_APPLY, Action, OnFailure


def _ctx(namespace: str | None = "demo") -> ApplyContext:
    return ApplyContext(scope=Chart(App(), "root", namespace=namespace))


class TestClientSideApply:
    def test_emits_local_manifest(self) -> None:
        chart = client_side_apply("kind", "create", "cluster", on_failure="continue")(_ctx())

        assert isinstance(chart, ClientSideApplyResult)
        assert extract_resource(chart.node.id) == "sdk.ClientSideApply"
        assert chart.args == ["kind", "create", "cluster"]

        [obj] = chart.api_objects()
        doc = obj.to_json()
        assert doc["apiVersion"] == API_VERSION
        assert doc["kind"] == CLIENT_SIDE_APPLY
        assert doc["metadata"] == {"name": chart.node.id, "namespace": "demo"}
        assert doc["spec"] == {"onFailure": "continue", "action": "kind", "args": ["create", "cluster"]}

        manifest = parse_client_manifest(yaml.safe_dump(doc))
        assert manifest.spec.on_failure is OnFailure.CONTINUE

    def test_default_policy_is_abort(self) -> None:
        chart = client_side_apply("cmd", "echo")(_ctx())
        assert chart.props.on_failure is OnFailure.ABORT

    def test_explicit_namespace(self) -> None:
        chart = client_side_apply("cmd", "echo", namespace="other")(_ctx())
        assert chart.api_objects()[0].to_json()["metadata"]["namespace"] == "other"

    def test_same_props_same_id(self) -> None:
        a = new_client_side_apply(Chart(App(), "x"), ClientSideApplyProps(action=Action.CMD, args=["true"]))
        b = new_client_side_apply(Chart(App(), "x"), ClientSideApplyProps(action=Action.CMD, args=["true"]))
        assert a.node.id == b.node.id

    def test_invalid_props_raise_when_run(self) -> None:
        component = client_side_apply("cmd")
        with pytest.raises(ValidationError):
            component(_ctx())

    def test_unknown_action(self) -> None:
        with pytest.raises(ValidationError):
            client_side_apply("rm", "-rf")(_ctx())

    def test_requires_scope(self) -> None:
        with pytest.raises(ConstructError, match="scope"):
            client_side_apply("cmd", "echo")(ApplyContext())

    def test_in_composite(self) -> None:
        ctx = _ctx()
        chart = new_composite(lambda: ClientSideApply("cmd", "echo", "one"))(ctx)

        [result] = chart.outputs(ClientSideApplyResult)
        assert result.args == ["cmd", "echo", "one"]
        assert result.node.scope is chart


class TestRawManifests:
    def test_one_object_per_document(self) -> None:
        docs = [
            {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cfg"}, "data": {"k": "v"}},
            {"apiVersion": "v1", "kind": "Secret", "stringData": {"p": "w"}},
        ]
        chart = raw_manifests("bundle", *docs)(_ctx())

        assert isinstance(chart, RawManifestsChart)
        rendered = [o.to_json() for o in chart.api_objects()]
        assert rendered[0] == {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": "cfg", "namespace": "demo"},
            "data": {"k": "v"},
        }
        assert rendered[1]["metadata"]["name"] == "1"
        assert rendered[1]["stringData"] == {"p": "w"}

    def test_documents_not_mutated(self) -> None:
        doc = {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cfg"}}
        raw_manifests("bundle", doc)(_ctx())
        assert doc == {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cfg"}}

    def test_missing_kind(self) -> None:
        with pytest.raises(ConstructError, match="apiVersion and kind"):
            raw_manifests("bad", {"apiVersion": "v1"})(_ctx())
