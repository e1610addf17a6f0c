"""Tests for the construct tree, resolvers, and the synthesis worker."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

import pytest
import yaml

from plansmith.core.constructs import (
    ApiObject,
    App,
    Chart,
    Construct,
    ResolutionPriority,
    Resolver,
    SynthesisWorker,
    image_pull_secret_resolver,
    name_resolver,
    sort_resolvers,
)
from plansmith.core.errors import ConstructError
from plansmith.core.identity import RESOURCE

if TYPE_CHECKING:
    from pathlib import Path


class TestTree:
    def test_paths(self) -> None:
        app = App()
        chart = Chart(app, "chart")
        group = Construct(chart, "group")
        obj = ApiObject(group, "cm", api_version="v1", kind="ConfigMap")

        assert app.node.path == ""
        assert obj.node.path == "chart/group/cm"
        assert obj.node.root is app
        assert obj.chart is chart

    def test_duplicate_id_raises(self) -> None:
        app = App()
        Chart(app, "chart")
        with pytest.raises(ConstructError, match="already a construct"):
            Chart(app, "chart")

    def test_empty_id_only_for_root(self) -> None:
        with pytest.raises(ConstructError):
            Construct(App(), "")

    def test_separator_replaced(self) -> None:
        chart = Chart(App(), "a/b")
        assert chart.node.id == "a--b"

    def test_namespace_inherited(self) -> None:
        app = App()
        outer = Chart(app, "outer", namespace="demo")
        inner = Chart(outer, "inner")
        other = Chart(outer, "other", namespace="elsewhere")
        assert inner.namespace == "demo"
        assert other.namespace == "elsewhere"

    def test_api_object_needs_chart(self) -> None:
        with pytest.raises(ConstructError, match="not within a chart"):
            ApiObject(App(), "cm", api_version="v1", kind="ConfigMap")

    def test_api_objects_exclude_nested_charts(self) -> None:
        app = App()
        outer = Chart(app, "outer")
        a = ApiObject(outer, "a", api_version="v1", kind="ConfigMap")
        inner = Chart(outer, "inner")
        ApiObject(inner, "b", api_version="v1", kind="ConfigMap")
        assert outer.api_objects() == [a]
        assert app.charts() == [outer, inner]

    def test_to_json(self) -> None:
        chart = Chart(App(), "web-1bbec390", namespace="demo")
        obj = ApiObject(chart, "cm", api_version="v1", kind="ConfigMap", data={"k": "v"})
        assert obj.to_json() == {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": "cm", "namespace": "demo"},
            "data": {"k": "v"},
        }

    def test_magic_id_uses_chart_name(self) -> None:
        chart = Chart(App(), "web-1bbec390")
        obj = ApiObject(chart, RESOURCE, api_version="v1", kind="ConfigMap")
        assert obj.to_json()["metadata"]["name"] == "web-1bbec390"

    def test_explicit_metadata_wins(self) -> None:
        chart = Chart(App(), "c", namespace="demo")
        obj = ApiObject(chart, "cm", api_version="v1", kind="ConfigMap", metadata={"name": "x", "namespace": "y"})
        assert obj.to_json()["metadata"] == {"name": "x", "namespace": "y"}


class TestSynth:
    def test_layout(self, tmp_path: Path) -> None:
        outdir = tmp_path / "out"
        app = App(outdir)
        first = Chart(app, "First.Chart-1bbec390")
        ApiObject(first, "a", api_version="v1", kind="ConfigMap")
        ApiObject(first, "b", api_version="v1", kind="Secret")
        Chart(app, "empty")
        second = Chart(app, "second")
        ApiObject(second, "c", api_version="apps/v1", kind="Deployment")

        written = app.synth()

        names = [p.relative_to(outdir).as_posix() for p in written]
        assert names == [
            "0000-first-chart-1bbec390/0000-configmap-a.yaml",
            "0000-first-chart-1bbec390/0001-secret-b.yaml",
            "0002-second/0000-deployment-c.yaml",
        ]
        doc = yaml.safe_load(written[2].read_text())
        assert doc["kind"] == "Deployment"

    def test_refuses_foreign_non_empty_outdir(self, tmp_path: Path) -> None:
        precious = tmp_path / "precious.txt"
        precious.write_text("keep me\n")
        app = App(tmp_path)
        ApiObject(Chart(app, "c"), "a", api_version="v1", kind="ConfigMap")

        with pytest.raises(ConstructError, match="not empty"):
            app.synth()
        assert precious.read_text() == "keep me\n"

    def test_resynth_replaces_only_chart_folders(self, tmp_path: Path) -> None:
        outdir = tmp_path / "out"
        first = App(outdir)
        ApiObject(Chart(first, "old"), "a", api_version="v1", kind="ConfigMap")
        first.synth()
        notes = outdir / "notes.txt"
        notes.write_text("mine\n")

        second = App(outdir)
        ApiObject(Chart(second, "new"), "b", api_version="v1", kind="ConfigMap")
        written = second.synth()

        charts = sorted(p.name for p in outdir.iterdir() if p.is_dir())
        assert charts == ["0000-new"]
        assert [p.parent.name for p in written] == ["0000-new"]
        assert notes.exists()

    def test_outdir_must_be_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "file"
        target.write_text("")
        app = App(target)
        with pytest.raises(ConstructError, match="not a directory"):
            app.synth()

    def test_synth_needs_outdir(self) -> None:
        with pytest.raises(ConstructError):
            App().synth()

    def test_synth_yaml(self) -> None:
        app = App()
        chart = Chart(app, "c")
        ApiObject(chart, "a", api_version="v1", kind="ConfigMap")
        ApiObject(chart, "b", api_version="v1", kind="ConfigMap")
        docs = list(yaml.safe_load_all(app.synth_yaml()))
        assert [d["metadata"]["name"] for d in docs] == ["a", "b"]


class TestResolvers:
    def test_sort_by_priority(self) -> None:
        low = Resolver(lambda d: None, ResolutionPriority.LOW)
        high = Resolver(lambda d: None, ResolutionPriority.HIGH)
        default = Resolver(lambda d: None)
        assert sort_resolvers([low, None, default, high]) == [high, default, low]

    def test_app_runs_resolvers_in_priority_order(self) -> None:
        calls: list[str] = []

        def mark(label: str) -> Resolver:
            return Resolver(lambda d: calls.append(label), ResolutionPriority.LOW if label == "low" else 50)

        app = App(resolvers=[mark("low"), mark("high")])
        ApiObject(Chart(app, "c"), "a", api_version="v1", kind="ConfigMap")
        list(app.documents())
        assert calls == ["high", "low"]

    def test_name_resolver(self) -> None:
        doc: dict[str, Any] = {"metadata": {"name": "My_Config"}}
        name_resolver(doc)
        assert doc["metadata"]["name"] == "my-config"

    def test_name_resolver_skips_magic_names(self) -> None:
        doc: dict[str, Any] = {"metadata": {"name": RESOURCE}}
        name_resolver(doc)
        assert doc["metadata"]["name"] == RESOURCE

    def test_image_pull_secrets_on_pod_template(self) -> None:
        resolve = image_pull_secret_resolver("regcred")
        doc: dict[str, Any] = {"kind": "Deployment", "spec": {"template": {"spec": {"containers": []}}}}
        resolve(doc)
        resolve(doc)
        assert doc["spec"]["template"]["spec"]["imagePullSecrets"] == [{"name": "regcred"}]

    def test_image_pull_secrets_on_pod(self) -> None:
        resolve = image_pull_secret_resolver("a", "b")
        doc: dict[str, Any] = {"kind": "Pod", "spec": {}}
        resolve(doc)
        assert doc["spec"]["imagePullSecrets"] == [{"name": "a"}, {"name": "b"}]

    def test_image_pull_secrets_ignores_other_kinds(self) -> None:
        resolve = image_pull_secret_resolver("a")
        doc: dict[str, Any] = {"kind": "ConfigMap", "data": {}}
        resolve(doc)
        assert "spec" not in doc


class TestSynthesisWorker:
    def test_runs_on_one_thread(self) -> None:
        worker = SynthesisWorker()
        try:
            names = {worker.run(lambda: threading.current_thread().name) for _ in range(5)}
            assert len(names) == 1
            assert names.pop() != threading.current_thread().name
        finally:
            worker.shutdown()

    def test_nested_run_is_inline(self) -> None:
        worker = SynthesisWorker()
        try:
            assert worker.run(lambda: worker.run(lambda: worker.on_worker_thread)) is True
            assert not worker.on_worker_thread
        finally:
            worker.shutdown()

    def test_errors_propagate(self) -> None:
        worker = SynthesisWorker()

        def boom() -> None:
            raise ValueError("boom")

        try:
            with pytest.raises(ValueError, match="boom"):
                worker.run(boom)
        finally:
            worker.shutdown()

    async def test_run_async(self) -> None:
        worker = SynthesisWorker()
        try:
            assert await worker.run_async(lambda x: x * 2, 21) == 42
        finally:
            worker.shutdown()
