"""Tests for resource identifiers and DNS label normalization."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from array import array
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

import pytest
from pydantic import BaseModel

from plansmith.core.errors import IdentityError
from plansmith.core.identity import (
    DEFAULT,
    RESOURCE,
    UNKNOWN,
    encode,
    extract_resource,
    fnv_hash,
    resource_id,
    to_dns_label,
)

_DNS_LABEL = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")


class _Props(BaseModel):
    name: str
    replicas: int = 1


@dataclass
class _Point:
    x: int
    y: int


class _Color(Enum):
    RED = "red"


class _Named:
    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return f"named:{self.name}"


class TestFnvHash:
    def test_empty_input_is_offset_basis(self) -> None:
        assert fnv_hash(b"") == "cbf29ce484222325"

    def test_known_vector(self) -> None:
        assert fnv_hash(b"a") == "af63dc4c8601ec8c"

    def test_sixteen_hex_chars(self) -> None:
        assert re.fullmatch(r"[0-9a-f]{16}", fnv_hash(b"plansmith"))


class TestResourceId:
    def test_reserved_prefixes_pass_through(self) -> None:
        assert resource_id(RESOURCE, {"a": 1}) == RESOURCE
        assert resource_id(DEFAULT, "anything") == DEFAULT

    def test_prefix_and_eight_char_hash(self) -> None:
        rid = resource_id("sdk.HelmChart", {"chart": "nginx"})
        prefix, digest = rid.rsplit("-", 1)
        assert prefix == "sdk.HelmChart"
        assert re.fullmatch(r"[0-9a-f]{8}", digest)

    def test_deterministic(self) -> None:
        assert resource_id("x", {"a": 1, "b": 2}) == resource_id("x", {"b": 2, "a": 1})

    def test_different_values_differ(self) -> None:
        assert resource_id("x", "one") != resource_id("x", "two")

    def test_string_value_hashes_its_bytes(self) -> None:
        assert resource_id("x", "hello") == f"x-{fnv_hash(b'hello')[:8]}"

    def test_blank_prefix_becomes_unknown(self) -> None:
        assert resource_id("  ", "v").startswith(f"{UNKNOWN}-")

    def test_none_value(self) -> None:
        assert resource_id("plan.default", None) == f"plan.default-{fnv_hash(b'null')[:8]}"

    def test_pydantic_model_value(self) -> None:
        assert resource_id("p", _Props(name="a")) == resource_id("p", {"name": "a", "replicas": 1})

    def test_dataclass_value(self) -> None:
        assert resource_id("p", _Point(1, 2)) == resource_id("p", {"x": 1, "y": 2})


class TestEncode:
    def test_bytes_passthrough(self) -> None:
        assert encode(b"raw") == b"raw"

    def test_json_is_sorted_and_compact(self) -> None:
        assert encode({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'

    def test_sets_are_sorted(self) -> None:
        assert encode({3, 1, 2}) == b"[1,2,3]"
        assert encode({"tags": frozenset({"b", "a"})}) == b'{"tags":["a","b"]}'

    def test_nested_models_and_paths(self) -> None:
        value = {"props": _Props(name="a"), "where": PurePosixPath("x/y"), "color": _Color.RED}
        assert encode(value) == b'{"color":"red","props":{"name":"a","replicas":1},"where":"x/y"}'

    def test_buffer_protocol(self) -> None:
        assert encode(array("B", [104, 105])) == b"hi"

    def test_falls_back_to_str(self) -> None:
        assert encode(_Named("x")) == b"named:x"


class TestExtractResource:
    def test_strips_hash(self) -> None:
        assert extract_resource("sdk.HelmChart-1bbec390") == "sdk.HelmChart"

    def test_roundtrip(self) -> None:
        assert extract_resource(resource_id("my-app.component", 42)) == "my-app.component"

    def test_no_hash_unchanged(self) -> None:
        assert extract_resource("my-app") == "my-app"
        assert extract_resource("single") == "single"

    def test_non_hex_suffix_unchanged(self) -> None:
        assert extract_resource("name-zzzzzzzz") == "name-zzzzzzzz"

    def test_empty_is_unknown(self) -> None:
        assert extract_resource("") == UNKNOWN
        assert extract_resource(None) == UNKNOWN


class TestToDnsLabel:
    def test_simple(self) -> None:
        assert to_dns_label("MyApp") == "myapp"

    def test_invalid_characters_replaced(self) -> None:
        assert to_dns_label("sdk.HelmChart-1bbec390") == "sdk-helmchart-1bbec390"

    def test_hyphen_runs_collapsed(self) -> None:
        assert to_dns_label("a__b..c") == "a-b-c"

    def test_leading_digits_dropped(self) -> None:
        assert to_dns_label("123abc") == "abc"

    def test_bare_hash_gets_prefix(self) -> None:
        assert to_dns_label("1bbec390") == f"{UNKNOWN}-1bbec390"

    def test_reserved_lowercased(self) -> None:
        assert to_dns_label(RESOURCE) == "resource"

    def test_empty(self) -> None:
        assert to_dns_label("") == UNKNOWN
        assert to_dns_label("...") == UNKNOWN

    def test_long_identifier_keeps_hash_tail(self) -> None:
        rid = resource_id("component." + "x" * 100, "v")
        label = to_dns_label(rid)
        assert len(label) <= 63
        assert label.endswith(rid.rsplit("-", 1)[1])
        assert _DNS_LABEL.match(label)

    @pytest.mark.parametrize(
        "identifier",
        ["Plan.Default-0011aabb", "---x---", "9" * 80 + "-deadbeef", "UPPER_case.Mixed", "a" * 70],
    )
    def test_always_valid_label(self, identifier: str) -> None:
        label = to_dns_label(identifier)
        assert _DNS_LABEL.match(label), label
        assert len(label) <= 63


class TestIdentityError:
    def test_unencodable_raises(self) -> None:
        class _Opaque:
            def __repr__(self) -> str:
                return ""

        with pytest.raises(IdentityError):
            encode(_Opaque())

    def test_default_repr_with_address_raises(self) -> None:
        with pytest.raises(IdentityError):
            resource_id("p", object())


class TestCrossProcessStability:
    def test_same_id_under_every_hash_seed(self) -> None:
        import plansmith

        src = str(Path(plansmith.__file__).resolve().parents[1])
        code = (
            "from plansmith.core.identity import resource_id;"
            "print(resource_id('p', {'alpha', 'beta', 'gamma', 'delta', 'eps'}))"
        )
        ids = set()
        for seed in range(4):
            env = {
                **os.environ,
                "PYTHONHASHSEED": str(seed),
                "PYTHONPATH": os.pathsep.join(filter(None, [src, os.environ.get("PYTHONPATH")])),
            }
            out = subprocess.run([sys.executable, "-c", code], env=env, capture_output=True, text=True, check=True)
            ids.add(out.stdout.strip())

        assert ids == {resource_id("p", {"alpha", "beta", "gamma", "delta", "eps"})}
