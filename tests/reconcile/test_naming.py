from __future__ import annotations

import re

import pytest

from cloudgroups.reconcile.naming import (
    MAX_NAME_LENGTH,
    derive_name,
    limited_length_name,
    safe_object_name,
    sanitize_name,
)

pytestmark = [pytest.mark.unit]

GCE_NAME = re.compile(r"^[a-z]([-a-z0-9]*[a-z0-9])?$")


class TestDeriveName:
    def test_simple_cluster(self):
        assert derive_name("us-east1-b", "nodes", "c1") == "us-east1-b-nodes-c1"

    def test_dotted_cluster_name(self):
        assert (
            derive_name("us-central1-a", "master-us-central1-a", "k8s.example.com")
            == "us-central1-a-master-us-central1-a-k8s-example-com"
        )

    def test_deterministic(self):
        first = derive_name("europe-west1-d", "nodes", "prod.example.com")
        second = derive_name("europe-west1-d", "nodes", "prod.example.com")
        assert first == second

    def test_differs_across_clusters(self):
        assert derive_name("us-east1-b", "nodes", "a") != derive_name("us-east1-b", "nodes", "b")

    def test_differs_across_zones(self):
        assert derive_name("us-east1-b", "nodes", "c1") != derive_name("us-east1-c", "nodes", "c1")

    @pytest.mark.parametrize(
        ("zone", "ig", "cluster"),
        [
            ("us-east1-b", "Nodes_Large", "C1.Example.COM"),
            ("us-east1-b", "nodes", "1234.example.com"),
            ("us-east1-b", "n" * 80, "very-long-cluster-name.example.com"),
            ("", "", ""),
        ],
    )
    def test_always_valid_gce_name(self, zone, ig, cluster):
        name = derive_name(zone, ig, cluster)
        assert GCE_NAME.match(name), name
        assert len(name) <= MAX_NAME_LENGTH


class TestSanitizeName:
    def test_lowercases_and_replaces_dots(self):
        assert sanitize_name("Zone.IG-Cluster.Com") == "zone-ig-cluster-com"

    def test_collapses_dash_runs(self):
        assert sanitize_name("a..b__c") == "a-b-c"

    def test_prefixes_leading_digit(self):
        assert sanitize_name("1abc") == "x1abc"

    def test_empty(self):
        assert sanitize_name("...") == "x"


class TestLimitedLengthName:
    def test_short_name_unchanged(self):
        assert limited_length_name("abc", 10) == "abc"

    def test_exact_limit_unchanged(self):
        assert limited_length_name("a" * 63) == "a" * 63

    def test_long_name_truncated_with_digest(self):
        result = limited_length_name("a" * 100)
        assert len(result) == 63
        assert result.startswith("a" * 56 + "-")

    def test_shared_prefix_stays_distinct(self):
        first = limited_length_name("a" * 70 + "x")
        second = limited_length_name("a" * 70 + "y")
        assert first != second

    def test_digest_uses_key(self):
        name = "b" * 80
        assert limited_length_name(name, key="one") != limited_length_name(name, key="two")

    def test_smallest_limit_respected(self):
        result = limited_length_name("abcdefghij", 8)
        assert len(result) == 8
        assert result.startswith("a-")

    @pytest.mark.parametrize("limit", [0, 5, 7])
    def test_limit_too_small_raises(self, limit):
        with pytest.raises(ValueError, match="at least 8"):
            limited_length_name("abcdefghij", limit)


class TestSafeObjectName:
    def test_appends_cluster(self):
        assert safe_object_name("nodes", "c1.example.com") == "nodes-c1-example-com"

    def test_long_names_distinct_after_sanitizing(self):
        long_ig = "nodes-" + "x" * 70
        assert safe_object_name(long_ig, "a.b") != safe_object_name(long_ig, "a-b")
