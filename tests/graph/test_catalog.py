"""Tests for the static parameter catalog."""

from questgraph.graph.catalog import PARAMETERS, active_parameter_keys, parameters_by_key


def test_thirty_parameters_in_order():
    assert [p.key for p in PARAMETERS] == [f"P1_{i}" for i in range(30)]


def test_every_parameter_is_described():
    for spec in PARAMETERS:
        assert spec.title
        assert spec.description


def test_active_keys_follow_catalog_order():
    keys = active_parameter_keys()

    assert keys == [p.key for p in PARAMETERS if p.active]
    assert keys[0] == "P1_0"


def test_lookup_by_key():
    catalog = parameters_by_key()

    assert catalog["P1_29"].title == "Collaboration"
    assert len(catalog) == 30
