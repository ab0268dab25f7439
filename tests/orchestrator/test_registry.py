"""
Tests for the Named Component List.
"""

import pytest

from orchestrator.component import SimpleComponent
from orchestrator.registry import NamedComponent, NamedComponentList


@pytest.fixture
def components():
    return [SimpleComponent() for _ in range(3)]


class TestNamedComponentList:
    """Tests for insertion, naming and lookup."""

    def test_empty(self):
        children = NamedComponentList()

        assert len(children) == 0
        assert children.find_component("anything") is None
        assert list(children) == []

    def test_push_back_keeps_insertion_order(self, components):
        a, b, c = components
        children = NamedComponentList()
        children.push_back(a, "a")
        children.push_back(b, "b")
        children.push_back(c, "c")

        assert children.names() == ["a", "b", "c"]
        assert [n.component for n in children] == [a, b, c]

    def test_push_front_prepends(self, components):
        a, b, _ = components
        children = NamedComponentList()
        children.push_back(a, "a")
        children.push_front(b, "b")

        assert children.names() == ["b", "a"]
        assert children[0].component is b

    def test_anonymous_names_use_current_length(self, components):
        a, b, c = components
        children = NamedComponentList()
        children.push_back(a)
        children.push_back(b, "named")
        children.push_back(c)

        assert children.names() == ["__anonymous0", "named", "__anonymous2"]
        assert children.find_component("__anonymous2") is c

    def test_anonymous_names_are_not_positions(self, components):
        a, b, c = components
        children = NamedComponentList()
        children.push_back(a)
        children.push_back(b)
        children.push_front(c)

        assert children.names() == ["__anonymous2", "__anonymous0", "__anonymous1"]

    def test_find_returns_first_match(self, components):
        a, b, _ = components
        children = NamedComponentList()
        children.push_back(a, "dup")
        children.push_back(b, "dup")

        assert children.find_component("dup") is a
        assert children.find_component("missing") is None

    def test_pushed_named_component_returned(self, components):
        children = NamedComponentList()
        named = children.push_back_named(NamedComponent(components[0], "x"))
        front = children.push_front_named(NamedComponent(components[1], "y"))

        assert named.name == "x"
        assert front.name == "y"
        assert len(children) == 2

    def test_empty_string_is_a_name(self, components):
        children = NamedComponentList()
        children.push_back(components[0], "")

        assert children.names() == [""]
        assert children.find_component("") is components[0]
