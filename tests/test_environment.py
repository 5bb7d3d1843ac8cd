from curly.environment import Scope
from curly.values import Value


class TestScope:

    def setup_method(self):
        self.root = Scope.from_mapping({"name": "Ann", "count": 2})

    def test_lookup(self):
        assert self.root.lookup("name") == Value.string("Ann")
        assert self.root.lookup("missing") is None
        assert "count" in self.root
        assert "missing" not in self.root
        assert 42 not in self.root

    def test_child_shadows_and_falls_back(self):
        child = self.root.child("name", Value.string("Bob"))
        assert child.lookup("name") == Value.string("Bob")
        assert child.lookup("count") == Value.number(2)
        # Родитель не меняется
        assert self.root.lookup("name") == Value.string("Ann")

    def test_parent_and_root(self):
        child = self.root.child("a", Value.number(1))
        grandchild = child.child("b", Value.number(2))
        assert grandchild.parent is child
        assert grandchild.root is self.root
        assert self.root.parent is None
        assert self.root.root is self.root

    def test_names_are_unique_and_innermost_first(self):
        child = self.root.child("name", Value.string("Bob"))
        assert list(child.names()) == ["name", "count"]

    def test_bindings_are_copied(self):
        bindings = {"x": Value.number(1)}
        scope = Scope(bindings)
        bindings["x"] = Value.number(2)
        assert scope.lookup("x") == Value.number(1)

    def test_repr(self):
        child = self.root.child("u", Value.number(0))
        assert repr(child) == "Scope(['u'], depth=1)"
