#!/usr/bin/env python3
"""Tests for the component registry."""

import unittest

from seqbench.classifiers.knn import KNearestNeighbours
from seqbench.core.exceptions import ComponentNotFoundError
from seqbench.core.registry import ComponentRegistry
from seqbench.runner import build_default_registry


class TestComponentRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = ComponentRegistry()

    def test_type_builds_fresh_instances(self):
        self.registry.register_type("knn", KNearestNeighbours, constructor_kwargs={"k": 3})
        first = self.registry.resolve("knn")
        second = self.registry.resolve("knn")

        self.assertIsNot(first, second)
        self.assertEqual(first.k, 3)

    def test_singleton(self):
        self.registry.register_type("knn", KNearestNeighbours, singleton=True)
        self.assertIs(self.registry.resolve("knn"), self.registry.resolve("knn"))

    def test_instance_and_factory(self):
        shared = KNearestNeighbours()
        self.registry.register_instance("shared", shared)
        self.registry.register_factory("three", KNearestNeighbours, factory_args=(3,))

        self.assertIs(self.registry.resolve("shared"), shared)
        self.assertEqual(self.registry.resolve("three").k, 3)
        self.assertEqual(self.registry.names(), ["shared", "three"])

    def test_unknown_name(self):
        with self.assertRaises(ComponentNotFoundError) as ctx:
            self.registry.resolve("missing")
        self.assertIn("missing", str(ctx.exception))

    def test_failed_construction(self):
        self.registry.register_type("bad", KNearestNeighbours, constructor_kwargs={"k": -1})
        with self.assertLogs('seqbench.core.registry', level='ERROR'):
            with self.assertRaises(ComponentNotFoundError) as ctx:
                self.registry.resolve("bad")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_parent_lookup(self):
        child = ComponentRegistry(parent=build_default_registry())
        self.assertTrue(child.is_registered("1nn-ed"))
        self.assertFalse(child.is_registered("1nn-ed", check_parent=False))
        self.assertEqual(child.resolve("1nn-manhattan").distance_measure.p, 1.0)

    def test_overwrite_and_reset(self):
        self.registry.register_type("knn", KNearestNeighbours)
        self.registry.register_instance("knn", KNearestNeighbours(k=5))
        self.assertEqual(self.registry.resolve("knn").k, 5)

        self.registry.reset()
        self.assertFalse(self.registry.is_registered("knn"))


if __name__ == '__main__':
    unittest.main()
