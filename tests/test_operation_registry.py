"""
Tests for Operation Registry.

Tests cover:
- Registration and lookup
- Metadata and tag filtering
- Parameter validation against session methods
- Execution against a session
- Default registry contents
"""

import unittest

from IK_Libs.ImageEditingLib.pixel_buffer import PixelBuffer
from IK_Libs.RecipeLib.operation_registry import (
    OperationRegistry,
    get_default_registry,
    register_default_operations,
)
from IK_Libs.SessionLib import ImageSession


class TestOperationRegistry(unittest.TestCase):
    """Test OperationRegistry basic functionality."""

    def setUp(self):
        """Create a fresh registry for each test."""
        self.registry = OperationRegistry()

    def test_registry_creation(self):
        """Test a new registry has no operations."""
        self.assertEqual(len(self.registry.list_operations()), 0)

    def test_register_operation(self):
        """Test registering makes the name known."""
        self.registry.register("noop", lambda session, params: session)

        self.assertTrue(self.registry.has_operation("noop"))
        self.assertIn("noop", self.registry.list_operations())

    def test_register_with_metadata(self):
        """Test description, parameters and lowercased tags are stored."""
        self.registry.register(
            "sharpen",
            lambda session, params: session,
            description="Sharpen edges",
            parameters=["amount"],
            tags=["filter", "Convolution"],
        )

        meta = self.registry.get_metadata("sharpen")

        self.assertEqual(meta["description"], "Sharpen edges")
        self.assertEqual(meta["parameters"], ["amount"])
        self.assertEqual(meta["tags"], ["filter", "convolution"])

    def test_metadata_is_a_copy(self):
        """Test mutating returned metadata does not change the registry."""
        self.registry.register("op", lambda s, p: s, parameters=["amount"])

        self.registry.get_metadata("op")["parameters"].append("extra")

        self.assertEqual(self.registry.get_metadata("op")["parameters"], ["amount"])

    def test_register_empty_name_raises_error(self):
        """Test a blank name is rejected."""
        with self.assertRaises(ValueError):
            self.registry.register("  ", lambda session, params: session)

    def test_register_non_callable_raises_error(self):
        """Test a non-callable handler is rejected."""
        with self.assertRaises(ValueError):
            self.registry.register("bad", "not callable")

    def test_register_non_callable_validator_raises_error(self):
        """Test a non-callable validator is rejected."""
        with self.assertRaises(ValueError):
            self.registry.register("bad", lambda s, p: s, validator="nope")

    def test_register_duplicate_raises_error(self):
        """Test a name cannot be registered twice."""
        self.registry.register("op", lambda session, params: 1)

        with self.assertRaises(RuntimeError):
            self.registry.register("op", lambda session, params: 2)

    def test_get_missing_handler_lists_available(self):
        """Test the lookup error names the known operations."""
        self.registry.register("known", lambda session, params: session)

        with self.assertRaises(KeyError) as context:
            self.registry.get_handler("unknown")

        self.assertIn("known", str(context.exception))

    def test_list_operations_sorted(self):
        """Test names are listed alphabetically."""
        for name in ("zebra", "alpha", "beta"):
            self.registry.register(name, lambda session, params: session)

        self.assertEqual(self.registry.list_operations(), ["alpha", "beta", "zebra"])

    def test_execute_passes_params(self):
        """Test execute hands the params to the handler."""
        self.registry.register("add", lambda session, params: session + params["amount"])

        self.assertEqual(self.registry.execute("add", 2, {"amount": 3}), 5)

    def test_execute_missing_raises_error(self):
        """Test executing an unknown name raises KeyError."""
        with self.assertRaises(KeyError):
            self.registry.execute("missing", None, {})

    def test_validate_without_validator_accepts_anything(self):
        """Test operations without a validator accept any params."""
        self.registry.register("free", lambda s, p: s)

        self.registry.validate("free", None, {"whatever": 1})

    def test_validate_runs_validator(self):
        """Test validate forwards the validator's TypeError."""
        def only_amount(session, params):
            if set(params) - {"amount"}:
                raise TypeError("unexpected parameter")

        self.registry.register("strict", lambda s, p: s, validator=only_amount)

        self.registry.validate("strict", None, {"amount": 1})
        with self.assertRaises(TypeError):
            self.registry.validate("strict", None, {"radius": 1})

    def test_validate_unknown_operation_raises_error(self):
        """Test validating an unknown name raises KeyError."""
        with self.assertRaises(KeyError):
            self.registry.validate("missing", None, {})

    def test_filter_by_tag_case_insensitive(self):
        """Test tag filtering ignores case."""
        self.registry.register("a", lambda s, p: s, tags=["GEOMETRY"])
        self.registry.register("b", lambda s, p: s, tags=["filter"])

        self.assertEqual(self.registry.filter_by_tag("Geometry"), ["a"])

    def test_get_all_metadata(self):
        """Test metadata for every operation is returned by name."""
        self.registry.register("two", lambda s, p: s, description="Second")
        self.registry.register("one", lambda s, p: s, description="First")

        all_meta = self.registry.get_all_metadata()

        self.assertEqual(list(all_meta), ["one", "two"])
        self.assertEqual(all_meta["two"]["description"], "Second")

    def test_get_metadata_missing_raises_error(self):
        """Test metadata lookup of an unknown name raises KeyError."""
        with self.assertRaises(KeyError):
            self.registry.get_metadata("missing")


class TestDefaultRegistry(unittest.TestCase):
    """Test default registry singleton and built-in operations."""

    def test_get_default_registry_singleton(self):
        """Test the default registry is shared."""
        self.assertIs(get_default_registry(), get_default_registry())

    def test_every_session_transform_is_registered(self):
        """Test each session transform has a registered operation."""
        registry = OperationRegistry()
        register_default_operations(registry)

        for name in (
            "scale", "resize", "rotate", "rotate_clockwise", "rotate_counterclockwise",
            "rotate_right", "rotate_left", "flip", "flip_vertical", "flip_horizontal",
            "grayscale", "monochrome", "negative", "brightness", "contrast", "colorize",
            "edge_detect", "emboss", "blur", "selective_blur", "remove_mean", "smooth",
            "pixelate",
        ):
            with self.subTest(name=name):
                self.assertTrue(registry.has_operation(name))
                self.assertTrue(hasattr(ImageSession, name))

    def test_geometry_tag(self):
        """Test the geometry tag selects geometric operations only."""
        registry = get_default_registry()
        self.assertIn("resize", registry.filter_by_tag("geometry"))
        self.assertNotIn("blur", registry.filter_by_tag("geometry"))

    def test_declared_parameters_match_session_methods(self):
        """Test every declared parameter binds to its session method."""
        registry = get_default_registry()
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2))

        for name, meta in registry.get_all_metadata().items():
            with self.subTest(name=name):
                params = {parameter: None for parameter in meta["parameters"]}
                registry.validate(name, session, params)

    def test_validate_rejects_unknown_parameter(self):
        """Test a parameter the session method lacks raises TypeError."""
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2))

        with self.assertRaises(TypeError):
            get_default_registry().validate("blur", session, {"radius": 2})

    def test_validate_rejects_missing_required_parameter(self):
        """Test omitting a required session argument raises TypeError."""
        session = ImageSession.from_buffer(PixelBuffer.new(2, 2))

        with self.assertRaises(TypeError):
            get_default_registry().validate("resize", session, {"policy": "fit"})

    def test_execute_resize_through_registry(self):
        """Test running resize by name transforms the session."""
        session = ImageSession.from_buffer(PixelBuffer.new(400, 100))

        result = get_default_registry().execute("resize", session, {"dimensions": [200, 200], "policy": "cover"})

        self.assertIs(result, session)
        self.assertEqual((session.width, session.height), (200, 200))

    def test_missing_params_use_session_defaults(self):
        """Test omitted optional params fall back to method defaults."""
        session = ImageSession.from_buffer(PixelBuffer.new(4, 2))

        get_default_registry().execute("rotate_left", session, {})

        self.assertEqual((session.width, session.height), (2, 4))
