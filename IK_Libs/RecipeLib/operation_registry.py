"""
Named session operations.

Recipes and the command line refer to transforms by name ("resize",
"monochrome", ...). The registry maps those names to handlers, keeps a
short description, parameter list and tags for each one (shown by
``image-kit --list-operations``), and can check a step's parameters
against the session method before anything runs.

Classes:
    OperationRegistry: Name -> handler table with metadata

Functions:
    get_default_registry: Shared registry holding every session transform
    register_default_operations: Register all ImageSession transforms
"""

from typing import Any, Callable, Dict, List, Optional
import inspect
import logging

logger = logging.getLogger(__name__)

# (session, params) -> session
OperationHandler = Callable[[Any, Dict[str, Any]], Any]
# (session, params) -> None, raises TypeError for unusable params
ParameterValidator = Callable[[Any, Dict[str, Any]], None]


class OperationRegistry:
    """
    Table of named session operations.

    Example:
        >>> registry = OperationRegistry()
        >>> registry.register("thumb", lambda s, p: s.resize(p["dimensions"], "cover"))
        >>> registry.execute("thumb", session, {"dimensions": [64, 64]})
    """

    def __init__(self):
        self._handlers: Dict[str, OperationHandler] = {}
        self._validators: Dict[str, ParameterValidator] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        name: str,
        handler: OperationHandler,
        description: str = "",
        parameters: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        validator: Optional[ParameterValidator] = None,
    ) -> None:
        """
        Add an operation under a name.

        Args:
            name: Operation name used in recipe steps
            handler: Callable taking (session, params)
            description: One line shown in operation listings
            parameters: Parameter names the operation accepts
            tags: Grouping labels such as "geometry" or "filter"
            validator: Optional callable taking (session, params) that raises
                TypeError when the params cannot be passed to the handler

        Raises:
            ValueError: On an empty name or a non-callable handler/validator
            RuntimeError: If the name is taken
        """
        name = str(name).strip()

        if not name:
            raise ValueError("Operation name must not be blank")

        if not callable(handler):
            raise ValueError(f"Handler for '{name}' is not callable: {handler!r}")

        if validator is not None and not callable(validator):
            raise ValueError(f"Validator for '{name}' is not callable: {validator!r}")

        if name in self._handlers:
            raise RuntimeError(f"An operation named '{name}' already exists")

        self._handlers[name] = handler
        if validator is not None:
            self._validators[name] = validator
        self._metadata[name] = {
            "description": str(description),
            "parameters": list(parameters or []),
            "tags": [str(tag).lower() for tag in tags or []],
        }

        logger.debug(f"Operation '{name}' registered")

    def get_handler(self, name: str) -> OperationHandler:
        """
        Look up a handler.

        Raises:
            KeyError: If nothing is registered under the name
        """
        name = str(name).strip()

        if name not in self._handlers:
            raise KeyError(f"Unknown operation '{name}' (known: {', '.join(self.list_operations())})")

        return self._handlers[name]

    def has_operation(self, name: str) -> bool:
        return str(name).strip() in self._handlers

    def validate(self, name: str, session: Any, params: Optional[Dict[str, Any]] = None) -> None:
        """
        Check params for an operation without running it.

        Operations registered without a validator accept anything.

        Raises:
            KeyError: If nothing is registered under the name
            TypeError: If the params do not fit the operation
        """
        self.get_handler(name)
        validator = self._validators.get(str(name).strip())
        if validator is not None:
            validator(session, dict(params or {}))

    def execute(self, name: str, session: Any, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run an operation against a session and return the handler's result."""
        handler = self.get_handler(name)
        return handler(session, dict(params or {}))

    def list_operations(self) -> List[str]:
        return sorted(self._handlers)

    def get_metadata(self, name: str) -> Dict[str, Any]:
        """
        Description, parameters and tags of one operation.

        Raises:
            KeyError: If nothing is registered under the name
        """
        self.get_handler(name)
        meta = self._metadata[str(name).strip()]
        return {key: list(value) if isinstance(value, list) else value for key, value in meta.items()}

    def get_all_metadata(self) -> Dict[str, Dict[str, Any]]:
        """Metadata of every operation, in name order."""
        return {name: self.get_metadata(name) for name in self.list_operations()}

    def filter_by_tag(self, tag: str) -> List[str]:
        """Names of the operations carrying a tag (case-insensitive)."""
        tag = str(tag).strip().lower()
        return [name for name in self.list_operations() if tag in self._metadata[name]["tags"]]


_default_registry: Optional[OperationRegistry] = None


def get_default_registry() -> OperationRegistry:
    """Shared registry, filled with the session transforms on first use."""
    global _default_registry

    if _default_registry is None:
        _default_registry = OperationRegistry()
        register_default_operations(_default_registry)

    return _default_registry


def _method_handler(method_name: str) -> OperationHandler:
    """Handler calling session.<method_name>(**params)."""
    def handler(session: Any, params: Dict[str, Any]) -> Any:
        return getattr(session, method_name)(**params)

    handler.__name__ = f"{method_name}_handler"
    return handler


def _method_validator(method_name: str) -> ParameterValidator:
    """Validator binding params to the signature of session.<method_name>."""
    def validator(session: Any, params: Dict[str, Any]) -> None:
        inspect.signature(getattr(session, method_name)).bind(**params)

    validator.__name__ = f"{method_name}_validator"
    return validator


# name -> (session method, parameters, tags, description)
_DEFAULT_OPERATIONS = {
    "scale": ("scale", ("factor",), ["geometry"], "Scale by a multiplier or percentage"),
    "resize": ("resize", ("dimensions", "policy"), ["geometry"], "Resize with fit, cover or stretch"),
    "rotate": ("rotate", ("angle", "background"), ["geometry", "rotate"], "Rotate counter-clockwise"),
    "rotate_clockwise": ("rotate_clockwise", ("angle", "background"), ["geometry", "rotate"], "Rotate clockwise"),
    "rotate_counterclockwise": (
        "rotate_counterclockwise", ("angle", "background"), ["geometry", "rotate"], "Rotate counter-clockwise",
    ),
    "rotate_right": ("rotate_right", ("background",), ["geometry", "rotate"], "Rotate 90 degrees clockwise"),
    "rotate_left": ("rotate_left", ("background",), ["geometry", "rotate"], "Rotate 90 degrees counter-clockwise"),
    "flip": ("flip", ("axis",), ["geometry"], "Flip vertically, horizontally or both"),
    "flip_vertical": ("flip_vertical", (), ["geometry"], "Reverse the row order"),
    "flip_horizontal": ("flip_horizontal", (), ["geometry"], "Reverse the column order"),
    "grayscale": ("grayscale", (), ["tone", "color"], "Convert to grayscale"),
    "monochrome": ("monochrome", ("white", "black"), ["tone", "color"], "Duotone remap between two colors"),
    "negative": ("negative", (), ["filter", "color"], "Invert colors"),
    "brightness": ("brightness", ("amount",), ["filter", "color"], "Adjust brightness (-100 to 100)"),
    "contrast": ("contrast", ("amount",), ["filter", "color"], "Adjust contrast (-100 to 100)"),
    "colorize": ("colorize", ("color",), ["filter", "color"], "Add a color to every pixel"),
    "edge_detect": ("edge_detect", (), ["filter", "convolution"], "Highlight edges"),
    "emboss": ("emboss", (), ["filter", "convolution"], "Emboss"),
    "blur": ("blur", ("amount",), ["filter", "blur"], "Gaussian blur applied N times"),
    "selective_blur": ("selective_blur", ("amount",), ["filter", "blur"], "Edge-preserving blur applied N times"),
    "remove_mean": ("remove_mean", (), ["filter", "convolution"], "Mean removal (sketch effect)"),
    "smooth": ("smooth", ("weight",), ["filter", "blur"], "Smooth with a weighted 3x3 kernel"),
    "pixelate": ("pixelate", ("block_size", "advanced"), ["filter"], "Pixelate into square blocks"),
}


def register_default_operations(registry: OperationRegistry) -> None:
    """
    Register every ImageSession transform as a named operation.

    Step parameters are passed to the session method as keyword arguments
    and checked against its signature first.
    """
    for name, (method_name, parameters, tags, description) in _DEFAULT_OPERATIONS.items():
        registry.register(
            name=name,
            handler=_method_handler(method_name),
            description=description,
            parameters=list(parameters),
            tags=tags,
            validator=_method_validator(method_name),
        )

    logger.info(f"Registered {len(_DEFAULT_OPERATIONS)} session operations")
