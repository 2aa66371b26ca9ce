"""
Recipe loading and execution.

A recipe is a JSON document listing session operations in order, with an
optional export block:

    {
      "operations": [
        {"op": "resize", "dimensions": [200, 200], "policy": "cover"},
        {"op": "monochrome", "white": "#FFF", "black": "#223"}
      ],
      "export": {"format": "png", "quality": 90, "destination": "thumbs/"}
    }

Each step names a registered operation with "op"; the remaining keys are
passed to the operation as parameters. In the export block a missing
"destination" overwrites the source file and a null one writes to the
output sink.

Classes:
    Recipe: Ordered operations plus export options

Functions:
    load_recipe: Read a Recipe from a JSON file
    apply_recipe: Run a recipe's operations against a session
    export_recipe: Perform a recipe's export block
    run_recipe: apply_recipe followed by export_recipe
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging

from IK_Libs.RecipeLib.operation_registry import OperationRegistry, get_default_registry
from IK_Libs.SessionLib.export_handler import SOURCE_PATH
from IK_Libs.constants import (
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_EXPORT_QUALITY,
    FIELD_EXPORT,
    FIELD_EXPORT_DESTINATION,
    FIELD_EXPORT_FORMAT,
    FIELD_EXPORT_QUALITY,
    FIELD_OPERATION_NAME,
    FIELD_OPERATIONS,
)

logger = logging.getLogger(__name__)


def _normalize_step(step: Any, index: int) -> Dict[str, Any]:
    if not isinstance(step, dict):
        raise ValueError(f"Recipe step {index} must be an object, got {type(step).__name__}")

    name = str(step.get(FIELD_OPERATION_NAME, "")).strip()
    if not name:
        raise ValueError(f"Recipe step {index} is missing '{FIELD_OPERATION_NAME}'")

    normalized = dict(step)
    normalized[FIELD_OPERATION_NAME] = name
    return normalized


def _normalize_export(export: Any) -> Optional[Dict[str, Any]]:
    if export is None:
        return None
    if not isinstance(export, dict):
        raise ValueError(f"Recipe '{FIELD_EXPORT}' must be an object, got {type(export).__name__}")
    return dict(export)


@dataclass
class Recipe:
    """An ordered list of operation steps and optional export options.

    Attributes:
        operations: Step dicts, each with an "op" key plus parameters
        export: Export options ("format", "quality", "destination") or None
    """
    operations: List[Dict[str, Any]] = field(default_factory=list)
    export: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self.operations = [_normalize_step(step, index) for index, step in enumerate(self.operations)]
        self.export = _normalize_export(self.export)

    def add_step(self, name: str, **params: Any) -> "Recipe":
        """Append a step and return the recipe."""
        params[FIELD_OPERATION_NAME] = name
        self.operations.append(_normalize_step(params, len(self.operations)))
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        payload: Dict[str, Any] = {FIELD_OPERATIONS: [dict(step) for step in self.operations]}
        if self.export is not None:
            payload[FIELD_EXPORT] = dict(self.export)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """
        Create from dictionary.

        Raises:
            ValueError: If the recipe or one of its steps is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Recipe must be an object, got {type(data).__name__}")

        operations = data.get(FIELD_OPERATIONS, [])
        if not isinstance(operations, list):
            raise ValueError(f"Recipe '{FIELD_OPERATIONS}' must be a list")

        return cls(operations=list(operations), export=data.get(FIELD_EXPORT))


def load_recipe(path: Any) -> Recipe:
    """
    Read a recipe from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or the recipe is malformed
    """
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Recipe {path} is not valid JSON: {exc}") from exc

    recipe = Recipe.from_dict(payload)
    logger.info(f"Loaded recipe {path} with {len(recipe.operations)} operation(s)")
    return recipe


def apply_recipe(session: Any, recipe: Recipe, registry: Optional[OperationRegistry] = None) -> Any:
    """
    Run each recipe step against a session, in order.

    Args:
        session: The ImageSession to transform
        recipe: Recipe to run
        registry: Registry to look operations up in (default: global registry)

    Returns:
        The session

    Raises:
        ValueError: If a step names an unknown operation or parameters the
            operation does not accept
        ImageKitError: If an operation fails; earlier steps stay applied.
            Errors raised while an operation runs propagate unchanged.
    """
    registry = registry or get_default_registry()

    for index, step in enumerate(recipe.operations):
        name = step[FIELD_OPERATION_NAME]
        params = {key: value for key, value in step.items() if key != FIELD_OPERATION_NAME}

        if not registry.has_operation(name):
            available = ", ".join(registry.list_operations())
            raise ValueError(f"Recipe step {index}: unknown operation '{name}'. Available operations: {available}")

        try:
            registry.validate(name, session, params)
        except TypeError as exc:
            raise ValueError(f"Recipe step {index} ({name}): invalid parameters {params}: {exc}") from exc

        logger.debug(f"Recipe step {index}: {name} {params}")
        registry.execute(name, session, params)

    return session


def export_recipe(session: Any, recipe: Recipe, sink: Optional[Any] = None) -> Optional[Path]:
    """
    Perform the recipe's export block, if it has one.

    Returns:
        The written path, or None when writing to the sink or when the
        recipe has no export block
    """
    if recipe.export is None:
        return None

    options = recipe.export
    destination = options.get(FIELD_EXPORT_DESTINATION, SOURCE_PATH)
    return session.export(
        export_format=options.get(FIELD_EXPORT_FORMAT, DEFAULT_EXPORT_FORMAT),
        quality=options.get(FIELD_EXPORT_QUALITY, DEFAULT_EXPORT_QUALITY),
        destination=destination,
        sink=sink,
    )


def run_recipe(
    session: Any,
    recipe: Recipe,
    registry: Optional[OperationRegistry] = None,
    sink: Optional[Any] = None,
) -> Optional[Path]:
    """Apply the recipe's operations, then its export block."""
    apply_recipe(session, recipe, registry)
    return export_recipe(session, recipe, sink)
