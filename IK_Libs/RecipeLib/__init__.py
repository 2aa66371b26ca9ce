"""
RecipeLib - Named operations and recipe files

This module maps operation names onto ImageSession transforms and runs
JSON recipes made of those operations.
"""

from IK_Libs.RecipeLib.operation_registry import (
    OperationRegistry,
    get_default_registry,
    register_default_operations,
)
from IK_Libs.RecipeLib.recipe_runner import (
    Recipe,
    apply_recipe,
    export_recipe,
    load_recipe,
    run_recipe,
)

__all__ = [
    "OperationRegistry",
    "get_default_registry",
    "register_default_operations",
    "Recipe",
    "apply_recipe",
    "export_recipe",
    "load_recipe",
    "run_recipe",
]
