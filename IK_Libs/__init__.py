"""
IK_Libs - ImageKit Library Modules

This package contains core functionality for the ImageKit toolkit,
organized into specialized sub-packages:

- ColorLib: Color parsing and alpha conversions
- ImageEditingLib: Pixel buffer, image models, geometry, tone and filter operations
- SessionLib: Image sessions, export and output sinks
- RecipeLib: Named operation registry and JSON recipes
"""

__version__ = "0.1.0"
