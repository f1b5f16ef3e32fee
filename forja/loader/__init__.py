"""
Loader: receta declarativa (YAML) → lista ordenada de recursos.
"""

from forja.loader.guards import command_predicate, describe_predicate
from forja.loader.recipe import RecipeLoader, load_recipe

__all__ = ["RecipeLoader", "load_recipe", "command_predicate", "describe_predicate"]
