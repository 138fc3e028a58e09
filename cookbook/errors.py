"""Exception taxonomy for Cookbook.

- CookbookError: base for everything raised on purpose
- LoadError: input file could not be opened or parsed
- IngestError: an ingestion stage failed (wraps the cause)
- AuthorNotFoundError / UnpublishedRecipeError: recipe batch broke an invariant
- *NotFoundError: lookups for missing rows
- RecipeExistsError: creating a recipe whose id is taken
- DocumentError: a stored JSON document no longer validates
"""

from typing import Optional


class CookbookError(Exception):
    pass


class LoadError(CookbookError):
    pass


class IngestError(CookbookError):
    """A pipeline stage failed. `stage` names it, e.g. "Ingesting recipes"."""

    def __init__(self, stage: str, cause: Optional[BaseException] = None):
        self.stage = stage
        self.cause = cause
        message = stage if cause is None else f"{stage}: {cause}"
        super().__init__(message)


class AuthorNotFoundError(CookbookError):
    def __init__(self, recipe_id: str, author_name: str):
        self.recipe_id = recipe_id
        self.author_name = author_name
        super().__init__(f"Author {author_name!r} of recipe {recipe_id} is not in the author map")


class UnpublishedRecipeError(CookbookError):
    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Imported recipes should be published: {recipe_id} has no published_at")


class RecipeNotFoundError(CookbookError):
    pass


class RecipeExistsError(CookbookError):
    pass


class IngredientNotFoundError(CookbookError):
    pass


class ImageNotFoundError(CookbookError):
    pass


class DocumentError(CookbookError):
    pass
