"""
Exception types surfaced by TacoTrack services.

Each carries the HTTP status the API layer answers with. Messages are meant
for API clients, so they never include internal detail.
"""


class TacoTrackError(Exception):
    """Base class for expected, request-scoped failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TacoTrackError):
    """A referenced record does not exist."""

    status_code = 404


class InvalidTransitionError(TacoTrackError):
    """An order status change that the lifecycle does not allow."""

    status_code = 409


class UnresolvedIngredientError(TacoTrackError):
    """A recipe line points at an ingredient that is not in the ingredient set."""

    status_code = 422

    def __init__(self, recipe_id: str, ingredient_id: str):
        super().__init__(f"Recipe '{recipe_id}' references unknown ingredient '{ingredient_id}'")
        self.recipe_id = recipe_id
        self.ingredient_id = ingredient_id


class DataStoreError(TacoTrackError):
    """The database failed. The message is the fixed text shown to clients."""

    status_code = 500
