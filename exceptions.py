"""Error taxonomy for meal plan generation and storage.

Generation-layer errors (GenerationUnavailable, ValidationFailure) are
absorbed by tier fallback and never reach callers. PersistenceFailure,
InvalidMealPreference and the not-found errors propagate.
"""


class MealPlanError(Exception):
    """Base class for all meal plan errors."""


class GenerationUnavailable(MealPlanError):
    """No generative backend is configured, or its circuit breaker is open."""


class ValidationFailure(MealPlanError):
    """A generative response was empty, malformed or semantically invalid."""


class PersistenceFailure(MealPlanError):
    """The store is unreachable or a constraint was violated."""


class MealPlanNotFound(MealPlanError):
    """No plan matches the requested user/plan, or no plan is active."""


class UnknownScheduleReference(MealPlanError):
    """A replace or preference request points at a slot or template that does not exist."""


class InvalidMealPreference(MealPlanError):
    """A preference request has an unknown type or an out-of-range rating."""
