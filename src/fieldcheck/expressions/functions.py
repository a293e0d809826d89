"""Function registry for the predicate language.

Functions are callable from predicates by bare name (``isEmpty(code)``)
when the context object has no method of that name.
"""

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class FunctionDefinition:
    """An expression function.

    Attributes:
        name: Function name as used in expressions
        implementation: The Python callable
        description: Human-readable description
        examples: Example expressions using this function
    """

    name: str
    implementation: Callable[..., Any]
    description: str = ""
    examples: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "examples": list(self.examples),
        }


class FunctionRegistry:
    """Registry for expression functions.

    Populated once at startup (see ``register_all_builtins``) and read-only
    while predicates are evaluated.

    Example:
        FunctionRegistry.register(FunctionDefinition("isBlank", _is_blank))
        FunctionRegistry.call("isBlank", "  ")  # True
    """

    _functions: dict[str, FunctionDefinition] = {}

    @classmethod
    def register(cls, func_def: FunctionDefinition) -> None:
        cls._functions[func_def.name] = func_def

    @classmethod
    def get(cls, name: str) -> FunctionDefinition:
        """Get a function definition by name.

        Raises:
            ValueError: If function is not registered
        """
        if name not in cls._functions:
            raise ValueError(f"Unknown function: {name}")
        return cls._functions[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._functions

    @classmethod
    def call(cls, name: str, *args: Any) -> Any:
        return cls.get(name).implementation(*args)

    @classmethod
    def list_all(cls) -> list[FunctionDefinition]:
        return list(cls._functions.values())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._functions.clear()
