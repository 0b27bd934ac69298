from enum import Enum


class Lifetime(str, Enum):
    """Defines how long a constructed value lives inside a store.

    Attributes:
        SINGLETON: Constructed at most once per store and memoized.
        TRANSIENT: Constructed anew on every lookup, never memoized.
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"

    def __str__(self) -> str:
        return self.value
