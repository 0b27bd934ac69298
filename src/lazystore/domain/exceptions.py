from typing import List


class StoreError(Exception):
    """Base exception for store-related errors."""


class DuplicateBindingError(StoreError):
    """Raised when a name is added to a definition that can already resolve it.

    This occurs when:
    - The name is bound in the definition itself.
    - The name is bound anywhere in the parent store chain.

    Attributes:
        name: The name that was registered twice.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Service {name} already registered. Use override() to replace it.")


class UnknownBindingError(StoreError):
    """Raised when a name cannot be resolved locally or in any ancestor store.

    Attributes:
        name: The name that was looked up.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Service {name} is not registered.")


class SyncDisposeOfAsyncResourceError(StoreError):
    """Raised by synchronous disposal when a value can only be closed asynchronously.

    Attributes:
        name: The binding whose value can only be closed asynchronously.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Cannot dispose a store containing async disposables (service {name}). "
            "Use `await store.aclose()` or `async with` instead of `with`."
        )


class DisposalError(StoreError):
    """Raised when more than one teardown failed during asynchronous disposal.

    Attributes:
        errors: Every exception raised by the failed teardowns.
    """

    def __init__(self, errors: List[BaseException]) -> None:
        self.errors = errors
        message = f"{len(errors)} services failed to dispose: " + "; ".join(repr(e) for e in errors)
        super().__init__(message)
