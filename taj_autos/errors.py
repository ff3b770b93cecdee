# taj_autos/errors.py


class DomainError(Exception):
    """Domain-level error the caller/UI can surface (toast/snackbar)."""
    pass


class ValidationError(DomainError):
    """
    Bad user input: insufficient stock, non-positive quantity or amount,
    missing required field, overpayment, unknown vendor/product/customer.

    Always recoverable; the operation is aborted before anything is written.
    """
    pass


class StorageError(DomainError):
    """The underlying SQLite write failed; the transaction was rolled back."""
    pass


class InvariantError(RuntimeError):
    """A bookkeeping invariant was broken by the code, not by the user."""
    pass
