# manito_matching/verbosity.py
import builtins
import os

# Progress lines stay quiet unless MANITO_VERBOSE is set to a truthy value.
VERBOSE = os.environ.get("MANITO_VERBOSE", "0").strip().lower() in ("1", "true", "yes", "on")


def vprint(*args, verbose=None, **kwargs) -> None:
    """Print only when verbose output is on (explicit flag wins over env)."""
    flag = VERBOSE if verbose is None else verbose
    if flag:
        builtins.print(*args, **kwargs)
