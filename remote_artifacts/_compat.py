"""Compatibility imports for reading and writing TOML configuration files."""

# Reading TOML (Python 3.11+ has tomllib built-in)
try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

# Writing TOML (tomlkit keeps comments and layout of existing files)
try:
    import tomlkit
except ImportError:
    tomlkit = None


def require_tomllib():
    """Return the TOML reader module or raise a helpful ImportError."""
    if tomllib is None:
        raise ImportError(
            "TOML parsing requires 'tomli' package for Python < 3.11. "
            "Install with: pip install tomli"
        )
    return tomllib


def require_tomlkit():
    """Return tomlkit or raise a helpful ImportError."""
    if tomlkit is None:
        raise ImportError(
            "tomlkit is required for writing TOML files. "
            "Install with: pip install tomlkit"
        )
    return tomlkit
