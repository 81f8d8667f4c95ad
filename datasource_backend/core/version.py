from importlib.metadata import PackageNotFoundError, version


def get_app_version() -> str:
    """Get the version from the installed package metadata."""
    try:
        return version("datasource-backend")
    except PackageNotFoundError:
        return "unknown"
