"""Installed version of :mod:`petrikit`."""

from importlib.metadata import PackageNotFoundError, version as _dist_version

DIST_NAME = "petrikit"


def get_version(dist_name: str = DIST_NAME) -> str:
    """
    Version of the installed distribution.

    :param dist_name: Distribution name on the package index.
    :returns: The version string, or ``"0.0.0-dev"`` when running from an
        uninstalled source checkout.
    """
    try:
        return _dist_version(dist_name)
    except PackageNotFoundError:
        return "0.0.0-dev"


__version__ = get_version()
