"""Top-level package for the feedback call question engine.

Provides subpackages:
- feedback_toolkit.core – question/result models, validation, serialization
- feedback_toolkit.common – tunable thresholds
- feedback_toolkit.engine – selection, grouping and the evaluation service
- feedback_toolkit.cli – command-line front end
"""


def _get_version() -> str:
    """Get version from installed metadata, or a dev marker when running from source."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("feedback-toolkit")
    except PackageNotFoundError:
        return "0.0.0+dev"


__version__ = _get_version()
