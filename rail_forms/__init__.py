"""
Rail Forms - form objects between user input and Django models.

Forms delegate attributes to one model, compose associated sub-forms,
aggregate validation across the whole tree and save it atomically.
"""

__version__ = "0.1.0"


def __getattr__(name):
    # Lazy exports so importing the package does not require configured settings
    if name == "Form":
        from .forms import Form

        return Form
    if name == "ErrorSet":
        from .errors import ErrorSet

        return ErrorSet
    if name == "Presenter":
        from .presenters import Presenter

        return Presenter
    if name == "Finder":
        from .finder import Finder

        return Finder
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["Form", "ErrorSet", "Presenter", "Finder", "__version__"]
