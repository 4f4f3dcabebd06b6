"""
Presenters wrapping an object for rendering.

A presenter forwards every unknown attribute to the wrapped object and
adds a ``render`` entry point bound to a view (typically the current
``HttpRequest``). The view can be given at construction or per call.
"""

import logging
from typing import Any, Optional

from django.template.loader import render_to_string
from django.utils.html import format_html

from .core.exceptions import NoViewContext

logger = logging.getLogger(__name__)


class Presenter:
    """Base presenter class."""

    def __init__(self, obj: Any, view: Any = None):
        self._wrapped = obj
        self.view = view

    @property
    def wrapped(self) -> Any:
        return self._wrapped

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes the presenter itself does not define
        if name == "_wrapped":
            raise AttributeError(name)
        return getattr(self._wrapped, name)

    def render(self, view: Any = None, **options: Any) -> Any:
        """
        Render the wrapped object into ``view`` (or the bound view).

        The previously bound view is restored afterwards, even on error.
        """
        previous_view = self.view
        try:
            if view is not None:
                self.view = view
            if self.view is None:
                raise NoViewContext()
            return self.generate(**options)
        finally:
            self.view = previous_view

    def generate(self, **options: Any) -> Any:
        """Build the representation of the wrapped object; override in subclasses."""
        return format_html("<div>{}</div>", repr(self._wrapped))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._wrapped!r}>"


class TemplatePresenter(Presenter):
    """Presenter rendering a Django template with the wrapped object."""

    template_name: Optional[str] = None
    context_object_name = "object"

    def get_template_name(self) -> str:
        if not self.template_name:
            raise NotImplementedError(f"{type(self).__name__} must define template_name")
        return self.template_name

    def get_context_data(self, **options: Any) -> dict[str, Any]:
        context = {self.context_object_name: self._wrapped, "presenter": self}
        context.update(options)
        return context

    def generate(self, **options: Any) -> Any:
        template_name = self.get_template_name()
        logger.debug("Rendering %r with template %s", self._wrapped, template_name)
        request = self.view if hasattr(self.view, "META") else None
        return render_to_string(template_name, self.get_context_data(**options), request=request)


class Presentable:
    """Mixin for objects that know which presenter renders them."""

    presenter_class: type = Presenter

    def present(self, view: Any = None) -> Presenter:
        return self.presenter_class(self, view=view)
