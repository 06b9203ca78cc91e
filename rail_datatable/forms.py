"""
Filter form assembly.

Tables describe their filter form by adding Django form fields to a
:class:`FilterFormBuilder`; the builder produces a regular ``forms.Form``
whose field names are prefixed with the builder's name.
"""

from typing import Any, Dict, Optional, Type, Union

from django import forms
from django.forms.widgets import Input
from django.utils.translation import gettext_lazy as _


class FilterButtonInput(Input):
    input_type = "submit"


class FilterButtonField(forms.Field):
    """The submit control every filter form starts with."""

    widget = FilterButtonInput

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("required", False)
        kwargs.setdefault("label", "")
        kwargs.setdefault("widget", FilterButtonInput(attrs={"value": _("Filter")}))
        super().__init__(**kwargs)


class FilterFormBuilder:
    """
    Collects filter fields under a form name.

    Example::

        FilterFormBuilder("learners_filter")
            .add("dofilter", FilterButtonField())
            .add("status", forms.ChoiceField(choices=STATUS_CHOICES, required=False))
            .get_form()
    """

    def __init__(self, name: str, form_class: Type[forms.Form] = forms.Form):
        self.name = name
        self.form_class = form_class
        self._fields: Dict[str, forms.Field] = {}

    def add(
        self,
        name: str,
        field: Union[forms.Field, Type[forms.Field], None] = None,
        **field_kwargs: Any,
    ) -> "FilterFormBuilder":
        if field is None:
            field_kwargs.setdefault("required", False)
            field = forms.CharField(**field_kwargs)
        elif isinstance(field, type) and issubclass(field, forms.Field):
            field_kwargs.setdefault("required", False)
            field = field(**field_kwargs)
        elif not isinstance(field, forms.Field):
            raise TypeError(f"Filter field {name!r} must be a django.forms.Field")
        self._fields[name] = field
        return self

    def remove(self, name: str) -> "FilterFormBuilder":
        self._fields.pop(name, None)
        return self

    def has(self, name: str) -> bool:
        return name in self._fields

    def count(self) -> int:
        return len(self._fields)

    def get_form(self, data: Optional[Dict[str, Any]] = None) -> forms.Form:
        class_name = "".join(part.capitalize() for part in self.name.split("_")) or "Filter"
        form_class = type(f"{class_name}Form", (self.form_class,), dict(self._fields))
        return form_class(data=data, prefix=self.name)


__all__ = ["FilterButtonInput", "FilterButtonField", "FilterFormBuilder"]
