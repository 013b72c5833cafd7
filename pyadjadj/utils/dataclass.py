"""Utilities for python dataclasses."""

from typing import Type


def register_params_ds(params_ds: str):  # type: ignore
    """
    Add the given string to the __doc__attribute of the class.

    Parameters
    ----------
    params_ds : str
        String added to the parameters section.
    """

    def decorator(klass: Type):  # type: ignore
        """Decorate the klass."""
        klass.__doc__ += params_ds
        return klass

    return decorator
