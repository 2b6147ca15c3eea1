from stylescope.transforms.base import Transform
from stylescope.transforms.placeholder_expansion import (
    PlaceholderExpansionTransform,
    expand_placeholders,
)
from stylescope.transforms.scoper import Scoper, scope_sheet


def apply_transforms(sheet, values=None, custom_transforms=None):
    """Expand placeholders in *sheet*, then apply any custom transforms."""
    transforms: list[Transform] = [PlaceholderExpansionTransform(values)]
    if custom_transforms:
        transforms.extend(custom_transforms)
    for t in transforms:
        sheet = t.apply(sheet)
    return sheet


__all__ = [
    "Transform",
    "PlaceholderExpansionTransform",
    "expand_placeholders",
    "apply_transforms",
    "Scoper",
    "scope_sheet",
]
