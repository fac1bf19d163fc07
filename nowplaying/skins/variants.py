"""Active layout variant selection."""

from __future__ import annotations

from nowplaying.errors import VariantListEmptyError
from nowplaying.skins.models import LayoutModel, Variant


def select_variant(model: LayoutModel, previous_id: str | None = None) -> Variant:
    """Pick the previous variant if still offered, else the default, else the first.

    Raises VariantListEmptyError when the model has no variants.
    """
    if not model.variants:
        raise VariantListEmptyError()
    for candidate in (previous_id, model.default_variant_id):
        if not candidate:
            continue
        variant = model.get(candidate)
        if variant is not None:
            return variant
    return model.variants[0]
