from ..product.models import ProductVariant


def resolve_variant(sku: str) -> ProductVariant | None:
    """Return the variant the channel means by `sku`, or None if we do not carry it.

    Channel catalogs may list items not provisioned here yet, so a miss is not
    an error.
    """
    if not sku:
        return None
    return ProductVariant.objects.by_sku(sku).first()
