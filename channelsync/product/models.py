from decimal import Decimal

from django.conf import settings
from django.db import models
from prices import Money


class ProductVariantQueryset(models.QuerySet["ProductVariant"]):
    def by_sku(self, sku: str):
        return self.filter(sku=sku)


ProductVariantManager = models.Manager.from_queryset(ProductVariantQueryset)


class ProductVariant(models.Model):
    """A sellable item, addressed by the channel through its SKU."""

    sku = models.CharField(max_length=255, unique=True)
    name = models.CharField(max_length=255, blank=True)

    # defaults copied onto a new order line
    price_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        default=Decimal(0),
    )
    cost_price_amount = models.DecimalField(
        max_digits=settings.DEFAULT_MAX_DIGITS,
        decimal_places=settings.DEFAULT_DECIMAL_PLACES,
        null=True,
        blank=True,
    )
    currency = models.CharField(
        max_length=settings.DEFAULT_CURRENCY_CODE_LENGTH,
        default=settings.DEFAULT_CURRENCY,
    )
    # advisory items are listed to the channel but not fulfilled from stock
    is_advisory = models.BooleanField(default=False)
    is_gift_card = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductVariantManager()

    class Meta:
        ordering = ("sku",)

    def __str__(self):
        return self.name or self.sku

    @property
    def price(self):
        return Money(self.price_amount, self.currency)

    def get_stock_location_ids(self) -> list[int]:
        """Active warehouses stocking this variant, in creation order."""
        return list(
            self.stocks.filter(warehouse__is_active=True)
            .order_by("warehouse_id")
            .values_list("warehouse_id", flat=True)
        )
