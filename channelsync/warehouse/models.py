from django.db import models

from ..product.models import ProductVariant


class Warehouse(models.Model):
    """A stock location shipments are fulfilled from and returns come back to."""

    name = models.CharField(max_length=250)
    slug = models.SlugField(max_length=255, unique=True, allow_unicode=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("pk",)

    def __str__(self):
        return self.name


class Stock(models.Model):
    warehouse = models.ForeignKey(
        Warehouse, null=False, on_delete=models.CASCADE, related_name="stocks"
    )
    product_variant = models.ForeignKey(
        ProductVariant, null=False, on_delete=models.CASCADE, related_name="stocks"
    )
    quantity = models.IntegerField(default=0)

    class Meta:
        unique_together = [["warehouse", "product_variant"]]
        ordering = ("pk",)

    def __str__(self):
        return f"{self.product_variant.sku} @ {self.warehouse.slug}: {self.quantity}"
