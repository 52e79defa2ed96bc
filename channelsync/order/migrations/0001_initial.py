from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import channelsync.core.utils.json_serializer


def _amount(**kwargs):
    return models.DecimalField(decimal_places=3, max_digits=20, **kwargs)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("product", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("number", models.CharField(max_length=255, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("unfulfilled", "Unfulfilled"),
                            ("partially_fulfilled", "Partially fulfilled"),
                            ("fulfilled", "Fulfilled"),
                            ("returned", "Returned"),
                            ("canceled", "Canceled"),
                        ],
                        default="unfulfilled",
                        max_length=32,
                    ),
                ),
                (
                    "export_status",
                    models.CharField(
                        choices=[
                            ("no", "Not exportable"),
                            ("yes", "Ready for export"),
                            ("done", "Exported"),
                        ],
                        db_index=True,
                        default="no",
                        max_length=8,
                    ),
                ),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("item_total_amount", _amount(default=Decimal("0"))),
                ("shipping_total_amount", _amount(default=Decimal("0"))),
                ("tax_total_amount", _amount(default=Decimal("0"))),
                ("promotion_total_amount", _amount(default=Decimal("0"))),
                ("total_amount", _amount(default=Decimal("0"))),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, editable=False
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, db_index=True),
                ),
            ],
            options={
                "ordering": ("-pk",),
            },
        ),
        migrations.CreateModel(
            name="OrderLine",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "quantity",
                    models.IntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                ("currency", models.CharField(max_length=3)),
                ("price_amount", _amount()),
                ("cost_price_amount", _amount(blank=True, null=True)),
                ("estimated_ship_date", models.DateTimeField(blank=True, null=True)),
                (
                    "direct_ship_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text="Shipping charged directly on this line by the carrier",
                        max_digits=20,
                        null=True,
                    ),
                ),
                (
                    "apportioned_ship_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text=(
                            "Share of the order shipping charge apportioned to this line"
                        ),
                        max_digits=20,
                        null=True,
                    ),
                ),
                (
                    "private_metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        encoder=channelsync.core.utils.json_serializer.CustomJsonEncoder,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        editable=False,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="order.order",
                    ),
                ),
                (
                    "variant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_lines",
                        to="product.productvariant",
                    ),
                ),
            ],
            options={
                "ordering": ("created_at", "id"),
            },
        ),
        migrations.AddConstraint(
            model_name="orderline",
            constraint=models.UniqueConstraint(
                fields=("order", "variant"), name="order_line_unique_variant"
            ),
        ),
        migrations.CreateModel(
            name="Adjustment",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("tax", "Tax"), ("promotion", "Promotion")],
                        max_length=16,
                    ),
                ),
                ("label", models.CharField(blank=True, max_length=255)),
                ("amount", _amount(default=Decimal("0"))),
                (
                    "rate",
                    models.DecimalField(
                        blank=True, decimal_places=6, max_digits=7, null=True
                    ),
                ),
                (
                    "state",
                    models.CharField(
                        choices=[("open", "Open"), ("closed", "Closed")],
                        default="open",
                        max_length=8,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="all_adjustments",
                        to="order.order",
                    ),
                ),
                (
                    "order_line",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="adjustments",
                        to="order.orderline",
                    ),
                ),
            ],
            options={
                "ordering": ("pk",),
            },
        ),
        migrations.CreateModel(
            name="OrderEvent",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "date",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        editable=False,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("synchronized", "Order synchronized from the channel"),
                            ("exported", "Order export acknowledged by the channel"),
                            (
                                "return_authorized",
                                "Return authorization created from the channel",
                            ),
                            ("return_received", "Returned items received"),
                        ],
                        max_length=255,
                    ),
                ),
                (
                    "parameters",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        encoder=channelsync.core.utils.json_serializer.CustomJsonEncoder,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="order.order",
                    ),
                ),
            ],
            options={
                "ordering": ("date",),
                "indexes": [
                    models.Index(
                        fields=["order", "date"], name="order_event_order_date_idx"
                    ),
                    models.Index(fields=["type"], name="order_event_type_idx"),
                ],
            },
        ),
    ]
