import json

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from ....core.utils.json_serializer import CustomJsonEncoder
from ...exceptions import OrdersNotExportable
from ...queries import dump_orders_for_export, mark_orders_exported


class Command(BaseCommand):
    help = "List orders waiting for the channel, or acknowledge exported ones."

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Maximum number of orders to list",
        )
        parser.add_argument(
            "--mark",
            nargs="+",
            type=int,
            metavar="ORDER_ID",
            help="Mark these order IDs as exported instead of listing",
        )

    def handle(self, *args, **options):
        if options["mark"]:
            try:
                orders = mark_orders_exported(options["mark"])
            except (ValidationError, OrdersNotExportable) as e:
                raise CommandError(str(e)) from e
            self.stdout.write(
                self.style.SUCCESS(f"Marked {len(orders)} order(s) exported")
            )
            return

        dumps = dump_orders_for_export(options["limit"])
        self.stdout.write(json.dumps(dumps, cls=CustomJsonEncoder))
