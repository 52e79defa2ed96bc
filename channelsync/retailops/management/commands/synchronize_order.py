import json
import sys
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from ....core.utils.json_serializer import CustomJsonEncoder
from ...exceptions import SynchronizationError
from ...synchronize import synchronize_order


class Command(BaseCommand):
    help = "Apply one channel synchronization request read from a JSON file."

    def add_arguments(self, parser):
        parser.add_argument(
            "request_file",
            type=str,
            help="Path to the JSON request, or - to read it from stdin",
        )
        parser.add_argument(
            "--indent",
            type=int,
            default=None,
            help="Pretty-print the result with this indentation",
        )

    def load_request(self, path):
        try:
            if path == "-":
                return json.load(sys.stdin, parse_float=Decimal)
            with open(path, encoding="utf-8") as request_file:
                return json.load(request_file, parse_float=Decimal)
        except OSError as e:
            raise CommandError(f"Cannot read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CommandError(f"{path} is not valid JSON: {e}") from e

    def handle(self, *args, **options):
        payload = self.load_request(options["request_file"])

        try:
            result = synchronize_order(payload)
        except ValidationError as e:
            raise CommandError(f"Invalid request: {e}") from e
        except SynchronizationError as e:
            raise CommandError(f"{e.code.value}: {e}") from e

        self.stdout.write(
            json.dumps(
                result.as_dict(), cls=CustomJsonEncoder, indent=options["indent"]
            )
        )
        if result.changed:
            self.stderr.write(self.style.SUCCESS("Order updated"))
        else:
            self.stderr.write("No changes")
