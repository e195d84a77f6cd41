"""
Django management command listing the guises declared in this project.
"""
from django.core.management import CommandError
from django.core.management.base import BaseCommand

from guise_tagging.core.guises.exceptions import DefinitionNotFound
from guise_tagging.core.guises.registry import registry


class Command(BaseCommand):
    """
    Django management command to describe registered guise definitions.
    """
    help = 'List the guises declared with has_guises, and where their records are stored.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--source',
            type=str,
            help='Only describe the guises of this source model, e.g. "User".',
            default=None
        )

    def handle(self, *args, **options):
        source = options['source']
        if source:
            try:
                definitions = [registry.get(source)]
            except DefinitionNotFound as exc:
                raise CommandError(str(exc)) from exc
        else:
            definitions = sorted(registry, key=lambda options: options.source_class._meta.label)

        if not definitions:
            self.stdout.write("No guises declared.")
            return

        for definition in definitions:
            if definition.is_bound:
                records = definition.association_class._meta.label
            else:
                records = self.style.WARNING("missing guise_for declaration")
            self.stdout.write(self.style.SUCCESS(definition.source_class._meta.label))
            self.stdout.write(f"  association: {definition.association_name} -> {records}")
            self.stdout.write(f"  attribute: {definition.attribute}")
            self.stdout.write(f"  foreign key: {definition.foreign_key}")
            self.stdout.write(f"  values: {', '.join(definition.values)}")
