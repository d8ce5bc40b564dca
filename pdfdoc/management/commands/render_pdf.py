"""
Management command to render a template or HTML file to a PDF.
"""

import json

from django.core.management.base import BaseCommand, CommandError

from pdfdoc.service import PdfRenderService


class Command(BaseCommand):
    help = 'Render a Django template (or an HTML file with --file) to a PDF'

    def add_arguments(self, parser):
        parser.add_argument('source', help='Template name, or HTML file path with --file')
        parser.add_argument(
            '--output',
            required=True,
            help='Target path (or name on the storage backend with --disk)',
        )
        parser.add_argument(
            '--file',
            action='store_true',
            help='Treat source as an HTML file instead of a template name',
        )
        parser.add_argument('--disk', help='Storage alias from settings.STORAGES')
        parser.add_argument('--context', default='{}', help='Template context as JSON')
        parser.add_argument('--paper', help='Paper size, e.g. a4 or letter')
        parser.add_argument('--orientation', choices=['portrait', 'landscape'])
        parser.add_argument('--title', help='Document title metadata')
        parser.add_argument(
            '--no-warnings',
            action='store_true',
            help='Do not fail when the engine reports warnings',
        )

    def handle(self, *args, **options):
        try:
            context = json.loads(options['context'])
        except json.JSONDecodeError as e:
            raise CommandError(f'Invalid --context JSON: {e}') from e

        document = PdfRenderService().make()
        if options['no_warnings']:
            document.set_warnings(False)
        if options['paper']:
            document.set_paper(options['paper'], options['orientation'] or 'portrait')
        elif options['orientation']:
            document.set_option('orientation', options['orientation'])
        if options['title']:
            document.add_info({'Title': options['title']})

        if options['file']:
            document.load_file(options['source'])
        else:
            document.load_view(options['source'], context)

        document.save(options['output'], disk=options['disk'])

        self.stdout.write(self.style.SUCCESS(
            f"Rendered {options['source']} to {options['output']}"
        ))
