"""
Tests for the WeasyPrint engine

Tests the engine against real WeasyPrint output:
- HTML strings and files
- Paper size and orientation
- Warnings scoped to one render
- Metadata and encryption
- Base template smoke test
"""

import logging
import os
import tempfile
import threading
from io import BytesIO

from django.test import TestCase, override_settings
from pypdf import PdfReader

from pdfdoc import PdfDocument, PdfRenderService, RenderWarning, UnsupportedCapability
from pdfdoc.canvas import EncryptingCanvas, NativeCanvas
from pdfdoc.dto import RenderResult
from pdfdoc.interfaces import IPdfEngine
from pdfdoc.options import Options
from pdfdoc.weasyprint_engine import (
    WEASYPRINT_AVAILABLE,
    WeasyPrintEngine,
    capture_warnings,
    page_css,
)


SIMPLE_HTML = """
<!DOCTYPE html>
<html>
<head><title>Test</title></head>
<body>
    <h1>Test Document</h1>
    <p>This is a test paragraph.</p>
</body>
</html>
"""


class PageCssTestCase(TestCase):
    """Test @page rule generation"""

    def test_named_size(self):
        self.assertEqual(page_css('a4'), '@page { size: A4 portrait; }')

    def test_named_size_landscape(self):
        self.assertEqual(page_css('letter', 'landscape'), '@page { size: LETTER landscape; }')

    def test_width_height(self):
        self.assertEqual(page_css((300, 400)), '@page { size: 300pt 400pt; }')

    def test_box_coordinates(self):
        self.assertEqual(page_css([0, 0, 595.28, 841.89]), '@page { size: 595.28pt 841.89pt; }')

    def test_landscape_swaps_dimensions(self):
        self.assertEqual(page_css((300, 400), 'landscape'), '@page { size: 400pt 300pt; }')


class CaptureWarningsTestCase(TestCase):
    """Test warning collection from the WeasyPrint logger"""

    def test_collects_warnings_in_order(self):
        with capture_warnings() as warnings:
            logging.getLogger('weasyprint').warning('Ignored %s', 'first')
            logging.getLogger('weasyprint.css').warning('second')
            logging.getLogger('weasyprint').info('not a warning')

        self.assertEqual(warnings, ['Ignored first', 'second'])

    def test_handler_removed_after_block(self):
        with capture_warnings() as warnings:
            pass
        logging.getLogger('weasyprint').warning('late')

        self.assertEqual(warnings, [])

    def test_ignores_other_threads(self):
        other = threading.Thread(
            target=logging.getLogger('weasyprint').warning,
            args=('Ignored `colour: blue` in another request',),
        )

        with capture_warnings() as warnings:
            other.start()
            other.join()
            logging.getLogger('weasyprint').warning('mine')

        self.assertEqual(warnings, ['mine'])

    def test_collects_when_logger_level_is_higher(self):
        target = logging.getLogger('weasyprint')
        self.addCleanup(target.setLevel, target.level)
        target.setLevel(logging.ERROR)

        with capture_warnings() as warnings:
            target.warning('Ignored `colour: red`')

        self.assertEqual(warnings, ['Ignored `colour: red`'])
        self.assertEqual(target.level, logging.ERROR)

    def test_nested_captures_restore_level(self):
        target = logging.getLogger('weasyprint')
        self.addCleanup(target.setLevel, target.level)
        target.setLevel(logging.ERROR)

        with capture_warnings() as outer:
            with capture_warnings() as inner:
                target.warning('inner')
            target.warning('outer')

        self.assertEqual(inner, ['inner'])
        self.assertEqual(outer, ['inner', 'outer'])
        self.assertEqual(target.level, logging.ERROR)


class WeasyPrintEngineTestCase(TestCase):
    """Test cases for WeasyPrint engine"""

    def setUp(self):
        if not WEASYPRINT_AVAILABLE:
            self.skipTest("WeasyPrint not available")
        self.engine = WeasyPrintEngine(Options({'paper_size': 'a4', 'orientation': 'portrait', 'pdf_backend': 'pypdf'}))

    def test_engine_initialization(self):
        """Test engine can be initialized"""
        self.assertIsInstance(self.engine, IPdfEngine)
        self.assertIsNone(self.engine.get_canvas())

    def test_render_simple_html(self):
        """Test rendering simple HTML to PDF"""
        result = self.engine.load_html(SIMPLE_HTML).render()
        pdf_bytes = self.engine.output()

        self.assertIsInstance(result, RenderResult)
        self.assertEqual(result.page_count, 1)
        self.assertIsInstance(pdf_bytes, bytes)
        # PDF files start with %PDF
        self.assertTrue(pdf_bytes.startswith(b'%PDF'))
        self.assertIsInstance(self.engine.get_canvas(), EncryptingCanvas)

    def test_render_html_file(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'page.html')
            with open(path, 'w', encoding='utf-8') as f:
                f.write(SIMPLE_HTML)

            self.engine.load_html_file(path).render()
            pdf_bytes = self.engine.output()

        self.assertTrue(pdf_bytes.startswith(b'%PDF'))
        self.assertIsNone(self.engine.html_string)

    def test_landscape_page(self):
        self.engine.set_paper('a4', 'landscape').load_html(SIMPLE_HTML).render()

        page = self.engine.get_document().pages[0]
        self.assertGreater(page.width, page.height)

    def test_render_reports_warnings_of_that_call(self):
        first = self.engine.load_html('<p style="colour: red">Hello</p>').render()
        second = self.engine.load_html('<p>Hello</p>').render()

        self.assertTrue(any('colour' in message for message in first.warnings))
        self.assertEqual(second.warnings, [])

    def test_metadata(self):
        self.engine.add_info('Title', 'Invoice 42')
        self.engine.add_info('Author', 'ACME')
        self.engine.load_html(SIMPLE_HTML).render()

        reader = PdfReader(BytesIO(self.engine.output()))

        self.assertEqual(reader.metadata.title, 'Invoice 42')
        self.assertEqual(reader.metadata.author, 'ACME')

    def test_producer_does_not_replace_creator(self):
        self.engine.add_info('Creator', 'Billing')
        self.engine.add_info('Producer', 'ACME PDF')
        self.engine.load_html(SIMPLE_HTML).render()

        reader = PdfReader(BytesIO(self.engine.output()))

        self.assertEqual(reader.metadata.creator, 'Billing')
        self.assertEqual(self.engine.get_document().metadata.custom['Producer'], 'ACME PDF')

    def test_uncompressed_output(self):
        self.engine.load_html(SIMPLE_HTML).render()

        pdf_bytes = self.engine.output({'compress': 0})

        self.assertTrue(pdf_bytes.startswith(b'%PDF'))

    def test_native_canvas_backend(self):
        self.engine.get_options().set('pdf_backend', 'weasyprint')
        self.engine.load_html(SIMPLE_HTML).render()

        self.assertIsInstance(self.engine.get_canvas(), NativeCanvas)

    def test_output_before_render(self):
        with self.assertRaises(ValueError):
            self.engine.load_html(SIMPLE_HTML).output()

    def test_render_without_source(self):
        with self.assertRaises(ValueError):
            self.engine.render()


class WeasyPrintDocumentTestCase(TestCase):
    """Test PdfDocument on top of the WeasyPrint engine"""

    def setUp(self):
        if not WEASYPRINT_AVAILABLE:
            self.skipTest("WeasyPrint not available")

    def test_encryption(self):
        document = PdfDocument(WeasyPrintEngine({'pdf_backend': 'pypdf'})).load_html(SIMPLE_HTML)

        document.set_encryption('secret', 'owner', ['print'])
        reader = PdfReader(BytesIO(document.output()))

        self.assertTrue(reader.is_encrypted)
        self.assertTrue(reader.decrypt('secret'))

    def test_encryption_unsupported_with_native_canvas(self):
        document = PdfDocument(WeasyPrintEngine({'pdf_backend': 'weasyprint'})).load_html(SIMPLE_HTML)

        with self.assertRaises(UnsupportedCapability):
            document.set_encryption('secret')

    def test_warnings_escalated(self):
        document = PdfDocument(WeasyPrintEngine(), show_warnings=True)
        document.load_html('<p style="colour: red">Hello</p>')

        with self.assertRaises(RenderWarning) as ctx:
            document.render()

        self.assertIn('colour', str(ctx.exception))

    def test_arabic_document(self):
        document = PdfDocument(WeasyPrintEngine()).load_html('<p dir="rtl">مرحبا بالعالم</p>')

        self.assertTrue(document.output().startswith(b'%PDF'))


@override_settings(PDFDOC={})
class PrintingSmokeTestCase(TestCase):
    """
    Smoke tests for the complete pipeline.

    These tests verify that PDFs are generated from the shipped base
    template through the default service.
    """

    def setUp(self):
        if not WEASYPRINT_AVAILABLE:
            self.skipTest("WeasyPrint not available")

    def test_smoke_base_template(self):
        """Smoke test: Generate a multi-page PDF from pdfdoc/base.html"""
        html = """
        {% extends "pdfdoc/base.html" %}
        {% block title %}Multi-Page Test{% endblock %}
        {% block content %}
        <h1>Multi-Page Document Test</h1>
        {% for i in items %}
        <div class="keep-together">
            <h2>Section {{ i }}</h2>
            <p>Lorem ipsum dolor sit amet, consectetur adipiscing elit. Price: {{ i }}€</p>
        </div>
        {% endfor %}
        {% endblock %}
        """
        templates = [{
            'BACKEND': 'django.template.backends.django.DjangoTemplates',
            'OPTIONS': {
                'loaders': [
                    ('django.template.loaders.locmem.Loader', {'smoke.html': html}),
                    'django.template.loaders.app_directories.Loader',
                ],
            },
        }]

        with override_settings(TEMPLATES=templates):
            document = PdfRenderService().load_view('smoke.html', {'items': range(1, 60)})
            document.add_info({'Title': 'Smoke'})
            pdf_bytes = document.output()

        self.assertTrue(pdf_bytes.startswith(b'%PDF'))
        self.assertGreater(len(document.get_engine().get_document().pages), 1)
