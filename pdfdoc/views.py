"""
Class-based views rendering their template as a PDF.
"""

from django.views.generic import TemplateView

from .service import PdfRenderService


class PdfTemplateView(TemplateView):
    """
    TemplateView whose response is a PDF instead of HTML.

    Usage:
        class InvoicePdfView(PdfTemplateView):
            template_name = 'invoices/detail.html'
            pdf_filename = 'invoice.pdf'
            pdf_attachment = True
    """

    pdf_filename = 'document.pdf'
    pdf_attachment = False
    pdf_options = None
    pdf_service_class = PdfRenderService

    def get_pdf_filename(self) -> str:
        return self.pdf_filename

    def get_pdf_options(self) -> dict:
        """Options applied on top of PDFDOC['OPTIONS'] for this view"""
        options = dict(self.pdf_options or {})
        options.setdefault('base_url', self.request.build_absolute_uri('/'))
        return options

    def render_to_response(self, context, **response_kwargs):
        document = self.pdf_service_class().make()
        document.set_option(self.get_pdf_options())
        document.load_view(self.get_template_names()[0], context, request=self.request)

        if self.pdf_attachment:
            return document.download(self.get_pdf_filename())
        return document.stream(self.get_pdf_filename())
