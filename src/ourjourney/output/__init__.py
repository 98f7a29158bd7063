"""Output helpers (workbook template)."""

from ourjourney.output.template import generate_template, template_headers

__all__ = ["generate_template", "template_headers"]
