"""Localized description templates for reported differences."""
from __future__ import annotations

from typing import Dict

DEFAULT_LOCALE = "en"

CATALOG: Dict[str, Dict[str, str]] = {
    "en": {
        "spacing": "Spacing differs by {delta}px (reference {reference}px, implementation {candidate}px)",
        "margin_left": "Left margin differs by {delta}px (reference {reference}px, implementation {candidate}px)",
        "margin_right": "Right margin differs by {delta}px (reference {reference}px, implementation {candidate}px)",
        "color": "Color differs: {reference} in the reference, {candidate} in the implementation",
        "vision_default": "Difference detected",
        "priority_high": "High priority",
        "priority_medium": "Medium priority",
        "priority_low": "Low priority",
        "report_title": "Design Differences Report",
        "report_summary": "Summary of differences",
        "report_comments": "Comments:",
        "report_empty": "No differences detected.",
        "report_footer": "Generated on {timestamp}",
    },
    "es": {
        "spacing": "El espaciado difiere en {delta}px (diseño {reference}px, implementación {candidate}px)",
        "margin_left": "El margen izquierdo difiere en {delta}px (diseño {reference}px, implementación {candidate}px)",
        "margin_right": "El margen derecho difiere en {delta}px (diseño {reference}px, implementación {candidate}px)",
        "color": "El color difiere: {reference} en el diseño, {candidate} en la implementación",
        "vision_default": "Diferencia detectada",
        "priority_high": "Alta prioridad",
        "priority_medium": "Prioridad media",
        "priority_low": "Baja prioridad",
        "report_title": "Reporte de Diferencias de Diseño",
        "report_summary": "Resumen de Diferencias",
        "report_comments": "Comentarios:",
        "report_empty": "No se detectaron diferencias.",
        "report_footer": "Generado el {timestamp}",
    },
}


def message(key: str, locale: str = DEFAULT_LOCALE, **values: object) -> str:
    table = CATALOG.get(locale) or CATALOG.get(locale.split("-")[0]) or CATALOG[DEFAULT_LOCALE]
    template = table.get(key, CATALOG[DEFAULT_LOCALE][key])
    return template.format(**values)
