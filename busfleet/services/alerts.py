# busfleet/services/alerts.py
from __future__ import annotations

import html
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any, Dict, List, Optional, Tuple

from busfleet.core.config import Settings, get_settings
from busfleet.core.enums import DOC_TYPE_LABELS

log = logging.getLogger("busfleet.alerts")


def _label(doc_type: str) -> str:
    return DOC_TYPE_LABELS.get(doc_type, doc_type)


def _status_text(days_left: int) -> str:
    if days_left <= 0:
        return f"VENCIDO hace {abs(days_left)} días"
    return f"{days_left} días restantes"


def smtp_configured(settings: Settings) -> bool:
    return bool(
        settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASS and settings.ALERT_EMAIL_TO
    )


def render_expiry_alert(docs: List[Dict[str, Any]]) -> Tuple[str, str, str]:
    """Return (subject, text_body, html_body) for a list from get_expiring_documents."""
    expired = [d for d in docs if d["days_left"] <= 0]
    expiring = [d for d in docs if d["days_left"] > 0]

    subject = f"{len(docs)} documento(s) por vencer o vencidos"

    lines = [f"Se detectaron {len(docs)} documento(s) que requieren atención.", ""]
    for d in docs:
        who = f" ({d['driver_name']})" if d.get("driver_name") else ""
        lines.append(
            f"Bus {d['bus_number']} - {_label(d['doc_type'])}{who}: "
            f"{d['file_name']} - {_status_text(d['days_left'])}"
        )
    text_body = "\n".join(lines)

    def _table(title: str, rows: List[Dict[str, Any]], last_col: str) -> str:
        if not rows:
            return ""
        body = "".join(
            "<tr>"
            f"<td>Bus {html.escape(str(r['bus_number']))}</td>"
            f"<td>{html.escape(_label(r['doc_type']))}</td>"
            f"<td>{html.escape(r['file_name'])}</td>"
            f"<td>{html.escape(_status_text(r['days_left']))}</td>"
            "</tr>"
            for r in rows
        )
        return (
            f"<h3>{title} ({len(rows)})</h3>"
            "<table border='1' cellpadding='6' style='border-collapse:collapse'>"
            f"<tr><th>Bus</th><th>Documento</th><th>Archivo</th><th>{last_col}</th></tr>"
            f"{body}</table>"
        )

    html_body = (
        "<h2>Alerta de Documentos por Vencer</h2>"
        f"<p>Se detectaron <strong>{len(docs)}</strong> documento(s) que requieren atención:</p>"
        + _table("Documentos Vencidos", expired, "Venció")
        + _table("Próximos a Vencer", expiring, "Vence en")
    )
    return subject, text_body, html_body


def _send(settings: Settings, msg: EmailMessage) -> None:
    host = settings.SMTP_HOST or ""
    port = settings.SMTP_PORT
    timeout = settings.SMTP_TIMEOUT_SEC
    if port == 465:
        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(host, port, timeout=timeout, context=context) as s:
            s.login(settings.SMTP_USER, settings.SMTP_PASS)
            s.send_message(msg)
        return

    with smtplib.SMTP(host, port, timeout=timeout) as s:
        s.ehlo()
        # STARTTLS only if the server announces it
        if s.has_extn("starttls"):
            s.starttls(context=ssl.create_default_context())
            s.ehlo()
        s.login(settings.SMTP_USER, settings.SMTP_PASS)
        s.send_message(msg)


def send_expiry_alert(docs: List[Dict[str, Any]], settings: Optional[Settings] = None) -> bool:
    """
    Deliver the expiry alert. Without SMTP settings the list is only logged.
    Returns True when an email was handed to the server.
    """
    if not docs:
        return False
    settings = settings or get_settings()

    if not smtp_configured(settings):
        log.warning("SMTP not configured; %d document(s) need attention:", len(docs))
        for d in docs:
            log.warning(
                "  bus %s - %s: %s - %s",
                d["bus_number"],
                _label(d["doc_type"]),
                d["file_name"],
                _status_text(d["days_left"]),
            )
        return False

    subject, text_body, html_body = render_expiry_alert(docs)
    msg = EmailMessage()
    msg["From"] = settings.SMTP_USER
    msg["To"] = settings.ALERT_EMAIL_TO
    msg["Subject"] = subject
    msg.set_content(text_body)
    msg.add_alternative(html_body, subtype="html")

    try:
        _send(settings, msg)
    except (smtplib.SMTPException, OSError):
        log.exception("failed to send expiry alert to %s", settings.ALERT_EMAIL_TO)
        return False

    log.info("expiry alert sent to %s (%d documents)", settings.ALERT_EMAIL_TO, len(docs))
    return True
