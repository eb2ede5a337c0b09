"""
PDF statement of a policyholder's policies and claims.
"""
from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Iterable, Optional

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from insurance_client.schemas.insurance_schema import ClaimView, PolicyView


_TABLE_STYLE = TableStyle([
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2563eb')),
    ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
    ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('FONTSIZE', (0, 0), (-1, -1), 9),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
    ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
])


def build_statement_pdf(
    account: str,
    policies: Iterable[PolicyView],
    claims: Iterable[ClaimView],
    *,
    currency_symbol: str = "ETH",
    generated_at: Optional[datetime] = None,
) -> bytes:
    """
    Render a one-document statement for `account`.

    Args:
        account: Policyholder address shown in the header.
        policies: Policies held by the account.
        claims: Claims filed against those policies.
        currency_symbol: Unit shown next to every amount.
        generated_at: Timestamp printed on the statement (defaults to now).

    Returns:
        The PDF file contents.
    """
    generated_at = generated_at or datetime.now()
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=(8.5 * inch, 11 * inch))
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'StatementTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.HexColor('#2563eb'),
        spaceAfter=20,
        alignment=1,
    )

    elements = [
        Paragraph("Policy Statement", title_style),
        Paragraph(f"<b>Account:</b> {account}", styles['Normal']),
        Paragraph(f"<b>Generated:</b> {generated_at:%Y-%m-%d %H:%M:%S}", styles['Normal']),
        Spacer(1, 0.3 * inch),
        Paragraph("Policies", styles['Heading3']),
        Spacer(1, 0.1 * inch),
    ]

    policy_rows = [['Policy', f'Premium ({currency_symbol})', f'Coverage ({currency_symbol})', 'Status']]
    for policy in policies:
        policy_rows.append([
            f"#{policy.policy_id}",
            policy.premium,
            policy.coverage,
            "Active" if policy.active else "Inactive",
        ])
    if len(policy_rows) == 1:
        elements.append(Paragraph("No policies found.", styles['Normal']))
    else:
        table = Table(policy_rows, colWidths=[1.2 * inch, 1.8 * inch, 1.8 * inch, 1.4 * inch])
        table.setStyle(_TABLE_STYLE)
        elements.append(table)

    elements += [Spacer(1, 0.3 * inch), Paragraph("Claims", styles['Heading3']), Spacer(1, 0.1 * inch)]

    claim_rows = [['Claim', 'Policy', f'Amount ({currency_symbol})', 'Status']]
    for claim in claims:
        claim_rows.append([f"#{claim.claim_id}", f"#{claim.policy_id}", claim.amount, claim.status.value])
    if len(claim_rows) == 1:
        elements.append(Paragraph("No claims found.", styles['Normal']))
    else:
        table = Table(claim_rows, colWidths=[1.2 * inch, 1.2 * inch, 1.8 * inch, 1.8 * inch])
        table.setStyle(_TABLE_STYLE)
        elements.append(table)

    doc.build(elements)
    return buffer.getvalue()


__all__ = ["build_statement_pdf"]
