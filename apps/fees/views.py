# fees/views.py

"""
File downloads: invoice PDF and collection report workbook.
"""

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods
from io import BytesIO
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.enums import TA_CENTER

from academics.models import get_session_name
from core.responses import result_response
from core.utils import format_money
from utils.utils import parse_filters
from .services import generate_student_invoice
from .stats import generate_collection_report

logger = logging.getLogger(__name__)

HEADER_COLOR = '#1F6E43'


# =============================================================================
# INVOICE PDF
# =============================================================================

@login_required
@require_http_methods(["GET"])
def invoice_pdf(request, student_id):
    """
    Term invoice as PDF.

    Query: academic_year, session, term
    """
    filters = parse_filters(request, ['academic_year', 'session', 'term'])
    result = generate_student_invoice({'student_id': student_id, **filters})
    if not result:
        return result_response(result)

    invoice = result.data
    student = invoice.get_student_details()

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=40,
        leftMargin=40,
        topMargin=40,
        bottomMargin=30,
    )

    elements = []
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=colors.HexColor(HEADER_COLOR),
        spaceAfter=6,
        alignment=TA_CENTER,
    )
    subtitle_style = ParagraphStyle(
        'InvoiceSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=16,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph(settings.INSTITUTION_NAME, title_style))
    elements.append(Paragraph(f"FEE INVOICE - {invoice.invoice_number}", subtitle_style))

    details = [
        ['Student:', student['name'], 'Invoice Date:', invoice.invoice_date.strftime('%d %b %Y')],
        ['Admission No:', student['admission_number'], 'Due Date:', invoice.due_date.strftime('%d %b %Y')],
        ['Programme:', student['programme'], 'Academic Year:', invoice.academic_year],
        ['Class:', student['class'] or '', 'Session / Term:',
         f"{get_session_name(invoice.session)} / {invoice.term}"],
    ]
    details_table = Table(details, colWidths=[1.1*inch, 2.4*inch, 1.2*inch, 1.8*inch])
    details_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(details_table)
    elements.append(Spacer(1, 0.3*inch))

    # Voteheads
    data = [['#', 'Votehead', 'Amount']]
    for idx, item in enumerate(invoice.items, start=1):
        data.append([str(idx), item.votehead, format_money(item.amount)])
    data.append(['', 'Subtotal', format_money(invoice.subtotal)])
    data.append(['', 'Total Paid (session)', format_money(invoice.total_paid)])
    data.append(['', 'Balance', format_money(invoice.balance)])

    items_table = Table(data, colWidths=[0.5*inch, 3.8*inch, 2.2*inch])
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(HEADER_COLOR)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('ALIGN', (2, 0), (2, -1), 'RIGHT'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -4), [colors.white, colors.HexColor('#F5F5F5')]),
        ('FONTNAME', (1, -3), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -3), (-1, -3), 1, colors.black),
        ('GRID', (0, 0), (-1, -4), 0.5, colors.grey),
    ]))
    elements.append(items_table)

    elements.append(Spacer(1, 0.3*inch))
    elements.append(Paragraph(
        "Payments shown are all completed payments for the session. "
        "Please quote the invoice number when paying.",
        styles['Italic'],
    ))

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()

    response = HttpResponse(content_type='application/pdf')
    filename = f"invoice_{invoice.invoice_number.replace('/', '_')}.pdf"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response.write(pdf)

    return response


# =============================================================================
# COLLECTION REPORT EXCEL
# =============================================================================

@login_required
@require_http_methods(["GET"])
def collection_report_excel(request):
    """
    Completed payments workbook.

    Query: academic_year, session, department_id, programme_id, class_id,
    date_from, date_to
    """
    filters = parse_filters(request, [
        'academic_year', 'session', 'department_id', 'programme_id',
        'class_id', 'date_from', 'date_to',
    ])
    result = generate_collection_report(filters)
    if not result:
        return result_response(result)

    report = result.data
    summary = report['summary']

    wb = Workbook()
    ws = wb.active
    ws.title = "Collections"

    header_fill = PatternFill(start_color="1F6E43", end_color="1F6E43", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=11)
    header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    border_style = Border(
        left=Side(style='thin', color='000000'),
        right=Side(style='thin', color='000000'),
        top=Side(style='thin', color='000000'),
        bottom=Side(style='thin', color='000000')
    )

    ws.merge_cells('A1:H1')
    title_cell = ws['A1']
    title_cell.value = f"{settings.INSTITUTION_NAME} - Fee Collection Report"
    title_cell.font = Font(bold=True, size=14, color="1F6E43")
    title_cell.alignment = Alignment(horizontal="center")

    ws.merge_cells('A2:H2')
    subtitle_cell = ws['A2']
    subtitle_cell.value = f"Generated on: {timezone.localtime().strftime('%Y-%m-%d %H:%M')}"
    subtitle_cell.font = Font(size=10, italic=True)
    subtitle_cell.alignment = Alignment(horizontal="center")

    ws.append([])

    headers = [
        '#', 'Date', 'Transaction Ref', 'Admission No', 'Student',
        'Programme', 'Method', 'Amount',
    ]
    ws.append(headers)
    for cell in ws[4]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment
        cell.border = border_style

    for idx, payment in enumerate(report['payments'], start=1):
        ws.append([
            idx,
            timezone.localtime(payment.payment_date).strftime('%Y-%m-%d'),
            payment.transaction_ref,
            payment.student.admission_number,
            payment.student.invoice_name,
            payment.student.programme.name,
            payment.get_payment_method_display(),
            float(payment.amount_paid),
        ])
        for cell in ws[ws.max_row]:
            cell.border = border_style
        ws.cell(row=ws.max_row, column=8).number_format = '#,##0.00'

    column_widths = {'A': 5, 'B': 12, 'C': 20, 'D': 16, 'E': 25, 'F': 25, 'G': 15, 'H': 15}
    for col, width in column_widths.items():
        ws.column_dimensions[col].width = width

    summary_row = ws.max_row + 2
    ws[f'A{summary_row}'] = 'Total Collected:'
    ws[f'C{summary_row}'] = format_money(summary['total_collected'])
    ws[f'A{summary_row + 1}'] = 'Transactions:'
    ws[f'C{summary_row + 1}'] = summary['total_transactions']
    ws[f'A{summary_row}'].font = Font(bold=True)
    ws[f'A{summary_row + 1}'].font = Font(bold=True)

    # Breakdown sheet
    breakdown = wb.create_sheet("By Method")
    breakdown.append(['Payment Method', 'Amount'])
    for cell in breakdown[1]:
        cell.fill = header_fill
        cell.font = header_font
    for method, amount in summary['by_payment_method'].items():
        breakdown.append([method, float(amount)])
    breakdown.column_dimensions['A'].width = 20
    breakdown.column_dimensions['B'].width = 15

    ws.freeze_panes = 'A5'

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    filename = f"fee_collections_{timezone.localtime().strftime('%Y%m%d_%H%M%S')}.xlsx"
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    wb.save(response)

    return response
