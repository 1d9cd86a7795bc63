import logging
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.expenses.models import Expense
from backend.invoicing.models import Invoice
from backend.jobs.models import LogisticsJob
from backend.parties.models import Client

logger = logging.getLogger(__name__)

CHART_COLORS = ['#ef4444', '#3b82f6', '#f59e0b', '#10b981', '#8b5cf6', '#06b6d4', '#f97316', '#84cc16']
RECENT_LIMIT = 4
MAX_EXPENSE_CATEGORIES = 8


def month_start(today, months_back):
    """First day of the month ``months_back`` months before ``today``'s month"""
    year, month = today.year, today.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


def sales_by_day(paid_invoices, today, days=7):
    """Paid invoice totals per invoice date for the last ``days`` days, zero-filled"""
    start = today - timedelta(days=days - 1)
    totals = {
        row['invoice_date']: row['total']
        for row in paid_invoices.filter(invoice_date__gte=start, invoice_date__lte=today)
        .values('invoice_date').annotate(total=Sum('total'))
    }
    result = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        result.append({
            'date': f"{day:%b} {day.day}",
            'value': totals.get(day) or Decimal('0.00'),
        })
    return result


def sales_by_month(paid_invoices, today, months=6):
    start = month_start(today, months - 1)
    totals = {}
    rows = (
        paid_invoices.filter(invoice_date__gte=start, invoice_date__lte=today)
        .annotate(month=TruncMonth('invoice_date'))
        .values('month').annotate(total=Sum('total'))
    )
    for row in rows:
        month = row['month']
        totals[(month.year, month.month)] = row['total']
    result = []
    for back in range(months - 1, -1, -1):
        first = month_start(today, back)
        result.append({
            'month': f"{first:%b}",
            'value': totals.get((first.year, first.month)) or Decimal('0.00'),
        })
    return result


def expenses_by_category(expenses):
    """Expense share per title (upper-cased), largest first, top 8"""
    categories = {}
    for expense in expenses:
        category = (expense.title or 'Other').upper()
        categories[category] = categories.get(category, Decimal('0.00')) + expense.amount
    grand_total = sum(categories.values(), Decimal('0.00'))

    chart = []
    for index, (category, amount) in enumerate(categories.items()):
        chart.append({
            'category': category,
            'value': round(amount / grand_total * 100) if grand_total > 0 else 0,
            'amount': amount,
            'color': CHART_COLORS[index % len(CHART_COLORS)],
        })
    chart.sort(key=lambda item: item['amount'], reverse=True)
    return chart[:MAX_EXPENSE_CATEGORIES]


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Back-office dashboard: headline metrics, recent activity and chart series"""
    today = timezone.localdate()
    paid_invoices = Invoice.objects.filter(status='PAID').order_by()

    total_revenue = paid_invoices.aggregate(total=Sum('total'))['total'] or Decimal('0.00')
    total_expenses = Expense.objects.aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    metrics = {
        'total_clients': Client.objects.count(),
        'total_invoices': Invoice.objects.count(),
        'open_invoices': Invoice.objects.exclude(status='PAID').count(),
        'total_jobs': LogisticsJob.objects.count(),
        'active_jobs': LogisticsJob.objects.exclude(status__in=['DELIVERED', 'CANCELLED']).count(),
        'total_revenue': total_revenue,
        'total_expenses': total_expenses,
        'net_revenue': total_revenue - total_expenses,
    }

    recent_jobs = [
        {
            'id': job.id,
            'job_number': job.job_number,
            'title': job.title,
            'client_name': job.client.name if job.client_id else 'Unknown Client',
            'status': job.status,
        }
        for job in LogisticsJob.objects.select_related('client').order_by('-created_at')[:RECENT_LIMIT]
    ]
    recent_invoices = [
        {
            'id': invoice.id,
            'number': invoice.number,
            'client_name': invoice.client.name if invoice.client_id else 'Unknown Client',
            'total': invoice.total,
            'currency': invoice.currency,
            'status': invoice.status,
        }
        for invoice in Invoice.objects.select_related('client').order_by('-created_at')[:RECENT_LIMIT]
    ]

    charts = {
        'sales_last_7_days': sales_by_day(paid_invoices, today),
        'sales_last_6_months': sales_by_month(paid_invoices, today),
        'expenses_by_category': expenses_by_category(Expense.objects.only('title', 'amount')),
    }

    logger.debug(f"Dashboard compiled for user {request.user.id}: {metrics}")
    return Response({
        'metrics': metrics,
        'recent_jobs': recent_jobs,
        'recent_invoices': recent_invoices,
        'charts': charts,
        'generated_at': timezone.now().isoformat(),
        'success': True,
    })
