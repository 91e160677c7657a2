from django.urls import path
from .views import inventory_report, report_summary, inventory_export, supplier_export, sales_report

urlpatterns = [
    path('reports/inventory/', inventory_report, name='report-inventory'),
    path('reports/inventory/export/', inventory_export, name='report-inventory-export'),
    path('reports/suppliers/export/', supplier_export, name='report-suppliers-export'),
    path('reports/summary/', report_summary, name='report-summary'),
    path('reports/sales/', sales_report, name='report-sales'),
]
