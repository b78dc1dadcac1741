from django.contrib import admin
from .models import Bill


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ['room', 'tenant', 'billing_month', 'total_amount', 'due_date', 'paid']
    list_filter = ['billing_month']
    search_fields = ['room__room_number', 'tenant__username']
    readonly_fields = ['id', 'total_amount', 'created_at', 'updated_at']
    date_hierarchy = 'billing_month'

    def paid(self, obj):
        return obj.is_paid
    paid.boolean = True
