from django.contrib import admin, messages
from .models import Payment, PaymentMethod, PaymentStatusLog


class PaymentStatusLogInline(admin.TabularInline):
    model = PaymentStatusLog
    extra = 0
    readonly_fields = ['from_status', 'to_status', 'source', 'response_code', 'changed_at']
    can_delete = False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        'transaction_code', 'bill', 'user', 'total_amount', 'payment_method', 'status',
        'payment_date', 'created_at',
    ]
    list_filter = ['status', 'payment_method']
    search_fields = ['transaction_code', 'user__username', 'bill__room__room_number']
    readonly_fields = [
        'id', 'transaction_code', 'status', 'payment_date', 'created_at', 'updated_at',
    ]
    inlines = [PaymentStatusLogInline]
    actions = ['mark_cash_received']
    fieldsets = (
        ('Payment', {'fields': ('id', 'bill', 'user', 'contract', 'total_amount', 'payment_method')}),
        ('Gateway', {'fields': ('transaction_code', 'status', 'payment_date')}),
        ('Audit', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    @admin.action(description='Mark selected payments as completed (cash / bank transfer received)')
    def mark_cash_received(self, request, queryset):
        completed = 0
        for payment in queryset:
            if payment.mark_completed(source='admin', response_code=''):
                completed += 1
        self.message_user(request, f'{completed} payment(s) marked completed.', messages.SUCCESS)

    def get_changeform_initial_data(self, request):
        # Payments added by hand are offline settlements
        initial = super().get_changeform_initial_data(request)
        initial.setdefault('payment_method', PaymentMethod.CASH)
        return initial
