"""Owner API forms.
 - BillForm: room choices restricted to the landlord's own rooms
"""
from django import forms
from django.contrib.auth import get_user_model

from apps.accounts.models import Role
from apps.bills.models import Bill
from apps.rooms.models import Contract, Room

User = get_user_model()


class BillForm(forms.ModelForm):
    class Meta:
        model  = Bill
        fields = [
            'room', 'tenant', 'contract', 'billing_month',
            'room_charge', 'electricity_charge', 'water_charge', 'service_charge',
            'due_date', 'notes',
        ]

    def __init__(self, *args, landlord=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['room'].queryset = Room.objects.filter(landlord=landlord)
        self.fields['tenant'].queryset = User.objects.filter(profile__role=Role.TENANT)
        self.fields['contract'].queryset = Contract.objects.filter(room__landlord=landlord)

    def clean_billing_month(self):
        month = self.cleaned_data['billing_month']
        return month.replace(day=1) if month else month

    def clean(self):
        cleaned = super().clean()
        contract = cleaned.get('contract')
        if contract and cleaned.get('room') and contract.room_id != cleaned['room'].pk:
            self.add_error('contract', 'Contract does not belong to this room.')
        return cleaned
