"""
Owner (landlord) API: rooms, tenants, bills and income reports.
Every view is scoped to the rooms the logged-in owner holds.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db.models import Count, Exists, OuterRef, Sum
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.accounts.decorators import owner_required
from apps.accounts.models import Role
from apps.bills.models import Bill
from apps.core.http import request_data
from apps.payments.models import Payment, PaymentStatus
from apps.rooms.models import BoardingHouse, Room, RoomStatus

from .forms import BillForm

logger = logging.getLogger(__name__)

User = get_user_model()


def _lookup(queryset, pk):
    """Row by primary key, or None for a missing or malformed id."""
    if pk in (None, ''):
        return None
    try:
        return queryset.filter(pk=pk).first()
    except (ValidationError, ValueError, TypeError):
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Serialisers
# ─────────────────────────────────────────────────────────────────────────────

def _user_dict(user):
    if user is None:
        return None
    return {
        'id': user.pk,
        'username': user.get_username(),
        'fullName': user.get_full_name(),
        'email': user.email,
    }


def _room_dict(room):
    house = room.boarding_house
    return {
        'id': str(room.id),
        'roomNumber': room.room_number,
        'price': room.price,
        'area': str(room.area) if room.area is not None else None,
        'status': room.status,
        'tenant': _user_dict(room.tenant),
        'boardingHouse': {'id': str(house.id), 'name': house.name} if house else None,
    }


def _bill_dict(bill):
    return {
        'id': str(bill.id),
        'room': {'id': str(bill.room_id), 'roomNumber': bill.room.room_number},
        'tenant': _user_dict(bill.tenant),
        'contractId': str(bill.contract_id) if bill.contract_id else None,
        'billingMonth': bill.billing_month.isoformat(),
        'roomCharge': bill.room_charge,
        'electricityCharge': bill.electricity_charge,
        'waterCharge': bill.water_charge,
        'serviceCharge': bill.service_charge,
        'totalAmount': bill.total_amount,
        'dueDate': bill.due_date.isoformat() if bill.due_date else None,
        'notes': bill.notes,
        'isPaid': bill.is_paid_flag if hasattr(bill, 'is_paid_flag') else bill.is_paid,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Rooms
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@owner_required
def manage_rooms(request):
    rooms = list(
        Room.objects
        .filter(landlord=request.user)
        .select_related('tenant', 'boarding_house')
    )
    stats = {
        'total':     len(rooms),
        'available': sum(1 for r in rooms if r.status == RoomStatus.AVAILABLE),
        'occupied':  sum(1 for r in rooms if r.status == RoomStatus.OCCUPIED),
    }
    return JsonResponse({'rooms': [_room_dict(r) for r in rooms], 'roomStats': stats})


# ─────────────────────────────────────────────────────────────────────────────
# Tenants
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@owner_required
def list_tenants(request):
    tenants = User.objects.filter(profile__role=Role.TENANT, is_active=True).order_by('username')
    return JsonResponse({'tenants': [_user_dict(t) for t in tenants]})


@require_POST
@owner_required
def assign_tenant(request):
    data = request_data(request)
    tenant = _lookup(User.objects.filter(profile__role=Role.TENANT), data.get('tenant_id'))
    if tenant is None:
        return JsonResponse({'message': 'Tenant not found'}, status=404)

    room = _lookup(Room.objects.filter(landlord=request.user), data.get('room_id'))
    if room is None:
        return JsonResponse({'message': 'Room not found'}, status=404)
    if room.status == RoomStatus.OCCUPIED and room.tenant_id != tenant.pk:
        return JsonResponse({'message': 'Room is already occupied'}, status=409)

    room.assign_tenant(tenant)
    logger.info('Owner %s assigned tenant %s to room %s', request.user.pk, tenant.pk, room.pk)
    return JsonResponse(_room_dict(room))


@require_POST
@owner_required
def remove_tenant(request):
    room = _lookup(Room.objects.filter(landlord=request.user), request_data(request).get('room_id'))
    if room is None:
        return JsonResponse({'message': 'Room not found'}, status=404)
    room.release_tenant()
    logger.info('Owner %s released room %s', request.user.pk, room.pk)
    return JsonResponse(_room_dict(room))


# ─────────────────────────────────────────────────────────────────────────────
# Bills
# ─────────────────────────────────────────────────────────────────────────────

@require_http_methods(['GET', 'POST'])
@owner_required
def bills(request):
    if request.method == 'POST':
        form = BillForm(request_data(request), landlord=request.user)
        if not form.is_valid():
            return JsonResponse({'errors': form.errors}, status=400)
        bill = form.save()
        logger.info('Owner %s created bill %s', request.user.pk, bill.pk)
        return JsonResponse(_bill_dict(bill), status=201)

    qs = (
        Bill.objects
        .filter(room__landlord=request.user)
        .select_related('room', 'tenant')
        .annotate(is_paid_flag=Exists(
            Payment.objects.filter(bill=OuterRef('pk'), status=PaymentStatus.COMPLETED)
        ))
    )
    return JsonResponse({'bills': [_bill_dict(b) for b in qs]})


@require_POST
@owner_required
def update_bill(request, bill_id):
    bill = get_object_or_404(Bill, pk=bill_id, room__landlord=request.user)
    data = model_to_dict(bill, fields=BillForm._meta.fields)
    data.update(request_data(request))

    form = BillForm(data, instance=bill, landlord=request.user)
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)
    bill = form.save()
    return JsonResponse(_bill_dict(bill))


# ─────────────────────────────────────────────────────────────────────────────
# Reports
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@owner_required
def reports(request):
    total_income = Payment.objects.filter(
        bill__room__landlord=request.user,
        status=PaymentStatus.COMPLETED,
    ).aggregate(total=Sum('total_amount'))['total'] or 0

    room_stats = list(
        Room.objects
        .filter(landlord=request.user)
        .values('status')
        .annotate(count=Count('id'))
        .order_by('status')
    )

    houses = BoardingHouse.objects.filter(landlord=request.user)
    return JsonResponse({
        'totalIncome': total_income,
        'roomStats': room_stats,
        'boardingHouses': [
            {'id': str(h.id), 'name': h.name, 'address': h.address} for h in houses
        ],
    })
