"""
Seed management command.

Populates the database with demo data for local development:
  - 1 owner account + 1 boarding house
  - 6 rooms (2 occupied)
  - 2 tenant accounts, each with an active contract and this month's bill

Usage:
    python manage.py seed_data
    python manage.py seed_data --flush   # wipe and re-seed
"""
from datetime import date
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from apps.accounts.models import Profile, Role
from apps.bills.models import Bill
from apps.payments.models import Payment
from apps.rooms.models import BoardingHouse, Contract, Room

User = get_user_model()

DEMO_PASSWORD = 'demo-pass-123'


class Command(BaseCommand):
    help = 'Seed a demo owner, boarding house, rooms, tenants, contracts and bills'

    def add_arguments(self, parser):
        parser.add_argument(
            '--flush', action='store_true',
            help='Delete all existing demo data before creating fresh records',
        )

    def _user(self, username, full_name, role):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={'email': f'{username}@example.com', 'first_name': full_name},
        )
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save(update_fields=['password'])
        Profile.objects.get_or_create(user=user, defaults={'role': role})
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        if options['flush']:
            self.stdout.write('Flushing existing data...')
            Payment.objects.all().delete()
            Bill.objects.all().delete()
            Contract.objects.all().delete()
            Room.all_objects.all().hard_delete()
            BoardingHouse.all_objects.all().hard_delete()

        self.stdout.write('Seeding accounts...')
        owner = self._user('owner', 'Nguyễn Văn Chủ', Role.OWNER)
        tenants = [
            self._user('tenant1', 'Trần Thị Thuê', Role.TENANT),
            self._user('tenant2', 'Lê Văn Ở', Role.TENANT),
        ]
        self.stdout.write(self.style.SUCCESS('  ✔ 1 owner, 2 tenants'))

        self.stdout.write('Seeding rooms...')
        house, _ = BoardingHouse.objects.get_or_create(
            landlord=owner, name='Nhà trọ Hoa Sen',
            defaults={'address': '12 Nguyễn Trãi, Thanh Xuân, Hà Nội'},
        )
        rooms = []
        for n in range(1, 7):
            room, _ = Room.objects.get_or_create(
                boarding_house=house, room_number=f'P10{n}',
                defaults={'landlord': owner, 'price': 1_800_000 + n * 100_000},
            )
            rooms.append(room)
        self.stdout.write(self.style.SUCCESS(f'  ✔ {len(rooms)} rooms'))

        self.stdout.write('Seeding contracts and bills...')
        this_month = date.today().replace(day=1)
        for tenant, room in zip(tenants, rooms):
            room.assign_tenant(tenant)
            contract, _ = Contract.objects.get_or_create(
                room=room, tenant=tenant,
                defaults={'start_date': this_month, 'monthly_rent': room.price, 'deposit': room.price},
            )
            Bill.objects.get_or_create(
                room=room, billing_month=this_month,
                defaults={
                    'tenant': tenant,
                    'contract': contract,
                    'room_charge': room.price,
                    'electricity_charge': 350_000,
                    'water_charge': 100_000,
                    'service_charge': 50_000,
                },
            )
        self.stdout.write(self.style.SUCCESS(f'  ✔ {len(tenants)} contracts and bills'))

        self.stdout.write(self.style.SUCCESS(f'\n✅ Seed complete! Log in as owner / {DEMO_PASSWORD}'))
