import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('rooms', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('billing_month', models.DateField(help_text='First day of the billed month')),
                ('room_charge', models.PositiveIntegerField(default=0)),
                ('electricity_charge', models.PositiveIntegerField(default=0)),
                ('water_charge', models.PositiveIntegerField(default=0)),
                ('service_charge', models.PositiveIntegerField(default=0)),
                ('total_amount', models.PositiveIntegerField(default=0, editable=False)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('contract', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bills', to='rooms.contract')),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bills', to='rooms.room')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bills', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Bill',
                'verbose_name_plural': 'Bills',
                'ordering': ['-billing_month', 'room__room_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('room', 'billing_month'), name='uq_bill_room_month'),
                ],
            },
        ),
    ]
