import apps.payments.models
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('payments', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='payment',
            name='transaction_code',
            field=models.CharField(
                default=apps.payments.models.generate_transaction_code,
                editable=False, max_length=32, unique=True,
            ),
        ),
    ]
