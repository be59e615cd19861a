# Generated manually for kiosk settings

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Setting',
            fields=[
                ('key', models.CharField(choices=[('coffee_price', 'Coffee price'), ('admin_email', 'Admin email'), ('bank_iban', 'Bank IBAN'), ('bank_bic', 'Bank BIC'), ('bank_owner', 'Bank account owner')], max_length=50, primary_key=True, serialize=False)),
                ('value', models.TextField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'settings',
                'ordering': ['key'],
            },
        ),
    ]
