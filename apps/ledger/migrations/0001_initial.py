# Generated manually for the coffee ledger

from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Member',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=255, unique=True)),
                ('current_tab', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('pending_payment', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('account_balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('last_payment_request', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('deleted', 'Deleted')], default='active', max_length=10)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'members',
                'ordering': ['last_name', 'first_name'],
                'indexes': [
                    models.Index(fields=['last_name', 'first_name'], name='members_last_na_6c2e1f_idx'),
                    models.Index(fields=['status'], name='members_status_3b8a0d_idx'),
                    models.Index(fields=['pending_payment'], name='members_pending_9f1c2a_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('current_tab__gte', 0)), name='members_current_tab_non_negative'),
                    models.CheckConstraint(condition=models.Q(('pending_payment__gte', 0)), name='members_pending_payment_non_negative'),
                    models.CheckConstraint(condition=models.Q(models.Q(('status', 'active'), ('deleted_at__isnull', True)), models.Q(('status', 'deleted'), ('deleted_at__isnull', False)), _connector='OR'), name='members_status_matches_deleted_at'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.01'))])),
                ('type', models.CharField(choices=[('request', 'Request'), ('received', 'Received')], max_length=10)),
                ('confirmed_by_admin', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('idempotency_key', models.CharField(blank=True, max_length=64, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='ledger.member')),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['member', 'created_at'], name='payments_member__1d4e7b_idx'),
                    models.Index(fields=['type'], name='payments_type_8a2f3c_idx'),
                    models.Index(fields=['created_at'], name='payments_created_5e9b1d_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='payments_amount_positive'),
                    models.UniqueConstraint(condition=models.Q(('idempotency_key__isnull', False)), fields=('member', 'idempotency_key'), name='payments_member_idempotency_key_unique'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('increment', 'Increment'), ('decrement', 'Decrement'), ('payment_request', 'Payment request'), ('payment_received', 'Payment received'), ('balance_adjustment', 'Balance adjustment'), ('soft_delete', 'Soft delete'), ('restore', 'Restore'), ('hard_delete', 'Hard delete'), ('user_created', 'User created')], max_length=20)),
                ('old_value', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('new_value', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('performed_by', models.CharField(choices=[('user', 'User'), ('admin', 'Admin'), ('system', 'System')], default='user', max_length=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('member', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='audit_entries', to='ledger.member')),
            ],
            options={
                'db_table': 'audit_log',
                'ordering': ['-created_at', '-id'],
                'verbose_name_plural': 'audit entries',
                'indexes': [
                    models.Index(fields=['member', 'created_at'], name='audit_log_member__7c3d2e_idx'),
                    models.Index(fields=['action'], name='audit_log_action_4f6a8b_idx'),
                ],
            },
        ),
    ]
