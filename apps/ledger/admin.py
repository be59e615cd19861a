from django.contrib import admin
from django.utils.html import format_html
from .models import Member, Payment, AuditEntry, MemberStatus, PaymentType


def _badge(bg, fg, label):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, label
    )


class PaymentInline(admin.TabularInline):
    """Payment trail within a member (read-only, written by the services)."""
    model = Payment
    extra = 0
    fields = ['type', 'amount', 'confirmed_by_admin', 'notes', 'created_at']
    readonly_fields = fields
    ordering = ['-created_at', '-id']

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """
    Read-mostly view of the ledger.

    Balances change only through the settlement services (API), so every
    ledger field is read-only here.
    """

    list_display = [
        'full_name',
        'email',
        'current_tab',
        'pending_payment',
        'balance_display',
        'status_badge',
        'last_payment_request',
        'updated_at',
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['first_name', 'last_name', 'email']
    ordering = ['last_name', 'first_name']
    readonly_fields = [
        'current_tab',
        'pending_payment',
        'account_balance',
        'last_payment_request',
        'status',
        'deleted_at',
        'created_at',
        'updated_at',
    ]
    inlines = [PaymentInline]

    fieldsets = (
        ('Member', {
            'fields': ('first_name', 'last_name', 'email')
        }),
        ('Ledger', {
            'fields': ('current_tab', 'pending_payment', 'account_balance', 'last_payment_request')
        }),
        ('Lifecycle', {
            'fields': ('status', 'deleted_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        if obj.status == MemberStatus.DELETED:
            return _badge('#B85C5C', 'white', 'Deleted')
        return _badge('#6B8E5E', 'white', 'Active')
    status_badge.short_description = 'Status'

    def balance_display(self, obj):
        """Credit in green, debt in red."""
        if obj.account_balance > 0:
            color = '#6B8E5E'
        elif obj.account_balance < 0:
            color = '#B85C5C'
        else:
            color = '#666'
        return format_html('<span style="color: {};">{} €</span>', color, obj.account_balance)
    balance_display.short_description = 'Balance'
    balance_display.admin_order_field = 'account_balance'

    def has_delete_permission(self, request, obj=None):
        # Purging goes through the API so payments and audit rows go with it
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['member', 'type_badge', 'amount', 'confirmed_by_admin', 'created_at']
    list_filter = ['type', 'confirmed_by_admin', 'created_at']
    search_fields = ['member__first_name', 'member__last_name', 'member__email', 'notes']
    date_hierarchy = 'created_at'
    readonly_fields = [f.name for f in Payment._meta.fields]

    def type_badge(self, obj):
        if obj.type == PaymentType.RECEIVED:
            return _badge('#6B8E5E', 'white', obj.get_type_display())
        return _badge('#E5C49A', '#2C1810', obj.get_type_display())
    type_badge.short_description = 'Type'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AuditEntry)
class AuditEntryAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'member', 'action', 'old_value', 'new_value', 'amount', 'performed_by']
    list_filter = ['action', 'performed_by', 'created_at']
    search_fields = ['member__email', 'notes']
    date_hierarchy = 'created_at'
    readonly_fields = [f.name for f in AuditEntry._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
