from django import forms
from django.contrib import admin
from .models import Setting
from .services import clean_setting_value, InvalidSettingError


class SettingAdminForm(forms.ModelForm):
    """Applies the same validation as the settings API."""

    class Meta:
        model = Setting
        fields = ['key', 'value']

    def clean(self):
        cleaned_data = super().clean()
        key = cleaned_data.get('key') or self.instance.key
        try:
            cleaned_data['value'] = clean_setting_value(key, cleaned_data.get('value'))
        except InvalidSettingError as e:
            raise forms.ValidationError(str(e))
        return cleaned_data


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    form = SettingAdminForm
    list_display = ['key', 'value', 'updated_at']
    readonly_fields = ['updated_at']
    ordering = ['key']

    def get_readonly_fields(self, request, obj=None):
        # The key is the primary key; changing it would create a new row
        if obj:
            return ['key', 'updated_at']
        return self.readonly_fields
